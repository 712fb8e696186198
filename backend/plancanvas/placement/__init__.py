from .resolver import Rect, find_overlaps, node_rect, rects_overlap, resolve
from .zones import (
    CANVAS_BOUNDS,
    DEFAULT_ZONE,
    KIND_ZONES,
    MIN_SPACING,
    Zone,
    default_anchor,
    default_size,
    grid_anchor,
    zone_for,
)

__all__ = [
    "Rect",
    "find_overlaps",
    "node_rect",
    "rects_overlap",
    "resolve",
    "CANVAS_BOUNDS",
    "DEFAULT_ZONE",
    "KIND_ZONES",
    "MIN_SPACING",
    "Zone",
    "default_anchor",
    "default_size",
    "grid_anchor",
    "zone_for",
]
