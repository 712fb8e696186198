from dataclasses import dataclass
from typing import Dict, Tuple

from plancanvas.ir import NodeKind, Position, Size

MIN_SPACING = 30.0

# (min, max) on both axes
CANVAS_BOUNDS: Tuple[float, float] = (-2000.0, 4000.0)


@dataclass(frozen=True)
class Zone:
    anchor: Position
    size: Size
    columns: int = 1


# Each stage gets its own band of the canvas, top to bottom in stage order.
KIND_ZONES: Dict[NodeKind, Zone] = {
    # ideation
    NodeKind.APP_NAME: Zone(Position(400, 50), Size(280, 80)),
    NodeKind.TAGLINE: Zone(Position(420, 170), Size(240, 40)),
    NodeKind.CORE_PROBLEM: Zone(Position(100, 250), Size(220, 160)),
    NodeKind.MISSION: Zone(Position(350, 250), Size(300, 140)),
    NodeKind.USER_PERSONA: Zone(Position(680, 250), Size(160, 140), columns=5),
    NodeKind.VALUE_PROP: Zone(Position(100, 600), Size(240, 180)),
    NodeKind.UI_STYLE: Zone(Position(370, 600), Size(180, 120)),
    NodeKind.TECH_STACK: Zone(Position(580, 600), Size(180, 120)),
    NodeKind.PLATFORM: Zone(Position(790, 600), Size(160, 80)),
    NodeKind.COMPETITOR: Zone(Position(980, 600), Size(140, 100), columns=4),

    # features
    NodeKind.FEATURE_PACK: Zone(Position(100, 900), Size(200, 100), columns=4),
    NodeKind.FEATURE: Zone(Position(100, 1050), Size(180, 120), columns=3),
    NodeKind.FEATURE_DESCRIPTION: Zone(Position(1000, 900), Size(260, 140)),
    NodeKind.ARCHITECTURE_BLUEPRINT: Zone(Position(1000, 1070), Size(220, 120)),

    # structure
    NodeKind.SCREEN: Zone(Position(100, 1500), Size(150, 100), columns=5),
    NodeKind.USER_FLOW: Zone(Position(1000, 1500), Size(200, 120), columns=2),

    # architecture
    NodeKind.DATABASE_TABLE: Zone(Position(100, 1900), Size(180, 100), columns=4),
    NodeKind.API_ENDPOINTS: Zone(Position(1000, 1900), Size(160, 80)),
    NodeKind.ROUTE: Zone(Position(1000, 2010), Size(140, 90), columns=3),

    # interface
    NodeKind.DESIGN_SYSTEM: Zone(Position(100, 2300), Size(160, 80)),
    NodeKind.BRANDING: Zone(Position(290, 2300), Size(140, 80)),
    NodeKind.LAYOUT: Zone(Position(460, 2300), Size(160, 80)),

    # auth
    NodeKind.AUTH_METHODS: Zone(Position(100, 2500), Size(180, 100)),
    NodeKind.USER_ROLES: Zone(Position(310, 2500), Size(180, 120)),
    NodeKind.SECURITY_FEATURES: Zone(Position(520, 2500), Size(180, 100)),

    NodeKind.NOTE: Zone(Position(1400, 50), Size(200, 120)),
}

DEFAULT_ZONE = Zone(Position(400, 400), Size(180, 100))


def zone_for(kind) -> Zone:
    return KIND_ZONES.get(kind, DEFAULT_ZONE)


def default_anchor(kind) -> Position:
    return zone_for(kind).anchor


def default_size(kind) -> Size:
    return zone_for(kind).size


def grid_anchor(kind, index: int, spacing: float = MIN_SPACING) -> Position:
    """
    Anchor for the index-th item of a collection kind: items fill rows of
    `columns` cells, left to right, then top to bottom.
    """
    zone = zone_for(kind)
    if index <= 0 or zone.columns <= 0:
        return zone.anchor
    row, col = divmod(index, zone.columns)
    return zone.anchor.offset(
        col * (zone.size.width + spacing),
        row * (zone.size.height + spacing),
    )
