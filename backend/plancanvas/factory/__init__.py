from .node_factory import (
    DEFAULT_SUB_FEATURES,
    FEATURE_PACK_TITLES,
    create_node,
    create_user_node,
    node_id_for,
    payload_for,
    slugify,
    source_id_for,
)

__all__ = [
    "DEFAULT_SUB_FEATURES",
    "FEATURE_PACK_TITLES",
    "create_node",
    "create_user_node",
    "node_id_for",
    "payload_for",
    "slugify",
    "source_id_for",
]
