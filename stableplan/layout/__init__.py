"""Layout engine — connector matching, placement, rotation, and pricing.

Public API::

    from stableplan.catalog import load_catalog
    from stableplan.layout import LayoutEngine

    engine = LayoutEngine(load_catalog())
    engine.reset()
"""

from stableplan.errors import (
    LayoutError, UnknownModule, UnknownUnit, UnknownExtra,
    NoCompatibleConnector, Overlap, RotationLocked, LastUnit, ConnectorInUse,
)

from .models import (
    PlacedUnit, Connection, Layout, Box, Candidate, RotationLock, new_uid,
)
from .geometry import (
    rotated_extents, rotate_point_in_unit, rotate_direction, bounding_box,
    overlaps, connector_world, origin_for_connector, front_face,
    cardinal_toward, area_weighted_centroid, layout_extents,
)
from .compatibility import PairingTable
from .matching import enumerate_candidates, best_candidate, nudge_clear
from .validity import find_collisions, is_valid_placement
from .transform import rotate_units
from .pricing import PriceOverrides, unit_cost, total_cost
from .serialization import layout_to_dict, parse_layout
from .templates import LayoutTemplate, DEFAULT_TEMPLATES, DEFAULT_TEMPLATE_ID, get_template
from .engine import LayoutEngine

__all__ = [
    # Errors
    "LayoutError", "UnknownModule", "UnknownUnit", "UnknownExtra",
    "NoCompatibleConnector", "Overlap", "RotationLocked", "LastUnit",
    "ConnectorInUse",
    # Models
    "PlacedUnit", "Connection", "Layout", "Box", "Candidate", "RotationLock",
    "new_uid",
    # Geometry
    "rotated_extents", "rotate_point_in_unit", "rotate_direction",
    "bounding_box", "overlaps", "connector_world", "origin_for_connector",
    "front_face", "cardinal_toward", "area_weighted_centroid", "layout_extents",
    # Matching
    "PairingTable", "enumerate_candidates", "best_candidate", "nudge_clear",
    "find_collisions", "is_valid_placement",
    # Transforms, pricing, persistence
    "rotate_units", "PriceOverrides", "unit_cost", "total_cost",
    "layout_to_dict", "parse_layout",
    "LayoutTemplate", "DEFAULT_TEMPLATES", "DEFAULT_TEMPLATE_ID", "get_template",
    # Engine
    "LayoutEngine",
]
