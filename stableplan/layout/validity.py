"""Overlap/validity checker for proposed placements."""

from __future__ import annotations

from stableplan.catalog.models import ModuleDef
from stableplan.config import LAYOUT_RULES

from .geometry import bounding_box, overlap_extents, rotated_extents
from .models import Box, PlacedUnit


def candidate_box(module: ModuleDef, x: float, y: float, rotation: int) -> Box:
    w, d = rotated_extents(module.width_ft, module.depth_ft, rotation)
    return Box(x, y, w, d)


def find_collisions(
    module: ModuleDef,
    x: float, y: float, rotation: int,
    units: tuple[PlacedUnit, ...] | list[PlacedUnit],
    catalog: dict[str, ModuleDef],
    *,
    exclude_uid: str | None = None,
    tolerance: float = LAYOUT_RULES.overlap_tolerance_ft,
) -> list[str]:
    """Return uids of units whose interior overlaps the candidate beyond *tolerance*.

    Boxes that touch, or overlap by no more than *tolerance* on either
    axis, are accepted.
    """
    box = candidate_box(module, x, y, rotation)
    hits: list[str] = []
    for u in units:
        if u.uid == exclude_uid:
            continue
        ox, oy = overlap_extents(box, bounding_box(u, catalog[u.module_id]))
        if ox > tolerance and oy > tolerance:
            hits.append(u.uid)
    return hits


def is_valid_placement(
    module: ModuleDef,
    x: float, y: float, rotation: int,
    units: tuple[PlacedUnit, ...] | list[PlacedUnit],
    catalog: dict[str, ModuleDef],
    *,
    exclude_uid: str | None = None,
    tolerance: float = LAYOUT_RULES.overlap_tolerance_ft,
) -> bool:
    """True when the candidate collides with no other unit."""
    return not find_collisions(
        module, x, y, rotation, units, catalog,
        exclude_uid=exclude_uid, tolerance=tolerance,
    )
