"""Layout-level transforms."""

from __future__ import annotations

import logging
from dataclasses import replace

from stableplan.catalog.models import ModuleDef

from .geometry import area_weighted_centroid, bounding_box, rotated_extents
from .models import PlacedUnit


log = logging.getLogger(__name__)


def rotate_units(
    units: tuple[PlacedUnit, ...],
    catalog: dict[str, ModuleDef],
) -> tuple[PlacedUnit, ...]:
    """Rotate every unit 90° clockwise about the area-weighted centroid.

    Each unit's centre is rotated about the shared centroid and its
    origin recomputed from the new (possibly swapped) extents, so every
    connector point moves rigidly and existing joins still coincide.

    Returns *units* unchanged when the layout is empty or when some
    module does not allow the rotated orientation.
    """
    if not units:
        return units

    for u in units:
        mod = catalog[u.module_id]
        if (u.rotation + 90) % 360 not in mod.rotations:
            log.warning(
                "Layout rotation skipped: %s (%s) does not allow %d°",
                u.uid, mod.id, (u.rotation + 90) % 360,
            )
            return units

    boxes = [bounding_box(u, catalog[u.module_id]) for u in units]
    cx, cy = area_weighted_centroid(boxes)

    rotated: list[PlacedUnit] = []
    for u, b in zip(units, boxes):
        mod = catalog[u.module_id]
        ux, uy = b.center
        # Clockwise on a y-down plane: (dx, dy) -> (-dy, dx)
        ncx = cx - (uy - cy)
        ncy = cy + (ux - cx)
        rot = (u.rotation + 90) % 360
        w, d = rotated_extents(mod.width_ft, mod.depth_ft, rot)
        rotated.append(replace(u, x=ncx - w / 2, y=ncy - d / 2, rotation=rot))

    log.info("Rotated layout of %d units about (%.2f, %.2f)", len(units), cx, cy)
    return tuple(rotated)
