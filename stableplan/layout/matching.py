"""Connector matching — pick the rotation and connector that best joins a module to a fixed connector."""

from __future__ import annotations

import logging

from stableplan.catalog.models import Connector, ModuleDef
from stableplan.config import LayoutRules

from .compatibility import PairingTable
from .geometry import (
    bounding_box, connector_world, origin_for_connector, overlap_extents,
    rotate_direction,
)
from .models import Candidate, PlacedUnit
from .scoring import score_candidate
from .validity import candidate_box


log = logging.getLogger(__name__)


def enumerate_candidates(
    anchor: PlacedUnit,
    anchor_module: ModuleDef,
    anchor_connector: Connector,
    module: ModuleDef,
    pairing: PairingTable,
    rules: LayoutRules,
) -> list[Candidate]:
    """All compatible (rotation, connector) candidates, in enumeration order.

    Each candidate's origin puts its connector exactly on the anchor
    connector's world position.
    """
    ax, ay, anx, any_ = connector_world(anchor, anchor_module, anchor_connector)
    anchor_center = bounding_box(anchor, anchor_module).center

    candidates: list[Candidate] = []
    for rotation in module.rotations:
        for conn in module.connectors:
            alignment = pairing.alignment(
                anchor_module.kind, anchor_connector.role, module.kind, conn.role,
            )
            if alignment is None:
                continue

            vnx, vny = rotate_direction(conn.nx, conn.ny, rotation)
            dot = vnx * anx + vny * any_
            score = score_candidate(
                alignment, dot, rotation, rules,
                anchor_kind=anchor_module.kind,
                anchor_center=anchor_center,
                joint=(ax, ay),
            )
            if score is None:
                continue

            x, y = origin_for_connector(ax, ay, module, conn, rotation)
            candidates.append(Candidate(
                module_id=module.id,
                rotation=rotation,
                connector_id=conn.id,
                x=x, y=y,
                score=score,
            ))
    return candidates


def nudge_clear(
    module: ModuleDef,
    x: float, y: float, rotation: int,
    anchor: PlacedUnit,
    anchor_module: ModuleDef,
    anchor_connector: Connector,
    rules: LayoutRules,
) -> tuple[float, float, bool]:
    """Push a placement that sits inside its anchor out along the anchor normal.

    The shift is the placement's own rotated extent on the normal's
    axis, which leaves the two boxes exactly touching.  Returns the
    (possibly shifted) origin and whether it moved.
    """
    box = candidate_box(module, x, y, rotation)
    ox, oy = overlap_extents(box, bounding_box(anchor, anchor_module))
    tol = rules.overlap_tolerance_ft
    if not (ox > tol and oy > tol):
        return x, y, False

    _, _, nx, ny = connector_world(anchor, anchor_module, anchor_connector)
    return x + round(nx) * box.w, y + round(ny) * box.d, True


def best_candidate(
    anchor: PlacedUnit,
    anchor_module: ModuleDef,
    anchor_connector: Connector,
    module: ModuleDef,
    pairing: PairingTable,
    rules: LayoutRules,
) -> Candidate | None:
    """Best candidate for joining *module* to the anchor connector.

    Every candidate is nudged clear of the anchor first.  Exact joins
    (connector points coincide, no nudge) rank ahead of nudged ones;
    within each group the lowest score wins and the first found wins
    ties.  Returns None when no rotation × connector pairing is
    compatible.
    """
    best: Candidate | None = None
    for cand in enumerate_candidates(
        anchor, anchor_module, anchor_connector, module, pairing, rules,
    ):
        cand.x, cand.y, cand.nudged = nudge_clear(
            module, cand.x, cand.y, cand.rotation,
            anchor, anchor_module, anchor_connector, rules,
        )
        log.debug(
            "candidate %s rot=%d conn=%s at (%.2f, %.2f) score=%.3f%s",
            cand.module_id, cand.rotation, cand.connector_id, cand.x, cand.y,
            cand.score, " nudged" if cand.nudged else "",
        )
        if best is None:
            best = cand
        elif cand.nudged != best.nudged:
            if best.nudged:
                best = cand
        elif cand.score < best.score - rules.epsilon:
            best = cand
    return best
