"""Shared layout policy for the modular layout engine.

The matching engine, the validity checker and the web server all read
their numeric policy from a single ``LayoutRules`` instance.  The values
here are the defaults; deployments may overlay a JSON file with
``load_rules``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path


@dataclass(frozen=True)
class LayoutRules:
    """Numeric policy for connector matching and overlap checks.

    All distances are in feet.
    """

    overlap_tolerance_ft: float = 0.5
    """Interior overlap (per axis) tolerated between two unit boxes.
    Connector joins produce exactly-touching boxes; rounding must not
    reject them."""

    alignment_threshold: float = 0.7
    """Minimum |dot| of two connector normals for a pairing to count as
    facing (``opposite``) or parallel (``same``)."""

    front_face_bonus: float = 0.2
    """Subtracted from a candidate's score when the new unit's front
    face points toward the centre of a bonus-kind unit."""

    bonus_kinds: tuple[str, ...] = ("corner",)
    """Module kinds whose centre attracts the front-face bonus."""

    snap_distance_ft: float = 2.0
    """Radius for snapping a dragged module onto a free connector."""

    epsilon: float = 1e-9

    # ── Derived helpers ────────────────────────────────────────────

    def facing(self, dot: float) -> bool:
        return dot < -self.alignment_threshold

    def parallel(self, dot: float) -> bool:
        return dot > self.alignment_threshold


# Module-level singleton
LAYOUT_RULES = LayoutRules()


def load_rules(path: Path | str, base: LayoutRules = LAYOUT_RULES) -> LayoutRules:
    """Overlay the keys of a JSON object file onto *base*.

    Unknown keys raise ``ValueError`` so typos do not silently fall back
    to defaults.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    known = {f.name for f in fields(LayoutRules)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown layout rule(s) in {path}: {', '.join(unknown)}")
    if "bonus_kinds" in raw:
        raw["bonus_kinds"] = tuple(raw["bonus_kinds"])
    return replace(base, **raw)
