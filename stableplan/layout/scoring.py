"""Candidate scoring for connector joins.  Lower scores are better."""

from __future__ import annotations

from stableplan.config import LayoutRules

from .geometry import cardinal_toward, front_face


def alignment_score(alignment: str, dot: float, rules: LayoutRules) -> float | None:
    """Score a pair of world normals under a pairing rule.

    ``opposite`` needs the normals to face each other (dot < -t) and
    scores -dot; ``same`` needs them parallel (dot > t) and scores
    1 - dot.  Returns None when the pair fails the threshold.
    """
    if alignment == "opposite":
        if not rules.facing(dot):
            return None
        return -dot
    if alignment == "same":
        if not rules.parallel(dot):
            return None
        return 1.0 - dot
    return None


def front_face_bonus(
    rotation: int,
    anchor_center: tuple[float, float],
    joint: tuple[float, float],
    rules: LayoutRules,
) -> float:
    """Bonus (to subtract) when the new unit's front faces the anchor's centre.

    *joint* is the world position of the shared connector point.
    """
    toward = cardinal_toward(anchor_center[0] - joint[0], anchor_center[1] - joint[1])
    if front_face(rotation) == toward:
        return rules.front_face_bonus
    return 0.0


def score_candidate(
    alignment: str,
    dot: float,
    rotation: int,
    rules: LayoutRules,
    *,
    anchor_kind: str,
    anchor_center: tuple[float, float],
    joint: tuple[float, float],
) -> float | None:
    """Full score for one (rotation, connector) candidate, or None if rejected."""
    score = alignment_score(alignment, dot, rules)
    if score is None:
        return None
    if anchor_kind in rules.bonus_kinds:
        score -= front_face_bonus(rotation, anchor_center, joint, rules)
    return score
