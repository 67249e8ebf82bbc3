"""Tests for connector pairing, scoring and best-candidate selection."""

from __future__ import annotations

import unittest

from stableplan.catalog import PairingRule, get_module
from stableplan.config import LAYOUT_RULES
from stableplan.layout import (
    PairingTable, PlacedUnit, best_candidate, connector_world,
    enumerate_candidates, is_valid_placement,
)
from stableplan.layout.scoring import alignment_score, front_face_bonus, score_candidate
from tests.stable_fixture import catalog, pairing


class TestPairingTable(unittest.TestCase):

    def test_symmetric_lookup(self):
        table = pairing()
        self.assertEqual(table.alignment("corner", "door_side", "stable", "side"), "same")
        self.assertEqual(table.alignment("stable", "side", "corner", "door_side"), "same")
        self.assertEqual(table.alignment("tack_room", "side", "shelter", "side"), "opposite")

    def test_unlisted_pair_is_incompatible(self):
        table = pairing()
        self.assertIsNone(table.alignment("corner", "door_side", "corner", "side"))
        self.assertIsNone(table.alignment("stable", "back", "stable", "side"))

    def test_first_rule_wins(self):
        table = PairingTable([
            PairingRule(frozenset({"stable"}), "side", frozenset({"stable"}), "side", "opposite"),
            PairingRule(frozenset({"stable"}), "side", frozenset({"stable"}), "side", "same"),
        ])
        self.assertEqual(table.alignment("stable", "side", "stable", "side"), "opposite")


class TestScoring(unittest.TestCase):

    def test_alignment_thresholds(self):
        self.assertEqual(alignment_score("opposite", -1.0, LAYOUT_RULES), 1.0)
        self.assertIsNone(alignment_score("opposite", 0.0, LAYOUT_RULES))
        self.assertEqual(alignment_score("same", 1.0, LAYOUT_RULES), 0.0)
        self.assertIsNone(alignment_score("same", -1.0, LAYOUT_RULES))
        self.assertIsNone(alignment_score("perpendicular", 0.0, LAYOUT_RULES))

    def test_front_face_bonus(self):
        # Joint below a corner centred at (8, 6): the centre is to the north
        self.assertEqual(front_face_bonus(180, (8, 6), (8, 12), LAYOUT_RULES), 0.2)
        self.assertEqual(front_face_bonus(0, (8, 6), (8, 12), LAYOUT_RULES), 0.0)

    def test_bonus_only_for_bonus_kinds(self):
        kw = dict(anchor_center=(8, 6), joint=(8, 12))
        with_bonus = score_candidate("same", 1.0, 180, LAYOUT_RULES, anchor_kind="corner", **kw)
        without = score_candidate("same", 1.0, 180, LAYOUT_RULES, anchor_kind="stable", **kw)
        self.assertAlmostEqual(with_bonus, -0.2)
        self.assertAlmostEqual(without, 0.0)


class TestBestCandidate(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.stable = get_module(catalog(), "stable_12x12")
        cls.corner = get_module(catalog(), "corner_16x12")
        cls.pairing = pairing()

    def _best(self, anchor, anchor_mod, conn_id, module):
        return best_candidate(
            anchor, anchor_mod, anchor_mod.connector(conn_id),
            module, self.pairing, LAYOUT_RULES,
        )

    def test_stable_to_stable_east(self):
        anchor = PlacedUnit("a", "stable_12x12", 0, 0, 0)
        cand = self._best(anchor, self.stable, "E", self.stable)
        self.assertEqual((cand.rotation, cand.connector_id), (0, "W"))
        self.assertAlmostEqual(cand.x, 12)
        self.assertAlmostEqual(cand.y, 0)
        self.assertFalse(cand.nudged)

    def test_candidates_put_connectors_on_the_joint(self):
        """Every enumerated candidate's connector lands on the anchor connector."""
        anchor = PlacedUnit("a", "stable_12x12", 5, 7, 90)
        target = self.stable.connector("E")
        ax, ay, anx, any_ = connector_world(anchor, self.stable, target)
        cands = enumerate_candidates(
            anchor, self.stable, target, self.stable, self.pairing, LAYOUT_RULES,
        )
        self.assertTrue(cands)
        for cand in cands:
            unit = PlacedUnit("n", self.stable.id, cand.x, cand.y, cand.rotation)
            x, y, nx, ny = connector_world(unit, self.stable, self.stable.connector(cand.connector_id))
            self.assertAlmostEqual(x, ax)
            self.assertAlmostEqual(y, ay)
            self.assertLess(nx * anx + ny * any_, -LAYOUT_RULES.alignment_threshold)

    def test_tie_keeps_first_found(self):
        # Rotation 0 / W and rotation 180 / E both score 1.0
        anchor = PlacedUnit("a", "stable_12x12", 0, 0, 0)
        cand = self._best(anchor, self.stable, "E", self.stable)
        self.assertEqual(cand.rotation, 0)

    def test_exact_join_preferred_over_nudged(self):
        # Corner W (side) meets the stable face to face; corner E (door_side)
        # would only fit by being pushed clear
        anchor = PlacedUnit("a", "stable_12x12", 0, 0, 0)
        cand = self._best(anchor, self.stable, "E", self.corner)
        self.assertEqual((cand.rotation, cand.connector_id), (0, "W"))
        self.assertFalse(cand.nudged)
        self.assertAlmostEqual(cand.x, 12)
        self.assertAlmostEqual(cand.y, 0)

    def test_corner_door_side_is_nudged_clear(self):
        anchor = PlacedUnit("c", "corner_16x12", 0, 0, 0)
        cand = self._best(anchor, self.corner, "E", self.stable)
        self.assertEqual((cand.rotation, cand.connector_id), (0, "E"))
        self.assertTrue(cand.nudged)
        self.assertAlmostEqual(cand.x, 16)
        self.assertAlmostEqual(cand.y, 0)

    def test_corner_back(self):
        anchor = PlacedUnit("c", "corner_16x12", 0, 0, 0)
        cand = self._best(anchor, self.corner, "N", self.stable)
        self.assertEqual((cand.rotation, cand.connector_id), (90, "E"))
        self.assertAlmostEqual(cand.x, 2)
        self.assertAlmostEqual(cand.y, -12)

    def test_no_compatible_pairing(self):
        anchor = PlacedUnit("c", "corner_16x12", 0, 0, 0)
        self.assertIsNone(self._best(anchor, self.corner, "E", self.corner))


class TestValidPlacement(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.modules = catalog().as_map()
        cls.stable = cls.modules["stable_12x12"]
        cls.units = (PlacedUnit("s1", "stable_12x12", 0, 0, 0),)

    def _valid(self, x, **kw):
        return is_valid_placement(self.stable, x, 0, 0, self.units, self.modules, **kw)

    def test_touching_is_valid(self):
        self.assertTrue(self._valid(12))

    def test_overlap_is_invalid(self):
        self.assertFalse(self._valid(6))

    def test_overlap_within_tolerance(self):
        self.assertTrue(self._valid(11.6))
        self.assertFalse(self._valid(11.6, tolerance=0))

    def test_excluded_unit_ignored(self):
        self.assertTrue(self._valid(6, exclude_uid="s1"))



if __name__ == "__main__":
    unittest.main()
