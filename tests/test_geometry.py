"""Tests for the geometry kernel (rotated rectangles, connectors, aggregates)."""

from __future__ import annotations

import unittest

from stableplan.catalog import get_module
from stableplan.layout import (
    Box, PlacedUnit, area_weighted_centroid, bounding_box, cardinal_toward,
    connector_world, front_face, layout_extents, origin_for_connector,
    overlaps, rotate_direction, rotate_point_in_unit, rotated_extents,
)
from tests.stable_fixture import catalog


class TestRotationHelpers(unittest.TestCase):

    def test_rotated_extents_swap(self):
        self.assertEqual(rotated_extents(16, 12, 0), (16, 12))
        self.assertEqual(rotated_extents(16, 12, 90), (12, 16))
        self.assertEqual(rotated_extents(16, 12, 180), (16, 12))
        self.assertEqual(rotated_extents(16, 12, 270), (12, 16))

    def test_rotate_point_quarter_turns(self):
        # Top-right corner of a 16x12 box, y down
        self.assertEqual(rotate_point_in_unit(16, 0, 16, 12, 0), (16, 0))
        self.assertEqual(rotate_point_in_unit(16, 0, 16, 12, 90), (12, 16))
        self.assertEqual(rotate_point_in_unit(16, 0, 16, 12, 180), (0, 12))
        self.assertEqual(rotate_point_in_unit(16, 0, 16, 12, 270), (0, 0))

    def test_rotate_point_stays_inside_box(self):
        for rot in (0, 90, 180, 270):
            w, d = rotated_extents(16, 12, rot)
            for (x, y) in [(0, 0), (16, 12), (8, 6), (3, 11)]:
                px, py = rotate_point_in_unit(x, y, 16, 12, rot)
                self.assertTrue(0 <= px <= w and 0 <= py <= d, (rot, x, y))

    def test_four_quarter_turns_are_identity(self):
        """Applying 90° four times returns every point and direction."""
        for (x, y) in [(0, 6), (16, 6), (8, 0), (5, 9)]:
            w, d = 16.0, 12.0
            px, py = x, y
            for _ in range(4):
                px, py = rotate_point_in_unit(px, py, w, d, 90)
                w, d = d, w
            self.assertAlmostEqual(px, x)
            self.assertAlmostEqual(py, y)

        for (nx, ny) in [(1, 0), (0, 1), (-1, 0), (0, -1)]:
            vx, vy = nx, ny
            for _ in range(4):
                vx, vy = rotate_direction(vx, vy, 90)
            self.assertEqual((vx, vy), (nx, ny))

    def test_rotate_direction_clockwise(self):
        # East turns to south on a y-down plane
        self.assertEqual(rotate_direction(1, 0, 90), (0, 1))
        self.assertEqual(rotate_direction(1, 0, 180), (-1, 0))
        self.assertEqual(rotate_direction(1, 0, 270), (0, -1))

    def test_front_face_and_cardinal(self):
        self.assertEqual([front_face(r) for r in (0, 90, 180, 270)], ["S", "W", "N", "E"])
        self.assertEqual(cardinal_toward(5, 1), "E")
        self.assertEqual(cardinal_toward(-5, 1), "W")
        self.assertEqual(cardinal_toward(0, 3), "S")
        self.assertEqual(cardinal_toward(1, -3), "N")
        self.assertEqual(cardinal_toward(2, 2), "E")     # tie goes to x


class TestBoxes(unittest.TestCase):

    def test_overlaps_strict_and_symmetric(self):
        a = Box(0, 0, 12, 12)
        touching = Box(12, 0, 12, 12)
        inside = Box(6, 6, 12, 12)
        apart = Box(30, 0, 12, 12)
        self.assertFalse(overlaps(a, touching))
        self.assertTrue(overlaps(a, inside))
        self.assertFalse(overlaps(a, apart))
        for b in (touching, inside, apart):
            self.assertEqual(overlaps(a, b), overlaps(b, a))

    def test_bounding_box_uses_rotated_extents(self):
        mod = get_module(catalog(), "corner_16x12")
        box = bounding_box(PlacedUnit("u", mod.id, 3, 4, 90), mod)
        self.assertEqual((box.x, box.y, box.w, box.d), (3, 4, 12, 16))

    def test_area_weighted_centroid(self):
        cx, cy = area_weighted_centroid([Box(0, 0, 12, 12), Box(12, 0, 24, 12)])
        # Centres (6, 6) weight 144 and (24, 6) weight 288
        self.assertAlmostEqual(cx, 18.0)
        self.assertAlmostEqual(cy, 6.0)

    def test_layout_extents(self):
        self.assertEqual(layout_extents([]), (0.0, 0.0, 0.0, 0.0))
        ext = layout_extents([Box(0, 0, 12, 12), Box(12, -4, 12, 12)])
        self.assertEqual(tuple(ext), (0.0, -4.0, 24.0, 12.0))


class TestConnectors(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.stable = get_module(catalog(), "stable_12x12")
        cls.corner = get_module(catalog(), "corner_16x12")

    def test_connector_world_rotated(self):
        unit = PlacedUnit("c", "corner_16x12", 10, 20, 90)
        x, y, nx, ny = connector_world(unit, self.corner, self.corner.connector("N"))
        # N (8, 0) facing up becomes the east edge facing right
        self.assertEqual((x, y), (22, 28))
        self.assertEqual((nx, ny), (1, 0))

    def test_origin_for_connector_inverts_connector_world(self):
        conn = self.stable.connector("W")
        for rot in (0, 90, 180, 270):
            ox, oy = origin_for_connector(40, 7, self.stable, conn, rot)
            x, y, _, _ = connector_world(
                PlacedUnit("u", self.stable.id, ox, oy, rot), self.stable, conn,
            )
            self.assertAlmostEqual(x, 40)
            self.assertAlmostEqual(y, 7)


if __name__ == "__main__":
    unittest.main()
