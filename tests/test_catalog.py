"""Tests for the module catalog loader and validation."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from stableplan.catalog import (
    CATALOG_DIR, catalog_to_dict, get_module, load_catalog, module_to_dict,
)
from stableplan.config import LAYOUT_RULES, load_rules
from stableplan.errors import UnknownModule


def _module(**overrides) -> dict:
    data = {
        "id": "test_stable",
        "name": "Test Stable",
        "kind": "stable",
        "width_ft": 12,
        "depth_ft": 12,
        "rotations": [0, 90, 180, 270],
        "base_price": 1000,
        "connectors": [
            {"id": "W", "role": "side", "x": 0, "y": 6, "nx": -1, "ny": 0},
            {"id": "E", "role": "side", "x": 12, "y": 6, "nx": 1, "ny": 0},
        ],
    }
    data.update(overrides)
    return data


class TestBundledCatalog(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.result = load_catalog()

    def test_loads_without_errors(self):
        self.assertTrue(self.result.ok, [str(e) for e in self.result.errors])

    def test_expected_modules_present(self):
        ids = {m.id for m in self.result.modules}
        for mid in ("stable_12x12", "shelter_12x12", "corner_16x12", "corner_lh_16x12",
                    "corner_rh_16x12", "tack_room_12x12"):
            self.assertIn(mid, ids)

    def test_handed_corners_mirror_door_side(self):
        lh = get_module(self.result, "corner_lh_16x12")
        rh = get_module(self.result, "corner_rh_16x12")
        self.assertEqual((lh.connector("W").role, lh.connector("E").role), ("door_side", "side"))
        self.assertEqual((rh.connector("W").role, rh.connector("E").role), ("side", "door_side"))

    def test_pairing_rules_loaded(self):
        self.assertGreater(len(self.result.pairing), 0)

    def test_get_module(self):
        mod = get_module(self.result, "corner_16x12")
        self.assertEqual(mod.kind, "corner")
        self.assertEqual(mod.connector("E").role, "door_side")
        self.assertIsNone(mod.connector("Z"))

    def test_get_module_unknown(self):
        with self.assertRaises(UnknownModule) as ctx:
            get_module(self.result, "barn_99x99")
        self.assertEqual(ctx.exception.to_dict()["module_id"], "barn_99x99")

    def test_serialization_is_json_safe(self):
        payload = catalog_to_dict(self.result)
        json.dumps(payload)
        self.assertEqual(payload["module_count"], len(self.result.modules))
        stable = module_to_dict(get_module(self.result, "stable_12x12"))
        self.assertEqual(stable["front_features"][-1]["to_x"], "W")
        self.assertEqual(stable["front_features"][1]["doors"][0]["hinge"], "right")


class TestCatalogValidation(unittest.TestCase):
    """Write small catalogs to a temp dir and check the reported errors."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        (self.dir / "modules").mkdir()
        (self.dir / "pairing.json").write_text(
            (CATALOG_DIR / "pairing.json").read_text(encoding="utf-8"), encoding="utf-8",
        )

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, name: str, data) -> None:
        text = data if isinstance(data, str) else json.dumps(data)
        (self.dir / "modules" / name).write_text(text, encoding="utf-8")

    def _fields(self, result) -> set[str]:
        return {e.field for e in result.errors}

    def test_valid_module(self):
        self._write("ok.json", _module())
        result = load_catalog(self.dir)
        self.assertTrue(result.ok, [str(e) for e in result.errors])
        self.assertEqual(len(result.modules), 1)

    def test_connector_off_perimeter(self):
        self._write("bad.json", _module(connectors=[
            {"id": "X", "role": "side", "x": 6, "y": 6, "nx": 1, "ny": 0},
        ]))
        result = load_catalog(self.dir)
        self.assertIn("connectors.X", self._fields(result))

    def test_connector_normal_points_inward(self):
        self._write("bad.json", _module(connectors=[
            {"id": "E", "role": "side", "x": 12, "y": 6, "nx": -1, "ny": 0},
        ]))
        result = load_catalog(self.dir)
        self.assertIn("connectors.E", self._fields(result))

    def test_bad_kind_size_and_rotation(self):
        self._write("bad.json", _module(kind="silo", width_ft=0, rotations=[0, 45]))
        fields = self._fields(load_catalog(self.dir))
        self.assertIn("kind", fields)
        self.assertIn("width_ft", fields)
        self.assertIn("rotations", fields)

    def test_duplicate_connector_and_extra_ids(self):
        extras = [{"id": "window", "price": 100}, {"id": "window", "price": 120}]
        conns = _module()["connectors"] * 2
        self._write("bad.json", _module(connectors=conns, extras=extras))
        fields = self._fields(load_catalog(self.dir))
        self.assertIn("connectors.W", fields)
        self.assertIn("extras.window", fields)

    def test_duplicate_module_ids(self):
        self._write("a.json", _module())
        self._write("b.json", _module())
        result = load_catalog(self.dir)
        self.assertIn("id", self._fields(result))

    def test_unparseable_file_skipped(self):
        self._write("broken.json", "{not json")
        self._write("ok.json", _module())
        result = load_catalog(self.dir)
        self.assertEqual(len(result.modules), 1)
        self.assertIn("json", self._fields(result))

    def test_missing_field_skipped(self):
        data = _module()
        del data["base_price"]
        self._write("missing.json", data)
        result = load_catalog(self.dir)
        self.assertEqual(result.modules, [])
        self.assertIn("parse", self._fields(result))

    def test_bad_pairing_rule(self):
        self._write("ok.json", _module())
        (self.dir / "pairing.json").write_text(json.dumps({"rules": [
            {"a": {"kinds": ["stable"], "role": "side"},
             "b": {"kinds": ["stable"], "role": "side"},
             "alignment": "sideways"},
        ]}), encoding="utf-8")
        result = load_catalog(self.dir)
        self.assertIn("rules[0].alignment", self._fields(result))


class TestLayoutRules(unittest.TestCase):

    def test_defaults(self):
        self.assertEqual(LAYOUT_RULES.overlap_tolerance_ft, 0.5)
        self.assertTrue(LAYOUT_RULES.facing(-1.0))
        self.assertFalse(LAYOUT_RULES.facing(-0.5))
        self.assertTrue(LAYOUT_RULES.parallel(0.9))

    def test_load_rules_overlay(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rules.json"
            path.write_text(json.dumps({"snap_distance_ft": 3.5, "bonus_kinds": ["corner", "shelter"]}))
            rules = load_rules(path)
        self.assertEqual(rules.snap_distance_ft, 3.5)
        self.assertEqual(rules.bonus_kinds, ("corner", "shelter"))
        self.assertEqual(rules.overlap_tolerance_ft, LAYOUT_RULES.overlap_tolerance_ft)

    def test_load_rules_rejects_unknown_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rules.json"
            path.write_text(json.dumps({"snap_distanse_ft": 3.5}))
            with self.assertRaises(ValueError):
                load_rules(path)


if __name__ == "__main__":
    unittest.main()
