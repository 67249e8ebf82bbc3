"""Catalog loader — reads data/modules/*.json and data/pairing.json, parses and validates them."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from stableplan.errors import UnknownModule

from .models import (
    Connector, Extra, DoorLeaf, FrontFeature, ModuleDef, PairingRule,
    ValidationError, CatalogResult, MODULE_KINDS, VALID_ROTATIONS,
)


log = logging.getLogger(__name__)

CATALOG_DIR = Path(__file__).resolve().parent / "data"

_ALIGNMENTS = ("opposite", "same")
_FEATURE_TYPES = ("clad", "panel", "opening", "window")


# ── Validation ─────────────────────────────────────────────────────

def _validate_connector(mod: ModuleDef, c: Connector) -> list[ValidationError]:
    errs: list[ValidationError] = []
    f = f"connectors.{c.id}"
    w, d = mod.width_ft, mod.depth_ft

    if not (0 <= c.x <= w and 0 <= c.y <= d):
        errs.append(ValidationError(mod.id, f, f"Position ({c.x}, {c.y}) outside {w}x{d} footprint"))
        return errs

    # The outward normal must match the edge the connector sits on.
    expected: list[tuple[float, float]] = []
    if c.x == 0:
        expected.append((-1.0, 0.0))
    if c.x == w:
        expected.append((1.0, 0.0))
    if c.y == 0:
        expected.append((0.0, -1.0))
    if c.y == d:
        expected.append((0.0, 1.0))
    if not expected:
        errs.append(ValidationError(mod.id, f, "Connector is not on the perimeter"))
    elif (c.nx, c.ny) not in expected:
        errs.append(ValidationError(mod.id, f, f"Normal ({c.nx}, {c.ny}) does not point outward"))
    return errs


def _validate_module(mod: ModuleDef) -> list[ValidationError]:
    """Run all validation checks on a single module definition."""
    errs: list[ValidationError] = []
    mid = mod.id

    if mod.kind not in MODULE_KINDS:
        errs.append(ValidationError(mid, "kind", f"Unknown kind '{mod.kind}', expected one of {MODULE_KINDS}"))

    if mod.width_ft <= 0:
        errs.append(ValidationError(mid, "width_ft", "Must be > 0"))
    if mod.depth_ft <= 0:
        errs.append(ValidationError(mid, "depth_ft", "Must be > 0"))
    if mod.base_price < 0:
        errs.append(ValidationError(mid, "base_price", "Must be >= 0"))

    if not mod.rotations:
        errs.append(ValidationError(mid, "rotations", "At least one rotation is required"))
    for r in mod.rotations:
        if r not in VALID_ROTATIONS:
            errs.append(ValidationError(mid, "rotations", f"Invalid rotation {r}"))
    if len(set(mod.rotations)) != len(mod.rotations):
        errs.append(ValidationError(mid, "rotations", "Duplicate rotation"))

    footprint_ok = mod.width_ft > 0 and mod.depth_ft > 0
    seen: set[str] = set()
    for c in mod.connectors:
        if c.id in seen:
            errs.append(ValidationError(mid, f"connectors.{c.id}", "Duplicate connector ID"))
        seen.add(c.id)
        if footprint_ok:
            errs.extend(_validate_connector(mod, c))

    seen = set()
    for e in mod.extras:
        if e.id in seen:
            errs.append(ValidationError(mid, f"extras.{e.id}", "Duplicate extra ID"))
        seen.add(e.id)
        if e.price < 0:
            errs.append(ValidationError(mid, f"extras.{e.id}.price", "Must be >= 0"))

    for i, feat in enumerate(mod.front_features):
        if feat.type not in _FEATURE_TYPES:
            errs.append(ValidationError(mid, f"front_features[{i}]", f"Unknown type '{feat.type}'"))

    return errs


def _validate_rule(rule: PairingRule, index: int) -> list[ValidationError]:
    errs: list[ValidationError] = []
    for kind in rule.kinds_a | rule.kinds_b:
        if kind not in MODULE_KINDS:
            errs.append(ValidationError("_pairing", f"rules[{index}]", f"Unknown kind '{kind}'"))
    if rule.alignment not in _ALIGNMENTS:
        errs.append(ValidationError("_pairing", f"rules[{index}].alignment",
                                    f"Unknown alignment '{rule.alignment}'"))
    return errs


# ── Parsing ────────────────────────────────────────────────────────

def _parse_connector(data: dict) -> Connector:
    return Connector(
        id=data["id"],
        role=data.get("role", "side"),
        x=float(data["x"]),
        y=float(data["y"]),
        nx=float(data["nx"]),
        ny=float(data["ny"]),
    )


def _parse_extra(data: dict) -> Extra:
    return Extra(
        id=data["id"],
        name=data.get("name", data["id"]),
        price=float(data["price"]),
        description=data.get("description", ""),
    )


def _parse_feature(data: dict) -> FrontFeature:
    to_x = data["to_x"]
    return FrontFeature(
        type=data["type"],
        from_x=float(data["from_x"]),
        to_x=to_x if to_x == "W" else float(to_x),
        doors=tuple(
            DoorLeaf(
                width_ft=float(d["width_ft"]),
                hinge=d["hinge"],
                swing=d.get("swing", "out"),
                leaf=d.get("leaf"),
            )
            for d in data.get("doors", [])
        ),
    )


def _parse_module(data: dict, source_file: str = "") -> ModuleDef:
    return ModuleDef(
        id=data["id"],
        name=data["name"],
        kind=data["kind"],
        width_ft=float(data["width_ft"]),
        depth_ft=float(data["depth_ft"]),
        rotations=tuple(int(r) for r in data.get("rotations", VALID_ROTATIONS)),
        base_price=float(data["base_price"]),
        connectors=tuple(_parse_connector(c) for c in data["connectors"]),
        extras=tuple(_parse_extra(e) for e in data.get("extras", [])),
        front_features=tuple(_parse_feature(f) for f in data.get("front_features", [])),
        source_file=source_file,
    )


def _parse_rule(data: dict) -> PairingRule:
    a, b = data["a"], data["b"]
    return PairingRule(
        kinds_a=frozenset(a["kinds"]),
        role_a=a["role"],
        kinds_b=frozenset(b["kinds"]),
        role_b=b["role"],
        alignment=data["alignment"],
    )


def _load_pairing(path: Path, errors: list[ValidationError]) -> list[PairingRule]:
    if not path.exists():
        errors.append(ValidationError("_pairing", "file", f"{path.name} not found in {path.parent}"))
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        errors.append(ValidationError("_pairing", "json", f"Parse error: {exc}"))
        return []

    rules: list[PairingRule] = []
    for i, entry in enumerate(raw.get("rules", [])):
        try:
            rule = _parse_rule(entry)
        except (KeyError, TypeError) as exc:
            errors.append(ValidationError("_pairing", f"rules[{i}]", f"Missing/invalid field: {exc}"))
            continue
        errors.extend(_validate_rule(rule, i))
        rules.append(rule)
    return rules


# ── Public API ─────────────────────────────────────────────────────

def load_catalog(catalog_dir: Path | None = None) -> CatalogResult:
    """Load modules/*.json and pairing.json, parse and validate.

    Returns a CatalogResult with modules, pairing rules and any
    validation errors.  Modules that fail to parse are skipped (error
    recorded).  Modules that parse but have validation issues are still
    included.
    """
    d = catalog_dir or CATALOG_DIR
    modules: list[ModuleDef] = []
    errors: list[ValidationError] = []

    json_files = sorted((d / "modules").glob("*.json"))
    if not json_files:
        errors.append(ValidationError("_catalog", "files", f"No .json files found in {d / 'modules'}"))

    for path in json_files:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            errors.append(ValidationError(path.stem, "json", f"Parse error: {exc}"))
            continue
        except OSError as exc:
            errors.append(ValidationError(path.stem, "file", f"Read error: {exc}"))
            continue

        try:
            mod = _parse_module(raw, source_file=str(path))
        except (KeyError, TypeError, ValueError) as exc:
            errors.append(ValidationError(
                raw.get("id", path.stem), "parse", f"Missing/invalid field: {exc}"))
            continue

        errors.extend(_validate_module(mod))
        modules.append(mod)

    # Check for duplicate IDs across files
    id_counts: dict[str, int] = {}
    for mod in modules:
        id_counts[mod.id] = id_counts.get(mod.id, 0) + 1
    for mid, count in id_counts.items():
        if count > 1:
            errors.append(ValidationError(mid, "id", f"Duplicate module ID (appears {count} times)"))

    pairing = _load_pairing(d / "pairing.json", errors)

    if errors:
        log.warning("Catalog loaded with %d validation error(s)", len(errors))
    log.info("Loaded %d modules, %d pairing rules from %s", len(modules), len(pairing), d)
    return CatalogResult(modules=modules, pairing=pairing, errors=errors)


def get_module(catalog: dict[str, ModuleDef] | CatalogResult, module_id: str) -> ModuleDef:
    """Look up a module by ID.  Raises UnknownModule if not found."""
    mods = catalog.as_map() if isinstance(catalog, CatalogResult) else catalog
    mod = mods.get(module_id)
    if mod is None:
        raise UnknownModule(module_id)
    return mod
