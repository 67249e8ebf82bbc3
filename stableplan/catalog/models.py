"""Catalog dataclasses — typed representations of catalog/data/*.json entries."""

from __future__ import annotations

from dataclasses import dataclass, field


MODULE_KINDS = ("stable", "shelter", "corner", "tack_room")
VALID_ROTATIONS = (0, 90, 180, 270)


@dataclass(frozen=True)
class Connector:
    id: str                             # "W" | "E" | "N" | "S"
    role: str                           # "side" | "door_side" | "back" | "front"
    x: float                            # local frame, unrotated
    y: float
    nx: float                           # outward normal
    ny: float


@dataclass(frozen=True)
class Extra:
    id: str
    name: str
    price: float
    description: str = ""


@dataclass(frozen=True)
class DoorLeaf:
    width_ft: float
    hinge: str                          # "left" | "right"
    swing: str = "out"
    leaf: str | None = None


@dataclass(frozen=True)
class FrontFeature:
    """A span along the front face, consumed only by renderers."""
    type: str                           # "clad" | "panel" | "opening" | "window"
    from_x: float
    to_x: float | str                   # "W" = full width
    doors: tuple[DoorLeaf, ...] = ()


@dataclass(frozen=True)
class ModuleDef:
    id: str
    name: str
    kind: str
    width_ft: float
    depth_ft: float
    rotations: tuple[int, ...]
    base_price: float
    connectors: tuple[Connector, ...]
    extras: tuple[Extra, ...] = ()
    front_features: tuple[FrontFeature, ...] = ()
    source_file: str = ""               # path of the JSON file (for error reporting)

    def connector(self, connector_id: str) -> Connector | None:
        for c in self.connectors:
            if c.id == connector_id:
                return c
        return None

    def extra(self, extra_id: str) -> Extra | None:
        for e in self.extras:
            if e.id == extra_id:
                return e
        return None


@dataclass(frozen=True)
class PairingRule:
    """One row of the connector compatibility table.

    A connector of a module whose kind is in *kinds_a* and whose role is
    *role_a* may join a connector of a *kinds_b* module with role
    *role_b*.  *alignment* is the required relation between the two
    world-space outward normals: ``opposite`` (facing each other) or
    ``same`` (pointing the same way).  Rules are symmetric.
    """
    kinds_a: frozenset[str]
    role_a: str
    kinds_b: frozenset[str]
    role_b: str
    alignment: str                      # "opposite" | "same"


@dataclass
class ValidationError:
    module_id: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.module_id}] {self.field}: {self.message}"


@dataclass
class CatalogResult:
    """Result of loading the catalog — modules, pairing table + any validation errors."""
    modules: list[ModuleDef]
    pairing: list[PairingRule] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0

    def as_map(self) -> dict[str, ModuleDef]:
        return {m.id: m for m in self.modules}
