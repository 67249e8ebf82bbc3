"""Placement model dataclasses."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


# ── Placement model ───────────────────────────────────────────────


@dataclass(frozen=True)
class PlacedUnit:
    """A module instance with a resolved world position and rotation.

    (x, y) is the top-left corner of the rotated bounding box, in feet.
    """

    uid: str
    module_id: str
    x: float
    y: float
    rotation: int   # 0, 90, 180, 270
    selected_extras: tuple[str, ...] = ()


@dataclass(frozen=True)
class Connection:
    """An unordered join between two (uid, connector id) endpoints."""

    a_uid: str
    a_conn: str
    b_uid: str
    b_conn: str

    def involves(self, uid: str) -> bool:
        return self.a_uid == uid or self.b_uid == uid

    def uses(self, uid: str, connector_id: str) -> bool:
        return (
            (self.a_uid == uid and self.a_conn == connector_id)
            or (self.b_uid == uid and self.b_conn == connector_id)
        )

    def endpoint(self, uid: str) -> str:
        """Connector id on *uid*'s side of the join."""
        return self.a_conn if self.a_uid == uid else self.b_conn

    def other(self, uid: str) -> tuple[str, str]:
        """(uid, connector id) of the endpoint that is not *uid*."""
        if self.a_uid == uid:
            return self.b_uid, self.b_conn
        return self.a_uid, self.a_conn


@dataclass(frozen=True)
class Layout:
    """Snapshot of the plan.  Replaced wholesale on every mutation."""

    units: tuple[PlacedUnit, ...] = ()
    connections: tuple[Connection, ...] = ()
    selected_uid: str | None = None

    def unit(self, uid: str) -> PlacedUnit | None:
        for u in self.units:
            if u.uid == uid:
                return u
        return None

    def connections_of(self, uid: str) -> list[Connection]:
        return [c for c in self.connections if c.involves(uid)]

    def is_used(self, uid: str, connector_id: str) -> bool:
        return any(c.uses(uid, connector_id) for c in self.connections)


@dataclass(frozen=True)
class Box:
    """World-space axis-aligned box (feet)."""

    x: float
    y: float
    w: float
    d: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.d / 2)


@dataclass
class Candidate:
    """A scored (rotation, connector) option for joining a module to a fixed connector."""

    module_id: str
    rotation: int
    connector_id: str
    x: float
    y: float
    score: float
    nudged: bool = False
    valid: bool = True
    colliding: list[str] = field(default_factory=list)


class RotationLock(Enum):
    """Rotation permission, derived from a unit's connection count."""

    FREE = "free"
    SINGLY_CONNECTED = "singly_connected"
    MULTIPLY_CONNECTED = "multiply_connected"

    @classmethod
    def for_count(cls, count: int) -> "RotationLock":
        if count == 0:
            return cls.FREE
        if count == 1:
            return cls.SINGLY_CONNECTED
        return cls.MULTIPLY_CONNECTED


def new_uid() -> str:
    """Generate a short unique unit id."""
    return str(uuid.uuid4())[:8]
