"""Built-in layout templates.

Templates are stored in the persisted ``{units, connections}`` format;
``LayoutEngine.reset`` loads them through ``parse_layout`` so uids are
always fresh.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutTemplate:
    id: str
    name: str
    description: str
    data: dict


def _unit(uid: str, module_id: str, x: float, y: float, rotation: int = 0) -> dict:
    return {"uid": uid, "module_id": module_id, "x": x, "y": y,
            "rotation": rotation, "selected_extras": []}


def _conn(a_uid: str, a_conn: str, b_uid: str, b_conn: str) -> dict:
    return {"a_uid": a_uid, "a_conn": a_conn, "b_uid": b_uid, "b_conn": b_conn}


DEFAULT_TEMPLATE_ID = "single_stable"

DEFAULT_TEMPLATES: list[LayoutTemplate] = [
    LayoutTemplate(
        id="single_stable",
        name="Single Stable",
        description="A single 12x12 stable unit",
        data={
            "units": [_unit("s1", "stable_12x12", 0, 0)],
            "connections": [],
        },
    ),
    LayoutTemplate(
        id="l_shaped_corner",
        name="L-Shaped Corner",
        description="A left-hand corner stable with one stable to the east and one below its front",
        data={
            "units": [
                _unit("corner1", "corner_lh_16x12", 0, 0),
                _unit("stable1", "stable_12x12", 16, 0),
                _unit("stable2", "stable_12x12", 2, 12, 90),
            ],
            "connections": [
                _conn("corner1", "E", "stable1", "W"),
                _conn("corner1", "S", "stable2", "W"),
            ],
        },
    ),
    LayoutTemplate(
        id="straight_row",
        name="Straight Row",
        description="Three stables in a straight line",
        data={
            "units": [
                _unit("row1", "stable_12x12", 0, 0),
                _unit("row2", "stable_12x12", 12, 0),
                _unit("row3", "stable_12x12", 24, 0),
            ],
            "connections": [
                _conn("row1", "E", "row2", "W"),
                _conn("row2", "E", "row3", "W"),
            ],
        },
    ),
    LayoutTemplate(
        id="stable_tack_row",
        name="Stables with Tack Room",
        description="Two stables flanking a central tack room",
        data={
            "units": [
                _unit("u1", "stable_12x12", 0, 0),
                _unit("tack1", "tack_room_12x12", 12, 0),
                _unit("u2", "stable_12x12", 24, 0),
            ],
            "connections": [
                _conn("u1", "E", "tack1", "W"),
                _conn("tack1", "E", "u2", "W"),
            ],
        },
    ),
]


def get_template(template_id: str) -> LayoutTemplate | None:
    for t in DEFAULT_TEMPLATES:
        if t.id == template_id:
            return t
    return None
