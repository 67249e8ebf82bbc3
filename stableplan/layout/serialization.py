"""Layout serialization — JSON conversion."""

from __future__ import annotations

from .models import Connection, Layout, PlacedUnit, new_uid


def unit_to_dict(u: PlacedUnit) -> dict:
    return {
        "uid": u.uid,
        "module_id": u.module_id,
        "x": u.x,
        "y": u.y,
        "rotation": u.rotation,
        "selected_extras": list(u.selected_extras),
    }


def connection_to_dict(c: Connection) -> dict:
    return {
        "a_uid": c.a_uid,
        "a_conn": c.a_conn,
        "b_uid": c.b_uid,
        "b_conn": c.b_conn,
    }


def layout_to_dict(layout: Layout) -> dict:
    """Serialize a Layout to a JSON-safe dict."""
    return {
        "units": [unit_to_dict(u) for u in layout.units],
        "connections": [connection_to_dict(c) for c in layout.connections],
        "selected_uid": layout.selected_uid,
    }


def parse_layout(data: dict, *, regenerate_uids: bool = True) -> Layout:
    """Parse a ``{units, connections}`` dict back into a Layout.

    With *regenerate_uids* every unit gets a fresh uid and connections
    are remapped, so a loaded template never collides with ids already
    in use.  The first unit becomes the selection.

    Raises ValueError when a field is missing or malformed, or when a
    connection references a unit that is not in the payload.
    """
    try:
        return _parse_layout(data, regenerate_uids)
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Missing/invalid field in layout: {exc!r}") from exc


def _parse_layout(data: dict, regenerate_uids: bool) -> Layout:
    uid_map: dict[str, str] = {}
    units: list[PlacedUnit] = []
    for u in data["units"]:
        uid = new_uid() if regenerate_uids else u["uid"]
        uid_map[u["uid"]] = uid
        units.append(PlacedUnit(
            uid=uid,
            module_id=u["module_id"],
            x=float(u["x"]),
            y=float(u["y"]),
            rotation=int(u["rotation"]) % 360,
            selected_extras=tuple(u.get("selected_extras") or ()),
        ))

    connections: list[Connection] = []
    for c in data.get("connections", []):
        if c["a_uid"] not in uid_map or c["b_uid"] not in uid_map:
            raise ValueError(
                f"Connection {c['a_uid']}:{c['a_conn']} <-> "
                f"{c['b_uid']}:{c['b_conn']} references an unknown unit"
            )
        connections.append(Connection(
            a_uid=uid_map[c["a_uid"]],
            a_conn=c["a_conn"],
            b_uid=uid_map[c["b_uid"]],
            b_conn=c["b_conn"],
        ))

    return Layout(
        units=tuple(units),
        connections=tuple(connections),
        selected_uid=units[0].uid if units else None,
    )
