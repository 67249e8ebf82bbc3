"""Layout engine — the stateful public API over the placement model.

Every operation computes a complete new ``Layout`` and swaps it in with a
single assignment.  Failures raise a ``LayoutError`` before that swap, so
the committed layout is never partially updated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from stableplan.catalog.loader import get_module
from stableplan.catalog.models import CatalogResult, Connector, ModuleDef
from stableplan.config import LAYOUT_RULES, LayoutRules
from stableplan.errors import (
    ConnectorInUse, LastUnit, NoCompatibleConnector, Overlap,
    RotationLocked, UnknownExtra, UnknownUnit,
)

from .compatibility import PairingTable
from .geometry import (
    bounding_box, connector_world, layout_extents, origin_for_connector,
    rotated_extents,
)
from .matching import best_candidate, nudge_clear
from .models import (
    Candidate, Connection, Layout, PlacedUnit, RotationLock, new_uid,
)
from .pricing import PriceOverrides, total_cost
from .serialization import layout_to_dict, parse_layout
from .templates import DEFAULT_TEMPLATE_ID, get_template
from .transform import rotate_units
from .validity import find_collisions


log = logging.getLogger(__name__)


class LayoutEngine:
    """Owns one Layout and applies all-or-nothing edits to it.

    Usage::

        engine = LayoutEngine(load_catalog())
        engine.reset()                                  # single stable_12x12
        first = engine.get_layout().units[0]
        second = engine.attach(first.uid, "E", "stable_12x12")
        engine.rotate_unit(second.uid)
        engine.total_cost()
    """

    def __init__(
        self,
        catalog: CatalogResult | dict[str, ModuleDef],
        *,
        pairing: PairingTable | None = None,
        rules: LayoutRules = LAYOUT_RULES,
        layout: Layout | None = None,
    ) -> None:
        if isinstance(catalog, CatalogResult):
            self._catalog = catalog.as_map()
            pairing_rules = catalog.pairing
        else:
            self._catalog = dict(catalog)
            pairing_rules = []
        self._pairing = pairing if pairing is not None else PairingTable(pairing_rules)
        self.rules = rules
        self._layout = Layout()
        if layout is not None:
            self._check_layout(layout)
            self._layout = layout

    # ── Lookups ───────────────────────────────────────────────────

    def _module(self, module_id: str) -> ModuleDef:
        return get_module(self._catalog, module_id)

    def _unit(self, uid: str) -> PlacedUnit:
        unit = self._layout.unit(uid)
        if unit is None:
            raise UnknownUnit(uid)
        return unit

    def _connector(self, unit: PlacedUnit, connector_id: str, module_id: str) -> Connector:
        conn = self._module(unit.module_id).connector(connector_id)
        if conn is None:
            raise NoCompatibleConnector(module_id, unit.uid, connector_id)
        return conn

    def _check_layout(self, layout: Layout) -> None:
        """Raise ValueError unless *layout* is a plan the engine could have built.

        Unknown modules raise UnknownModule instead.
        """
        if not layout.units:
            raise ValueError("Layout has no units")

        seen: set[str] = set()
        for u in layout.units:
            if u.uid in seen:
                raise ValueError(f"Duplicate unit id '{u.uid}'")
            seen.add(u.uid)
            mod = self._module(u.module_id)
            if u.rotation not in mod.rotations:
                raise ValueError(
                    f"Unit '{u.uid}': rotation {u.rotation} not allowed for '{mod.id}'"
                )
            for extra_id in u.selected_extras:
                if mod.extra(extra_id) is None:
                    raise ValueError(f"Unit '{u.uid}': '{mod.id}' has no extra '{extra_id}'")

        for i, u in enumerate(layout.units):
            colliding = find_collisions(
                self._module(u.module_id), u.x, u.y, u.rotation,
                layout.units[i + 1:], self._catalog,
                tolerance=self.rules.overlap_tolerance_ft,
            )
            if colliding:
                raise ValueError(f"Units '{u.uid}' and '{colliding[0]}' overlap")

        used: set[tuple[str, str]] = set()
        for c in layout.connections:
            if c.a_uid == c.b_uid:
                raise ValueError(f"Connection joins '{c.a_uid}' to itself")
            for uid, cid in ((c.a_uid, c.a_conn), (c.b_uid, c.b_conn)):
                unit = layout.unit(uid)
                if unit is None:
                    raise ValueError(f"Connection references unknown unit '{uid}'")
                if self._module(unit.module_id).connector(cid) is None:
                    raise ValueError(f"Unit '{uid}' has no connector '{cid}'")
                if (uid, cid) in used:
                    raise ValueError(f"Connector '{uid}:{cid}' is used twice")
                used.add((uid, cid))

        if layout.selected_uid is not None and layout.selected_uid not in seen:
            raise ValueError(f"Selected unit '{layout.selected_uid}' is not in the layout")

    def _commit(self, layout: Layout) -> None:
        self._layout = layout

    # ── Read-only surface ─────────────────────────────────────────

    def list_modules(self) -> list[ModuleDef]:
        return list(self._catalog.values())

    def get_layout(self) -> Layout:
        return self._layout

    @property
    def selected(self) -> PlacedUnit | None:
        if self._layout.selected_uid is None:
            return None
        return self._layout.unit(self._layout.selected_uid)

    def rotation_lock(self, uid: str) -> RotationLock:
        self._unit(uid)
        return RotationLock.for_count(len(self._layout.connections_of(uid)))

    def box(self, uid: str):
        unit = self._unit(uid)
        return bounding_box(unit, self._module(unit.module_id))

    def connector_position(self, uid: str, connector_id: str) -> tuple[float, float, float, float]:
        """World (x, y, nx, ny) of a connector on a placed unit."""
        unit = self._unit(uid)
        mod = self._module(unit.module_id)
        return connector_world(unit, mod, self._connector(unit, connector_id, mod.id))

    def extents(self) -> tuple[float, float, float, float]:
        boxes = [bounding_box(u, self._module(u.module_id)) for u in self._layout.units]
        return layout_extents(boxes)

    def total_cost(self, overrides: PriceOverrides | dict | None = None) -> float:
        if isinstance(overrides, dict):
            overrides = PriceOverrides.from_dict(overrides)
        return total_cost(self._layout.units, self._catalog, overrides)

    def to_dict(self) -> dict:
        return layout_to_dict(self._layout)

    # ── Matching ──────────────────────────────────────────────────

    def _solve(
        self,
        anchor: PlacedUnit,
        anchor_connector: Connector,
        module: ModuleDef,
        *,
        exclude_uid: str | None = None,
    ) -> Candidate:
        """Best candidate joining *module* to the anchor connector, checked for overlap."""
        cand = best_candidate(
            anchor, self._module(anchor.module_id), anchor_connector,
            module, self._pairing, self.rules,
        )
        if cand is None:
            raise NoCompatibleConnector(module.id, anchor.uid, anchor_connector.id)

        colliding = find_collisions(
            module, cand.x, cand.y, cand.rotation,
            self._layout.units, self._catalog,
            exclude_uid=exclude_uid,
            tolerance=self.rules.overlap_tolerance_ft,
        )
        if colliding:
            raise Overlap(module.id, colliding)
        return cand

    def preview_attach(
        self, existing_uid: str, connector_id: str, module_id: str,
    ) -> Candidate | None:
        """Where ``attach`` would put *module_id*, without changing the layout.

        Returns None when no pairing is compatible.  The candidate's
        ``valid`` flag reports whether it would pass the overlap check.
        """
        anchor = self._unit(existing_uid)
        module = self._module(module_id)
        conn = self._connector(anchor, connector_id, module_id)
        cand = best_candidate(
            anchor, self._module(anchor.module_id), conn,
            module, self._pairing, self.rules,
        )
        if cand is None:
            return None
        cand.colliding = find_collisions(
            module, cand.x, cand.y, cand.rotation,
            self._layout.units, self._catalog,
            tolerance=self.rules.overlap_tolerance_ft,
        )
        cand.valid = not cand.colliding and not self._layout.is_used(existing_uid, connector_id)
        return cand

    def nearest_connector(
        self, x: float, y: float, snap_distance: float | None = None,
    ) -> tuple[str, str, float] | None:
        """Nearest free connector within the snap distance, as (uid, connector id, distance)."""
        limit = self.rules.snap_distance_ft if snap_distance is None else snap_distance
        nearest: tuple[str, str, float] | None = None
        for u in self._layout.units:
            mod = self._module(u.module_id)
            for conn in mod.connectors:
                if self._layout.is_used(u.uid, conn.id):
                    continue
                cx, cy, _, _ = connector_world(u, mod, conn)
                dist = math.hypot(cx - x, cy - y)
                if dist < limit and (nearest is None or dist < nearest[2]):
                    nearest = (u.uid, conn.id, dist)
        return nearest

    # ── Mutations ─────────────────────────────────────────────────

    def attach(self, existing_uid: str, connector_id: str, module_id: str) -> PlacedUnit:
        """Add a new *module_id* unit joined to a free connector of an existing unit."""
        anchor = self._unit(existing_uid)
        module = self._module(module_id)
        conn = self._connector(anchor, connector_id, module_id)
        if self._layout.is_used(existing_uid, connector_id):
            raise ConnectorInUse(existing_uid, connector_id)

        cand = self._solve(anchor, conn, module)
        unit = PlacedUnit(
            uid=new_uid(),
            module_id=module.id,
            x=cand.x, y=cand.y,
            rotation=cand.rotation,
        )
        layout = self._layout
        self._commit(Layout(
            units=layout.units + (unit,),
            connections=layout.connections + (
                Connection(existing_uid, connector_id, unit.uid, cand.connector_id),
            ),
            selected_uid=unit.uid,
        ))
        log.info(
            "Attached %s (%s) to %s:%s at (%.2f, %.2f) rot=%d° via %s%s",
            unit.uid, module.id, existing_uid, connector_id,
            unit.x, unit.y, unit.rotation, cand.connector_id,
            " (nudged)" if cand.nudged else "",
        )
        return unit

    def reconnect(self, uid: str, target_uid: str, target_connector_id: str) -> PlacedUnit:
        """Re-join an existing unit to a different connector.

        All of the unit's previous connections are replaced by the single
        new one.
        """
        unit = self._unit(uid)
        module = self._module(unit.module_id)
        target = self._unit(target_uid)
        if target_uid == uid:
            raise NoCompatibleConnector(module.id, target_uid, target_connector_id)
        conn = self._connector(target, target_connector_id, module.id)

        remaining = tuple(c for c in self._layout.connections if not c.involves(uid))
        if any(c.uses(target_uid, target_connector_id) for c in remaining):
            raise ConnectorInUse(target_uid, target_connector_id)

        cand = self._solve(target, conn, module, exclude_uid=uid)
        moved = replace(unit, x=cand.x, y=cand.y, rotation=cand.rotation)
        self._commit(Layout(
            units=tuple(moved if u.uid == uid else u for u in self._layout.units),
            connections=remaining + (
                Connection(target_uid, target_connector_id, uid, cand.connector_id),
            ),
            selected_uid=uid,
        ))
        log.info(
            "Reconnected %s to %s:%s at (%.2f, %.2f) rot=%d°",
            uid, target_uid, target_connector_id, moved.x, moved.y, moved.rotation,
        )
        return moved

    def place_free(self, module_id: str, x: float, y: float) -> PlacedUnit:
        """Add an unconnected unit centred on (x, y)."""
        module = self._module(module_id)
        rotation = module.rotations[0]
        w, d = rotated_extents(module.width_ft, module.depth_ft, rotation)
        ox, oy = x - w / 2, y - d / 2

        colliding = find_collisions(
            module, ox, oy, rotation, self._layout.units, self._catalog,
            tolerance=self.rules.overlap_tolerance_ft,
        )
        if colliding:
            raise Overlap(module.id, colliding)

        unit = PlacedUnit(uid=new_uid(), module_id=module.id, x=ox, y=oy, rotation=rotation)
        self._commit(Layout(
            units=self._layout.units + (unit,),
            connections=self._layout.connections,
            selected_uid=unit.uid,
        ))
        log.info("Placed %s (%s) at (%.2f, %.2f)", unit.uid, module.id, ox, oy)
        return unit

    def move_unit(self, uid: str, x: float, y: float) -> PlacedUnit:
        """Move a unit's origin to (x, y), detaching all of its connections."""
        unit = self._unit(uid)
        module = self._module(unit.module_id)
        colliding = find_collisions(
            module, x, y, unit.rotation, self._layout.units, self._catalog,
            exclude_uid=uid, tolerance=self.rules.overlap_tolerance_ft,
        )
        if colliding:
            raise Overlap(module.id, colliding)

        moved = replace(unit, x=x, y=y)
        self._commit(Layout(
            units=tuple(moved if u.uid == uid else u for u in self._layout.units),
            connections=tuple(c for c in self._layout.connections if not c.involves(uid)),
            selected_uid=uid,
        ))
        log.info("Moved %s to (%.2f, %.2f)", uid, x, y)
        return moved

    def rotate_unit(self, uid: str) -> PlacedUnit:
        """Advance a unit to its module's next allowed rotation.

        A free unit rotates in place.  A unit with one connection keeps
        the shared connector point fixed.  Two or more connections lock
        rotation.
        """
        unit = self._unit(uid)
        module = self._module(unit.module_id)
        conns = self._layout.connections_of(uid)
        lock = RotationLock.for_count(len(conns))
        if lock is RotationLock.MULTIPLY_CONNECTED:
            raise RotationLocked(uid, len(conns))

        rots = module.rotations
        i = rots.index(unit.rotation) if unit.rotation in rots else -1
        nxt = rots[(i + 1) % len(rots)]

        x, y = unit.x, unit.y
        if lock is RotationLock.SINGLY_CONNECTED:
            c = conns[0]
            other_uid, other_conn_id = c.other(uid)
            other = self._unit(other_uid)
            other_mod = self._module(other.module_id)
            other_conn = self._connector(other, other_conn_id, module.id)
            ox, oy, _, _ = connector_world(other, other_mod, other_conn)
            mine = self._connector(unit, c.endpoint(uid), module.id)
            mx, my, _, _ = connector_world(unit, module, mine)
            x, y = origin_for_connector(ox, oy, module, mine, nxt)
            # A join that was nudged apart is nudged again after the turn
            if math.hypot(mx - ox, my - oy) > self.rules.epsilon:
                x, y, _ = nudge_clear(
                    module, x, y, nxt, other, other_mod, other_conn, self.rules,
                )

        colliding = find_collisions(
            module, x, y, nxt, self._layout.units, self._catalog,
            exclude_uid=uid, tolerance=self.rules.overlap_tolerance_ft,
        )
        if colliding:
            raise Overlap(module.id, colliding)

        rotated = replace(unit, x=x, y=y, rotation=nxt)
        self._commit(replace(
            self._layout,
            units=tuple(rotated if u.uid == uid else u for u in self._layout.units),
        ))
        log.info("Rotated %s to %d° (%s)", uid, nxt, lock.value)
        return rotated

    def rotate_layout(self) -> tuple[PlacedUnit, ...]:
        """Rotate the whole plan 90° clockwise.  Never fails."""
        units = rotate_units(self._layout.units, self._catalog)
        self._commit(replace(self._layout, units=units))
        return units

    def delete_unit(self, uid: str) -> None:
        """Remove a unit and exactly the connections that reference it."""
        self._unit(uid)
        if len(self._layout.units) <= 1:
            raise LastUnit(uid)

        units = tuple(u for u in self._layout.units if u.uid != uid)
        selected = self._layout.selected_uid
        if selected == uid:
            selected = units[0].uid
        self._commit(Layout(
            units=units,
            connections=tuple(c for c in self._layout.connections if not c.involves(uid)),
            selected_uid=selected,
        ))
        log.info("Deleted %s", uid)

    def toggle_extra(self, uid: str, extra_id: str) -> PlacedUnit:
        unit = self._unit(uid)
        module = self._module(unit.module_id)
        if module.extra(extra_id) is None:
            raise UnknownExtra(module.id, extra_id)

        if extra_id in unit.selected_extras:
            extras = tuple(e for e in unit.selected_extras if e != extra_id)
        else:
            extras = unit.selected_extras + (extra_id,)
        updated = replace(unit, selected_extras=extras)
        self._commit(replace(
            self._layout,
            units=tuple(updated if u.uid == uid else u for u in self._layout.units),
        ))
        return updated

    def select(self, uid: str) -> PlacedUnit:
        unit = self._unit(uid)
        self._commit(replace(self._layout, selected_uid=uid))
        return unit

    # ── Whole-layout replacement ──────────────────────────────────

    def load_layout(self, data: dict) -> Layout:
        """Replace the plan with a persisted ``{units, connections}`` payload.

        Unit ids are regenerated.  Raises UnknownModule or ValueError on
        bad payloads, leaving the current layout in place.
        """
        layout = parse_layout(data)
        self._check_layout(layout)
        self._commit(layout)
        log.info("Loaded layout: %d units, %d connections",
                 len(layout.units), len(layout.connections))
        return layout

    def reset(self, template_id: str | None = None) -> Layout:
        """Start over from a built-in template (default: one 12x12 stable)."""
        template = get_template(template_id or DEFAULT_TEMPLATE_ID)
        if template is None:
            raise ValueError(f"Unknown template '{template_id}'")
        return self.load_layout(template.data)
