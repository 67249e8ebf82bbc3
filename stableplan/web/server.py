"""
FastAPI web server — JSON endpoints over a single LayoutEngine.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from stableplan.catalog import CatalogResult, catalog_to_dict, load_catalog
from stableplan.config import LAYOUT_RULES, load_rules
from stableplan.errors import (
    ConnectorInUse, LastUnit, LayoutError, NoCompatibleConnector, Overlap,
    RotationLocked, UnknownExtra, UnknownModule, UnknownUnit,
)
from stableplan.layout import (
    DEFAULT_TEMPLATES, LayoutEngine, PriceOverrides, RotationLock,
)
from stableplan.layout.serialization import unit_to_dict


log = logging.getLogger("stableplan.server")


# ── Environment ────────────────────────────────────────────────────

def _load_env_files(root: Path) -> None:
    """Fill unset environment variables from ``.env`` then ``.env.local`` in *root*."""
    for path in (root / ".env", root / ".env.local"):
        if not path.is_file():
            continue
        for raw in path.read_text(encoding="utf-8").splitlines():
            key, sep, value = raw.partition("=")
            key = key.strip()
            if not sep or not key or key.startswith("#"):
                continue
            os.environ.setdefault(key, value.strip().strip("\"'"))

_load_env_files(Path.cwd())

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="StablePlan")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Engine state (persists across requests) ────────────────────────

_catalog: CatalogResult | None = None
_engine: LayoutEngine | None = None
_engine_lock = threading.Lock()       # one request mutates the plan at a time

_STATUS: dict[type[LayoutError], int] = {
    UnknownUnit: 404,
    UnknownModule: 404,
    UnknownExtra: 404,
    Overlap: 409,
    RotationLocked: 409,
    ConnectorInUse: 409,
    LastUnit: 409,
    NoCompatibleConnector: 422,
}


def _build_engine() -> LayoutEngine:
    global _catalog
    catalog_dir = os.environ.get("STABLEPLAN_CATALOG_DIR")
    catalog = _catalog = load_catalog(Path(catalog_dir) if catalog_dir else None)
    for err in catalog.errors:
        log.warning("Catalog: %s", err)

    rules_path = os.environ.get("STABLEPLAN_RULES")
    rules = load_rules(rules_path) if rules_path else LAYOUT_RULES

    engine = LayoutEngine(catalog, rules=rules)
    engine.reset()
    return engine


def _get_engine() -> LayoutEngine:
    global _engine
    if _engine is None:
        _engine = _build_engine()
    return _engine


def _run(op: Callable[[LayoutEngine], Any]) -> Any:
    """Run *op* against the engine under the lock, mapping errors to HTTP."""
    with _engine_lock:
        engine = _get_engine()
        try:
            return op(engine)
        except LayoutError as exc:
            status = _STATUS.get(type(exc), 400)
            log.info("%s -> %d: %s", exc.code, status, exc.message)
            raise HTTPException(status, detail=exc.to_dict())
        except ValueError as exc:
            raise HTTPException(400, str(exc))


def _state(engine: LayoutEngine, **extra: Any) -> dict:
    """Layout payload returned by every mutating endpoint."""
    layout = engine.to_dict()
    layout["locks"] = {
        u.uid: RotationLock.for_count(len(engine.get_layout().connections_of(u.uid))).value
        for u in engine.get_layout().units
    }
    return {
        "layout": layout,
        "cost": engine.total_cost(),
        "extents": list(engine.extents()),
        **extra,
    }


# ── Models ─────────────────────────────────────────────────────────

class AttachRequest(BaseModel):
    uid: str
    connector_id: str
    module_id: str


class ReconnectRequest(BaseModel):
    uid: str
    target_uid: str
    target_connector_id: str


class PlaceRequest(BaseModel):
    module_id: str
    x: float
    y: float


class MoveRequest(BaseModel):
    uid: str
    x: float
    y: float


class CostRequest(BaseModel):
    modules: dict[str, float] = {}
    extras: dict[str, float] = {}


class PreviewRequest(BaseModel):
    uid: str | None = None
    connector_id: str | None = None
    module_id: str
    # Cursor position used to snap to the nearest free connector
    x: float | None = None
    y: float | None = None


class ResetRequest(BaseModel):
    template_id: str | None = None


class LoadRequest(BaseModel):
    units: list[dict]
    connections: list[dict] = []


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/api/modules")
def list_modules():
    """Return the module catalog."""
    with _engine_lock:
        _get_engine()
        return catalog_to_dict(_catalog)


@app.get("/api/layout")
def get_layout():
    return _run(lambda e: _state(e))


@app.post("/api/attach")
def attach(req: AttachRequest):
    def op(e: LayoutEngine):
        unit = e.attach(req.uid, req.connector_id, req.module_id)
        return _state(e, unit=unit_to_dict(unit))
    return _run(op)


@app.post("/api/reconnect")
def reconnect(req: ReconnectRequest):
    def op(e: LayoutEngine):
        unit = e.reconnect(req.uid, req.target_uid, req.target_connector_id)
        return _state(e, unit=unit_to_dict(unit))
    return _run(op)


@app.post("/api/place")
def place(req: PlaceRequest):
    def op(e: LayoutEngine):
        unit = e.place_free(req.module_id, req.x, req.y)
        return _state(e, unit=unit_to_dict(unit))
    return _run(op)


@app.post("/api/move")
def move(req: MoveRequest):
    def op(e: LayoutEngine):
        unit = e.move_unit(req.uid, req.x, req.y)
        return _state(e, unit=unit_to_dict(unit))
    return _run(op)


@app.post("/api/units/{uid}/rotate")
def rotate_unit(uid: str):
    def op(e: LayoutEngine):
        unit = e.rotate_unit(uid)
        return _state(e, unit=unit_to_dict(unit))
    return _run(op)


@app.post("/api/units/{uid}/select")
def select_unit(uid: str):
    def op(e: LayoutEngine):
        e.select(uid)
        return _state(e)
    return _run(op)


@app.post("/api/rotate_layout")
def rotate_layout():
    def op(e: LayoutEngine):
        e.rotate_layout()
        return _state(e)
    return _run(op)


@app.delete("/api/units/{uid}")
def delete_unit(uid: str):
    def op(e: LayoutEngine):
        e.delete_unit(uid)
        return _state(e)
    return _run(op)


@app.post("/api/units/{uid}/extras/{extra_id}")
def toggle_extra(uid: str, extra_id: str):
    def op(e: LayoutEngine):
        unit = e.toggle_extra(uid, extra_id)
        return _state(e, unit=unit_to_dict(unit))
    return _run(op)


@app.post("/api/cost")
def cost(req: CostRequest):
    """Total cost with optional per-module / per-extra display-price overrides."""
    overrides = PriceOverrides(modules=dict(req.modules), extras=dict(req.extras))
    return _run(lambda e: {"cost": e.total_cost(overrides)})


@app.post("/api/preview")
def preview(req: PreviewRequest):
    """Where a module would land, without changing the plan.

    Either name the target ``uid``/``connector_id`` directly, or pass a
    cursor ``x``/``y`` to snap to the nearest free connector.
    """
    def op(e: LayoutEngine):
        uid, connector_id = req.uid, req.connector_id
        if uid is None or connector_id is None:
            if req.x is None or req.y is None:
                raise HTTPException(400, "Give uid/connector_id or x/y.")
            hit = e.nearest_connector(req.x, req.y)
            if hit is None:
                return {"candidate": None, "target": None}
            uid, connector_id, _ = hit

        cand = e.preview_attach(uid, connector_id, req.module_id)
        return {
            "candidate": asdict(cand) if cand is not None else None,
            "target": {"uid": uid, "connector_id": connector_id},
        }
    return _run(op)


@app.get("/api/templates")
def list_templates():
    return {
        "templates": [
            {"id": t.id, "name": t.name, "description": t.description}
            for t in DEFAULT_TEMPLATES
        ],
    }


@app.post("/api/reset")
def reset(req: ResetRequest | None = None):
    """Start a fresh plan from a template (default: a single stable)."""
    template_id = req.template_id if req is not None else None

    def op(e: LayoutEngine):
        e.reset(template_id)
        return _state(e)
    return _run(op)


@app.post("/api/load")
def load(req: LoadRequest):
    """Replace the plan with a saved ``{units, connections}`` payload."""
    def op(e: LayoutEngine):
        e.load_layout({"units": req.units, "connections": req.connections})
        return _state(e)
    return _run(op)


# ── Entry point ────────────────────────────────────────────────────

def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    logging.basicConfig(
        level=os.environ.get("STABLEPLAN_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("stableplan.web.server:app", host=host, port=port, reload=False)
