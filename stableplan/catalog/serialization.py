"""Catalog serialization — convert dataclasses to JSON-safe dicts."""

from __future__ import annotations

from typing import Any

from .models import ModuleDef, CatalogResult


def catalog_to_dict(result: CatalogResult) -> dict:
    """Serialize a CatalogResult to a JSON-safe dict for the web API."""
    return {
        "ok": result.ok,
        "module_count": len(result.modules),
        "modules": [module_to_dict(m) for m in result.modules],
        "errors": [{"module_id": e.module_id, "field": e.field, "message": e.message}
                   for e in result.errors],
    }


def module_to_dict(m: ModuleDef) -> dict:
    """Serialize a ModuleDef to a JSON-safe dict."""
    d: dict[str, Any] = {
        "id": m.id,
        "name": m.name,
        "kind": m.kind,
        "width_ft": m.width_ft,
        "depth_ft": m.depth_ft,
        "rotations": list(m.rotations),
        "base_price": m.base_price,
        "connectors": [
            {
                "id": c.id,
                "role": c.role,
                "x": c.x,
                "y": c.y,
                "nx": c.nx,
                "ny": c.ny,
            }
            for c in m.connectors
        ],
        "extras": [
            {
                "id": e.id,
                "name": e.name,
                "price": e.price,
                "description": e.description,
            }
            for e in m.extras
        ],
        "front_features": [],
    }

    for f in m.front_features:
        fd: dict[str, Any] = {"type": f.type, "from_x": f.from_x, "to_x": f.to_x}
        if f.doors:
            fd["doors"] = [
                {
                    "width_ft": door.width_ft,
                    "hinge": door.hinge,
                    "swing": door.swing,
                    **({"leaf": door.leaf} if door.leaf else {}),
                }
                for door in f.doors
            ]
        d["front_features"].append(fd)

    return d
