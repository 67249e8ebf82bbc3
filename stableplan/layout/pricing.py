"""Plan pricing — base prices plus selected extras, with optional overrides."""

from __future__ import annotations

from dataclasses import dataclass, field

from stableplan.catalog.models import ModuleDef

from .models import PlacedUnit


@dataclass
class PriceOverrides:
    """Display-price overrides keyed by module id and extra id."""
    modules: dict[str, float] = field(default_factory=dict)
    extras: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict | None) -> "PriceOverrides":
        data = data or {}
        return cls(
            modules={k: float(v) for k, v in (data.get("modules") or {}).items()},
            extras={k: float(v) for k, v in (data.get("extras") or {}).items()},
        )


def unit_cost(
    unit: PlacedUnit, module: ModuleDef, overrides: PriceOverrides | None = None,
) -> float:
    o = overrides or PriceOverrides()
    cost = o.modules.get(module.id, module.base_price)
    for extra_id in unit.selected_extras:
        extra = module.extra(extra_id)
        if extra is None:
            continue
        cost += o.extras.get(extra.id, extra.price)
    return cost


def total_cost(
    units: tuple[PlacedUnit, ...] | list[PlacedUnit],
    catalog: dict[str, ModuleDef],
    overrides: PriceOverrides | None = None,
) -> float:
    """Sum of each unit's base price plus its selected extras."""
    return sum(unit_cost(u, catalog[u.module_id], overrides) for u in units)
