"""Connector pairing table — which (kind, role) pairs may join, and how.

The table is data (catalog/data/pairing.json); adding a module kind means
adding rows there, not touching the matching algorithm.
"""

from __future__ import annotations

from stableplan.catalog.models import PairingRule


class PairingTable:
    """Symmetric lookup over a list of PairingRule rows."""

    def __init__(self, rules: list[PairingRule]) -> None:
        self._index: dict[tuple[str, str, str, str], str] = {}
        for rule in rules:
            for ka in rule.kinds_a:
                for kb in rule.kinds_b:
                    self._add(ka, rule.role_a, kb, rule.role_b, rule.alignment)
                    self._add(kb, rule.role_b, ka, rule.role_a, rule.alignment)

    def _add(self, kind_a: str, role_a: str, kind_b: str, role_b: str, alignment: str) -> None:
        # First rule wins when two rows cover the same pair.
        self._index.setdefault((kind_a, role_a, kind_b, role_b), alignment)

    def alignment(
        self, kind_a: str, role_a: str, kind_b: str, role_b: str,
    ) -> str | None:
        """Required normal alignment, or None when the pair may not join."""
        return self._index.get((kind_a, role_a, kind_b, role_b))

    def __len__(self) -> int:
        return len(self._index)
