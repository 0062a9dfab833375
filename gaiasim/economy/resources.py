"""Resources — the planet's stockpile ledger.

Stock is the authoritative accumulated value and never drops below
zero.  ``diff`` records the net amount requested through ``add`` since
the start of the current day and exists for display only.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from gaiasim.simulation.errors import parse_kind

logger = logging.getLogger(__name__)


class ResourceKind(Enum):
    """Stockpiled resources."""

    ENERGY = "energy"
    MATERIAL = "material"
    ICE = "ice"
    CARBON = "carbon"
    NITROGEN = "nitrogen"
    FERTILIZER = "fertilizer"
    FUEL = "fuel"


def _zeroed() -> dict[ResourceKind, float]:
    return {kind: 0.0 for kind in ResourceKind}


@dataclass
class Resources:
    """Stock and per-day delta for every resource kind.

    Attributes:
        stock: Current amount held (always ≥ 0).
        diff: Net change requested during the most recent day.
    """

    stock: dict[ResourceKind, float] = field(default_factory=_zeroed)
    diff: dict[ResourceKind, float] = field(default_factory=_zeroed)

    @classmethod
    def with_stock(cls, initial: Mapping[ResourceKind, float]) -> Resources:
        """Create a ledger seeded with ``initial`` stock."""
        res = cls()
        for kind, amount in initial.items():
            res.stock[kind] = max(0.0, float(amount))
        return res

    def add(self, kind: ResourceKind, amount: float) -> bool:
        """Add (or, if negative, remove) ``amount`` of a resource.

        Stock saturates at zero.  The requested amount is always added to
        the day's diff.

        Returns:
            True if the stock had to be clamped at zero (depleted).
        """
        self.diff[kind] += amount
        value = self.stock[kind] + amount
        if value < 0.0:
            self.stock[kind] = 0.0
            logger.debug("%s depleted (short by %.3f)", kind.value, -value)
            return True
        self.stock[kind] = value
        return False

    def add_all(self, amounts: Mapping[ResourceKind, float], sign: float = 1.0) -> bool:
        """Apply ``sign * amount`` for every entry; True if any was depleted."""
        depleted = False
        for kind, amount in amounts.items():
            depleted |= self.add(kind, sign * amount)
        return depleted

    def can_afford(self, cost: Mapping[ResourceKind, float]) -> bool:
        """Return True if every entry of ``cost`` is covered by stock."""
        return all(self.stock[kind] >= amount for kind, amount in cost.items())

    def spend(self, cost: Mapping[ResourceKind, float]) -> bool:
        """Remove ``cost`` only if all of it can be paid.

        Returns:
            True if paid; False (and nothing changed) otherwise.
        """
        if not self.can_afford(cost):
            return False
        self.add_all(cost, sign=-1.0)
        return True

    def set_diff(self, kind: ResourceKind, amount: float) -> None:
        """Overwrite the day's delta for ``kind``."""
        self.diff[kind] = amount

    def stock_of(self, kind: ResourceKind) -> float:
        return self.stock[kind]

    def diff_of(self, kind: ResourceKind) -> float:
        return self.diff[kind]

    def reset_diffs(self) -> None:
        """Zero all deltas.  Called once at the start of every day."""
        for kind in self.diff:
            self.diff[kind] = 0.0

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            "stock": {kind.value: v for kind, v in self.stock.items()},
            "diff": {kind.value: v for kind, v in self.diff.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, float]]) -> Resources:
        res = cls()
        for name, value in (data.get("stock") or {}).items():
            res.stock[parse_kind(ResourceKind, name)] = float(value)
        for name, value in (data.get("diff") or {}).items():
            res.diff[parse_kind(ResourceKind, name)] = float(value)
        return res
