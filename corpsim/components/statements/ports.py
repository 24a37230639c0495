"""
Statements component port definitions.

Read-only views the engine is fed from. Both are satisfied structurally:
a pricing PriceSnapshot is a PriceSourcePort and loaded EconomyRules are a
ProductionChainPort.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from corpsim.domain.entities import UnitEconomics


class PriceSourcePort(Protocol):
    """Immutable price snapshot for one computation."""

    @property
    def commodity_prices(self) -> Mapping[str, Any]:
        """Resource name -> current price."""
        ...

    @property
    def product_prices(self) -> Mapping[str, Any]:
        """Product name -> current price."""
        ...


class ProductionChainPort(Protocol):
    """Static game-balance tables."""

    @property
    def sectors(self) -> Mapping[str, Mapping[str, Any]]:
        """Sector -> unit type -> ProductionFlow."""
        ...

    @property
    def unit_economics(self) -> UnitEconomics:
        """Fallback per-unit base revenue and cost."""
        ...
