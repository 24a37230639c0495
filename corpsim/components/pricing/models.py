"""
Pricing component input/output models.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from corpsim.domain.entities import MarketEntry, SectorUnitFlows

# --- Reference Tables ---

DEFAULT_RESOURCE_BASE_PRICES: dict[str, float] = {
    "Oil": 75.0,
    "Iron Ore": 120.0,
    "Rare Earth": 9000.0,
    "Copper": 8500.0,
    "Fertile Land": 3500.0,
    "Lumber": 450.0,
    "Chemical Compounds": 2200.0,
    "Coal": 65.0,
}

DEFAULT_REFERENCE_POOLS: dict[str, float] = {
    "Oil": 12000.0,
    "Iron Ore": 12000.0,
    "Rare Earth": 4000.0,
    "Copper": 20000.0,
    "Fertile Land": 60000.0,
    "Lumber": 40000.0,
    "Chemical Compounds": 25000.0,
    "Coal": 25000.0,
}

DEFAULT_PRODUCT_REFERENCE_VALUES: dict[str, float] = {
    "Technology Products": 5000.0,
    "Manufactured Goods": 1500.0,
    "Electricity": 200.0,
    "Food Products": 500.0,
    "Construction Capacity": 2500.0,
    "Pharmaceutical Products": 8000.0,
    "Defense Equipment": 15000.0,
    "Logistics Capacity": 1000.0,
    "Steel": 850.0,
}


@dataclass(frozen=True)
class PricingConfig:
    """Configuration for the market pricing component."""

    resource_base_prices: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_RESOURCE_BASE_PRICES)
    )
    reference_pools: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_REFERENCE_POOLS)
    )
    product_reference_values: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_PRODUCT_REFERENCE_VALUES)
    )
    product_min_prices: Mapping[str, float] = field(default_factory=dict)
    min_commodity_price: float = 10.0
    zero_supply_epsilon: float = 0.01
    empty_pool_scarcity: float = 20.0


# --- Volumes ---


@dataclass(frozen=True)
class MarketVolumes:
    """Economy-wide hourly supply and demand per item."""

    commodity_supply: Mapping[str, float] = field(default_factory=dict)
    commodity_demand: Mapping[str, float] = field(default_factory=dict)
    product_supply: Mapping[str, float] = field(default_factory=dict)
    product_demand: Mapping[str, float] = field(default_factory=dict)


# --- Quotes ---


@dataclass(frozen=True)
class CommodityQuote:
    resource: str
    base_price: float
    current_price: float
    scarcity_factor: float
    supply: float = 0.0
    demand: float = 0.0
    price_change_pct: float = 0.0


@dataclass(frozen=True)
class ProductQuote:
    product: str
    reference_value: float
    current_price: float
    scarcity_factor: float
    supply: float = 0.0
    demand: float = 0.0
    price_change_pct: float = 0.0


@dataclass(frozen=True)
class PriceSnapshot:
    """
    Prices for one computation.

    Statement computation reads `commodity_prices` and `product_prices`;
    items seen in the market but absent from configuration are listed in
    `unpriced` and quoted at 0.
    """

    commodities: tuple[CommodityQuote, ...] = ()
    products: tuple[ProductQuote, ...] = ()
    unpriced: tuple[str, ...] = ()

    @property
    def commodity_prices(self) -> dict[str, float]:
        return {quote.resource: quote.current_price for quote in self.commodities}

    @property
    def product_prices(self) -> dict[str, float]:
        return {quote.product: quote.current_price for quote in self.products}


# --- Input/Output ---


@dataclass(frozen=True)
class BuildSnapshotInput:
    """Input for deriving a price snapshot from the market's unit holdings."""

    entries: Sequence[MarketEntry | Mapping[str, Any]]
    sector_unit_flows: SectorUnitFlows


@dataclass(frozen=True)
class BuildSnapshotOutput:
    snapshot: PriceSnapshot
    volumes: MarketVolumes
    errors: list[str] = field(default_factory=list)
    success: bool = True
