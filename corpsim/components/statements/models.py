"""
Statements component input/output models.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from corpsim.domain.entities import (
    FixedCosts,
    MarketEntry,
    PriceTable,
    SectorUnitFlows,
    UnitEconomics,
    UnitType,
)

# --- Engine Policy ---


@dataclass(frozen=True)
class DemandPricingPolicy:
    """Constants for the demand-driven (retail/service) revenue formulas."""

    retail_labor_cost: float = 200.0
    service_labor_cost: float = 150.0
    retail_product_consumption: float = 2.0
    service_product_consumption: float = 1.5
    service_electricity_consumption: float = 0.5
    retail_wholesale_discount: float = 0.995
    service_wholesale_discount: float = 0.995
    retail_min_gross_margin_pct: float = 0.1
    service_min_gross_margin_pct: float = 0.1
    cost_floor_wholesale_discount: float = 0.8
    cost_floor_consumption: float = 1.0
    cost_floor_revenue_multiplier: float = 1.0
    cost_floor_sectors: frozenset[str] = frozenset({"Defense"})
    electricity_product: str = "Electricity"


# --- Output Models ---


@dataclass(frozen=True)
class UnitLine:
    """One unit type's contribution within a sector statement."""

    units: int
    revenue: float = 0.0
    cost: float = 0.0
    produced_units: int = 0  # rounded for display
    demanded_units: int = 0  # rounded for display


@dataclass(frozen=True)
class SectorStatement:
    sector_type: str
    revenue: float
    variable_costs: float
    fixed_costs: float
    net_income: float
    unit_breakdown: Mapping[UnitType, UnitLine]


@dataclass(frozen=True)
class ConsolidatedStatement:
    """Aggregated result for one corporation over one period."""

    revenue: float
    variable_costs: float
    fixed_costs: float
    operating_income: float
    dividends: float
    retained_earnings: float
    net_income: float
    period_hours: int
    sectors: tuple[SectorStatement, ...] = ()
    errors: tuple[str, ...] = ()


# --- Input Models ---


@dataclass(frozen=True)
class ComputeStatementsInput:
    """Input for computing a consolidated statement."""

    entries: Sequence[MarketEntry | Mapping[str, Any]]
    sector_unit_flows: SectorUnitFlows
    commodity_prices: PriceTable
    product_prices: PriceTable
    unit_economics: UnitEconomics | Mapping[str, Any] | None = None
    period_hours: float | None = None
    fixed_costs: FixedCosts | Mapping[str, Any] | None = None
    dividend_percentage: float | None = None


@dataclass(frozen=True)
class ComputeStatementsOutput:
    statement: ConsolidatedStatement
    errors: list[str] = field(default_factory=list)
    success: bool = True
