"""
Statement engine internals - per-unit-type revenue and cost.

Functional Core - pure business logic. Nothing here raises on bad data and
nothing mutates its arguments; lookups that miss degrade to zero.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from corpsim.domain.entities import (
    DEFAULT_PERIOD_HOURS,
    EMPTY_FLOW,
    UNIT_TYPES,
    FixedCosts,
    MarketEntry,
    PriceTable,
    ProductionFlow,
    UnitEconomics,
    UnitEconomicsEntry,
    UnitType,
    clamp_non_negative,
)

from ._demand import (
    DemandUnitType,
    floor_revenue,
    price_demand_legs,
    select_demand_pricing,
    utility_pricing_for,
)
from .models import DemandPricingPolicy, SectorStatement, UnitLine

# --- Lookup Helpers ---


def price_of(prices: PriceTable | None, name: str) -> float:
    """Current price for `name`; an absent or unusable entry is 0.0."""
    if not isinstance(prices, Mapping):
        return 0.0
    value = prices.get(name)
    if value is None:
        return 0.0
    if isinstance(value, Mapping):
        value = value.get("current_price")
    elif hasattr(value, "current_price"):
        value = value.current_price
    return clamp_non_negative(value)


def sum_rates(rates: Mapping[str, float]) -> float:
    return sum((clamp_non_negative(rate) for rate in rates.values()), 0.0)


def round_half_up(value: float) -> int:
    """Display rounding (0.5 rounds up, unlike the builtin round)."""
    return int(math.floor(value + 0.5))


def resolve_period_hours(value: Any, default: int = DEFAULT_PERIOD_HOURS) -> int:
    hours = clamp_non_negative(value)
    whole = int(math.floor(hours))
    return whole if whole > 0 else default


def clamp_percentage(value: Any) -> float:
    return min(100.0, clamp_non_negative(value))


# --- Input Coercion ---


def coerce_entry(raw: Any) -> MarketEntry | None:
    if isinstance(raw, MarketEntry):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return MarketEntry.model_validate(dict(raw))
    except ValidationError:
        return None


def coerce_flow(raw: Any) -> ProductionFlow | None:
    if raw is None:
        return EMPTY_FLOW
    if isinstance(raw, ProductionFlow):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return ProductionFlow.model_validate(dict(raw))
    except ValidationError:
        return None


def coerce_fixed_costs(raw: Any) -> FixedCosts:
    if isinstance(raw, FixedCosts):
        return raw
    if not isinstance(raw, Mapping):
        return FixedCosts()
    try:
        return FixedCosts.model_validate(dict(raw))
    except ValidationError:
        return FixedCosts()


def coerce_unit_economics(raw: Any) -> UnitEconomics | None:
    if raw is None:
        return UnitEconomics()
    if isinstance(raw, UnitEconomics):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return UnitEconomics.model_validate(dict(raw))
    except ValidationError:
        return None


def input_cost_per_hour(
    flow: ProductionFlow,
    commodity_prices: PriceTable,
    product_prices: PriceTable,
) -> float:
    """Cost of one unit-hour of declared inputs."""
    cost = 0.0
    for resource, rate in flow.inputs.resources.items():
        cost += rate * price_of(commodity_prices, resource)
    for product, rate in flow.inputs.products.items():
        cost += rate * price_of(product_prices, product)
    return cost


# --- Per-Unit-Type Computation ---


def compute_output_unit(
    flow: ProductionFlow,
    output_rates: Mapping[str, float],
    output_prices: PriceTable,
    units: int,
    hours: int,
    economics: UnitEconomicsEntry,
    commodity_prices: PriceTable,
    product_prices: PriceTable,
    counts_demand: bool = True,
) -> UnitLine:
    """
    Extraction and production: revenue from what the unit makes.

    With no declared output the unit runs on base economics alone.
    Extraction reports no demanded units.
    """
    if output_rates:
        revenue_per_hour = 0.0
        for name, rate in output_rates.items():
            revenue_per_hour += price_of(output_prices, name) * rate
        cost_per_hour = (
            input_cost_per_hour(flow, commodity_prices, product_prices) + economics.base_cost
        )
        produced = round_half_up(sum_rates(output_rates) * hours * units)
    else:
        revenue_per_hour = economics.base_revenue
        cost_per_hour = economics.base_cost
        produced = 0

    demanded = round_half_up(sum_rates(flow.inputs.products) * hours * units) if counts_demand else 0
    return UnitLine(
        units=units,
        revenue=revenue_per_hour * hours * units,
        cost=cost_per_hour * hours * units,
        produced_units=produced,
        demanded_units=demanded,
    )


def compute_extraction(
    flow: ProductionFlow,
    units: int,
    hours: int,
    unit_economics: UnitEconomics,
    commodity_prices: PriceTable,
    product_prices: PriceTable,
) -> UnitLine:
    return compute_output_unit(
        flow,
        flow.outputs.resources,
        commodity_prices,
        units,
        hours,
        unit_economics.extraction,
        commodity_prices,
        product_prices,
        counts_demand=False,
    )


def compute_production(
    flow: ProductionFlow,
    units: int,
    hours: int,
    unit_economics: UnitEconomics,
    commodity_prices: PriceTable,
    product_prices: PriceTable,
) -> UnitLine:
    return compute_output_unit(
        flow,
        flow.outputs.products,
        product_prices,
        units,
        hours,
        unit_economics.production,
        commodity_prices,
        product_prices,
    )


def compute_demand_unit(
    sector: str,
    unit_type: DemandUnitType,
    flow: ProductionFlow,
    units: int,
    hours: int,
    product_prices: PriceTable,
    policy: DemandPricingPolicy,
) -> UnitLine:
    """Retail and service: revenue from the products the unit consumes."""
    strategy = select_demand_pricing(sector, unit_type, policy)
    utility = utility_pricing_for(unit_type, policy)

    resolved = {product: price_of(product_prices, product) for product in flow.inputs.products}
    legs = price_demand_legs(resolved, strategy, utility)

    if unit_type == "retail":
        labor = policy.retail_labor_cost
        margin = policy.retail_min_gross_margin_pct
    else:
        labor = policy.service_labor_cost
        margin = policy.service_min_gross_margin_pct

    revenue_per_hour, wholesale_cost = floor_revenue(legs, margin)
    cost_per_hour = labor + wholesale_cost

    return UnitLine(
        units=units,
        revenue=revenue_per_hour * hours * units,
        cost=cost_per_hour * hours * units,
        demanded_units=round_half_up(sum_rates(flow.inputs.products) * hours * units),
    )


# --- Sector Level ---


def idle_sector_statement(entry: MarketEntry) -> SectorStatement:
    """Statement for a sector that cannot be priced: units shown, no money."""
    return SectorStatement(
        sector_type=entry.sector_type,
        revenue=0.0,
        variable_costs=0.0,
        fixed_costs=0.0,
        net_income=0.0,
        unit_breakdown={unit_type: UnitLine(units=entry.count_for(unit_type)) for unit_type in UNIT_TYPES},
    )


def compute_unit_line(
    sector: str,
    unit_type: UnitType,
    flow: ProductionFlow,
    units: int,
    hours: int,
    unit_economics: UnitEconomics,
    commodity_prices: PriceTable,
    product_prices: PriceTable,
    policy: DemandPricingPolicy,
) -> UnitLine:
    if units <= 0:
        return UnitLine(units=0)
    if unit_type == "extraction":
        return compute_extraction(flow, units, hours, unit_economics, commodity_prices, product_prices)
    if unit_type == "production":
        return compute_production(flow, units, hours, unit_economics, commodity_prices, product_prices)
    return compute_demand_unit(sector, unit_type, flow, units, hours, product_prices, policy)


def compute_sector(
    entry: MarketEntry,
    sector_flows: Mapping[str, Any],
    hours: int,
    unit_economics: UnitEconomics,
    commodity_prices: PriceTable,
    product_prices: PriceTable,
    fixed_costs: FixedCosts,
    policy: DemandPricingPolicy,
    errors: list[str],
) -> SectorStatement:
    """Compute one market entry. Flow problems are appended to `errors`."""
    sector = entry.sector_type
    breakdown: dict[UnitType, UnitLine] = {}

    for unit_type in UNIT_TYPES:
        units = entry.count_for(unit_type)
        flow = coerce_flow(sector_flows.get(unit_type)) if units > 0 else EMPTY_FLOW
        if flow is None:
            errors.append(f"invalid_flow_{sector}_{unit_type}")
            breakdown[unit_type] = UnitLine(units=units)
            continue
        breakdown[unit_type] = compute_unit_line(
            sector,
            unit_type,
            flow,
            units,
            hours,
            unit_economics,
            commodity_prices,
            product_prices,
            policy,
        )

    revenue = 0.0
    variable_costs = 0.0
    for line in breakdown.values():
        revenue += line.revenue
        variable_costs += line.cost

    fixed = fixed_costs.per_period
    return SectorStatement(
        sector_type=sector,
        revenue=revenue,
        variable_costs=variable_costs,
        fixed_costs=fixed,
        net_income=revenue - (variable_costs + fixed),
        unit_breakdown=breakdown,
    )
