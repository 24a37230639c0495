"""
Statements component - Consolidated financial statements for a corporation.

Maps unit holdings x production chains x a price snapshot to revenue,
variable and fixed costs, operating income, dividends and retained earnings,
with a per-sector, per-unit-type breakdown.

Invariants:
- operating_income == revenue - variable_costs - fixed_costs
- dividends == 0 unless operating_income > 0, never above operating_income
- net_income == retained_earnings == operating_income - dividends
- a sector without production chains yields missing_flow_<sector> and no money
- missing prices are zero and are not errors

Pure function: no I/O, no exceptions, inputs are never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict
from typing import Any

from corpsim.domain.entities import (
    Corporation,
    FixedCosts,
    MarketEntry,
    PriceTable,
    SectorUnitFlows,
    UnitEconomics,
    entry_list,
)
from corpsim.rules.models import EconomyRules

from ._impl import (
    clamp_percentage,
    coerce_entry,
    coerce_fixed_costs,
    coerce_unit_economics,
    compute_sector,
    idle_sector_statement,
    resolve_period_hours,
)
from .models import (
    ComputeStatementsInput,
    ComputeStatementsOutput,
    ConsolidatedStatement,
    DemandPricingPolicy,
    SectorStatement,
)
from .ports import PriceSourcePort, ProductionChainPort


def compute_financial_statements(
    entries: Sequence[MarketEntry | Mapping[str, Any]],
    sector_unit_flows: SectorUnitFlows,
    commodity_prices: PriceTable,
    product_prices: PriceTable,
    unit_economics: UnitEconomics | Mapping[str, Any] | None,
    period_hours: float | None = None,
    fixed_costs: FixedCosts | Mapping[str, Any] | None = None,
    dividend_percentage: float | None = None,
    *,
    policy: DemandPricingPolicy | None = None,
) -> ConsolidatedStatement:
    """
    Compute the consolidated statement for one corporation over one period.

    Args:
        entries: Market entries (models or plain mappings with *_count keys)
        sector_unit_flows: Sector -> unit type -> ProductionFlow
        commodity_prices: Resource -> current price
        product_prices: Product -> current price
        unit_economics: Fallback base revenue/cost per unit type
        period_hours: Period length; non-positive means the 96 hour default
        fixed_costs: CEO salary, overhead and per-sector fixed cost
        dividend_percentage: Share (0-100) of positive operating income paid out
        policy: Retail/service pricing constants

    Returns:
        ConsolidatedStatement; problems are reported in its `errors`
    """
    policy = policy or DemandPricingPolicy()
    errors: list[str] = []
    hours = resolve_period_hours(period_hours)
    costs = coerce_fixed_costs(fixed_costs)
    flows = sector_unit_flows if isinstance(sector_unit_flows, Mapping) else {}

    economics = coerce_unit_economics(unit_economics)
    if economics is None:
        errors.append("invalid_unit_economics")
        economics = UnitEconomics()

    rows = entry_list(entries)
    if rows is None:
        errors.append("invalid_entries")
        rows = []

    sectors: list[SectorStatement] = []
    for idx, raw in enumerate(rows):
        entry = coerce_entry(raw)
        if entry is None:
            errors.append(f"invalid_entry_{idx}")
            continue

        sector_flows = flows.get(entry.sector_type) if entry.sector_type else None
        if not isinstance(sector_flows, Mapping):
            errors.append(f"missing_flow_{entry.sector_type or idx}")
            sectors.append(idle_sector_statement(entry))
            continue

        sectors.append(
            compute_sector(
                entry,
                sector_flows,
                hours,
                economics,
                commodity_prices,
                product_prices,
                costs,
                policy,
                errors,
            )
        )

    revenue = 0.0
    variable_costs = 0.0
    sector_fixed = 0.0
    for sector in sectors:
        revenue += sector.revenue
        variable_costs += sector.variable_costs
        sector_fixed += sector.fixed_costs

    fixed = sector_fixed + costs.corporate
    operating_income = revenue - variable_costs - fixed

    pct = clamp_percentage(dividend_percentage)
    dividends = operating_income * (pct / 100) if operating_income > 0 else 0.0
    retained_earnings = operating_income - dividends

    return ConsolidatedStatement(
        revenue=revenue,
        variable_costs=variable_costs,
        fixed_costs=fixed,
        operating_income=operating_income,
        dividends=dividends,
        retained_earnings=retained_earnings,
        net_income=retained_earnings,
        period_hours=hours,
        sectors=tuple(sectors),
        errors=tuple(errors),
    )


def compute_for_corporation(
    corporation: Corporation,
    prices: PriceSourcePort,
    chain: ProductionChainPort,
    period_hours: float | None = None,
    policy: DemandPricingPolicy | None = None,
) -> ConsolidatedStatement:
    """Statement for a corporation against a price snapshot and production chains."""
    return compute_financial_statements(
        corporation.entries,
        chain.sectors,
        prices.commodity_prices,
        prices.product_prices,
        chain.unit_economics,
        period_hours,
        corporation.fixed_costs,
        corporation.dividend_percentage,
        policy=policy,
    )


def statement_to_dict(statement: ConsolidatedStatement) -> dict[str, Any]:
    """JSON-ready view for the presentation layer."""
    data = asdict(statement)
    data["sectors"] = [
        {**sector, "unit_breakdown": dict(sector["unit_breakdown"])} for sector in data["sectors"]
    ]
    data["errors"] = list(statement.errors)
    return data


# --- Run Function (Atomic Component Pattern) ---


def run(
    input_data: ComputeStatementsInput,
    policy: DemandPricingPolicy | None = None,
) -> ComputeStatementsOutput:
    """
    Main entry point following the atomic component pattern.

    Always returns a statement; `success` is False when it carries errors.
    """
    statement = compute_financial_statements(
        input_data.entries,
        input_data.sector_unit_flows,
        input_data.commodity_prices,
        input_data.product_prices,
        input_data.unit_economics,
        input_data.period_hours,
        input_data.fixed_costs,
        input_data.dividend_percentage,
        policy=policy,
    )
    return ComputeStatementsOutput(
        statement=statement,
        errors=list(statement.errors),
        success=not statement.errors,
    )


# --- Configuration Loader ---


def load_policy_from_rules(rules: EconomyRules) -> DemandPricingPolicy:
    """Build the demand pricing policy from economy rules."""
    demand = rules.demand_pricing
    return DemandPricingPolicy(
        retail_labor_cost=demand.retail_labor_cost,
        service_labor_cost=demand.service_labor_cost,
        retail_product_consumption=demand.retail_product_consumption,
        service_product_consumption=demand.service_product_consumption,
        service_electricity_consumption=demand.service_electricity_consumption,
        retail_wholesale_discount=demand.retail_wholesale_discount,
        service_wholesale_discount=demand.service_wholesale_discount,
        retail_min_gross_margin_pct=demand.retail_min_gross_margin_pct,
        service_min_gross_margin_pct=demand.service_min_gross_margin_pct,
        cost_floor_wholesale_discount=demand.cost_floor_wholesale_discount,
        cost_floor_consumption=demand.cost_floor_consumption,
        cost_floor_revenue_multiplier=demand.cost_floor_revenue_multiplier,
        cost_floor_sectors=frozenset(demand.cost_floor_sectors),
        electricity_product=demand.electricity_product,
    )
