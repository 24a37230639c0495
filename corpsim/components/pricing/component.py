"""
Pricing component - Market price snapshot from economy-wide supply and demand.

Supply is what every held unit produces per hour (declared outputs x unit
count); demand is what every held unit consumes per hour (declared inputs x
unit count). Prices scale a reference value by the demand/supply ratio.

Invariants:
- A configured commodity never prices below min_commodity_price
- A configured product never prices below its min_price
- No supply and no demand means a scarcity factor of 1.0 (reference price)
- Items seen in the market but absent from configuration quote at 0 and are
  listed in PriceSnapshot.unpriced

Pure functions: no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict
from typing import Any

from corpsim.domain.entities import MarketEntry, SectorUnitFlows, clamp_non_negative, entry_list
from corpsim.rules.models import EconomyRules

from ._impl import (
    add_volume,
    as_entry,
    price_change_pct,
    round_price,
    scarcity_from_volumes,
    unit_flows,
)
from .models import (
    BuildSnapshotInput,
    BuildSnapshotOutput,
    CommodityQuote,
    MarketVolumes,
    PriceSnapshot,
    PricingConfig,
    ProductQuote,
)

# --- Volume Tally ---


def _tally(
    entries: Sequence[MarketEntry | Mapping[str, Any]],
    sector_unit_flows: SectorUnitFlows,
) -> tuple[MarketVolumes, list[str]]:
    commodity_supply: dict[str, float] = {}
    commodity_demand: dict[str, float] = {}
    product_supply: dict[str, float] = {}
    product_demand: dict[str, float] = {}
    errors: list[str] = []
    flows = sector_unit_flows if isinstance(sector_unit_flows, Mapping) else {}

    rows = entry_list(entries)
    if rows is None:
        errors.append("invalid_entries")
        rows = []

    for idx, raw in enumerate(rows):
        entry = as_entry(raw)
        if entry is None:
            errors.append(f"invalid_entry_{idx}")
            continue

        sector_flows = flows.get(entry.sector_type)
        if not isinstance(sector_flows, Mapping):
            errors.append(f"missing_flow_{entry.sector_type or idx}")
            continue

        for unit_type, units, flow in unit_flows(entry, sector_flows):
            if flow is None:
                errors.append(f"invalid_flow_{entry.sector_type}_{unit_type}")
                continue
            add_volume(commodity_supply, flow.outputs.resources, units)
            add_volume(product_supply, flow.outputs.products, units)
            add_volume(commodity_demand, flow.inputs.resources, units)
            add_volume(product_demand, flow.inputs.products, units)

    volumes = MarketVolumes(
        commodity_supply=commodity_supply,
        commodity_demand=commodity_demand,
        product_supply=product_supply,
        product_demand=product_demand,
    )
    return volumes, errors


def tally_market_volumes(
    entries: Sequence[MarketEntry | Mapping[str, Any]],
    sector_unit_flows: SectorUnitFlows,
) -> MarketVolumes:
    """
    Sum hourly supply and demand over every held unit in the market.

    Entries or flows that cannot be read contribute nothing.
    """
    volumes, _ = _tally(entries, sector_unit_flows)
    return volumes


# --- Price Formulas ---


def calculate_commodity_price(
    resource: str,
    supply: float,
    demand: float,
    config: PricingConfig,
) -> CommodityQuote:
    """Demand/supply-driven commodity price, floored at min_commodity_price."""
    base = config.resource_base_prices.get(resource)
    scarcity = scarcity_from_volumes(supply, demand, config.zero_supply_epsilon)

    if base is None:
        current = 0.0
        base = 0.0
    else:
        current = max(config.min_commodity_price, round_price(base * scarcity))

    return CommodityQuote(
        resource=resource,
        base_price=base,
        current_price=current,
        scarcity_factor=scarcity,
        supply=clamp_non_negative(supply),
        demand=clamp_non_negative(demand),
        price_change_pct=price_change_pct(current, base),
    )


def calculate_static_commodity_price(
    resource: str,
    pool_size: float,
    config: PricingConfig,
) -> CommodityQuote:
    """
    Pool-based commodity price: scarcer than the reference pool costs more.

    An empty pool prices at empty_pool_scarcity times the base price.
    """
    base = config.resource_base_prices.get(resource)
    pool = clamp_non_negative(pool_size)
    reference = clamp_non_negative(config.reference_pools.get(resource, 0.0))
    scarcity = reference / pool if pool > 0 else config.empty_pool_scarcity

    if base is None:
        current = 0.0
        base = 0.0
    else:
        current = max(config.min_commodity_price, round_price(base * scarcity))

    return CommodityQuote(
        resource=resource,
        base_price=base,
        current_price=current,
        scarcity_factor=scarcity,
        supply=pool,
        price_change_pct=price_change_pct(current, base),
    )


def calculate_product_price(
    product: str,
    supply: float,
    demand: float,
    config: PricingConfig,
) -> ProductQuote:
    """Demand/supply-driven product price, floored at the product's min_price."""
    reference = config.product_reference_values.get(product)
    scarcity = scarcity_from_volumes(supply, demand, config.zero_supply_epsilon)

    if reference is None:
        current = 0.0
        reference = 0.0
    else:
        floor = clamp_non_negative(config.product_min_prices.get(product, 0.0))
        current = max(floor, round_price(reference * scarcity))

    return ProductQuote(
        product=product,
        reference_value=reference,
        current_price=current,
        scarcity_factor=scarcity,
        supply=clamp_non_negative(supply),
        demand=clamp_non_negative(demand),
        price_change_pct=price_change_pct(current, reference),
    )


# --- Snapshot ---


def _item_names(configured: Iterable[str], *observed: Mapping[str, float]) -> list[str]:
    names = list(configured)
    known = set(names)
    extras = sorted({name for table in observed for name in table} - known)
    return names + extras


def build_price_snapshot(
    volumes: MarketVolumes,
    config: PricingConfig | None = None,
) -> PriceSnapshot:
    """Quote every configured item plus anything the market trades."""
    config = config or PricingConfig()
    unpriced: list[str] = []

    commodities = []
    for resource in _item_names(
        config.resource_base_prices, volumes.commodity_supply, volumes.commodity_demand
    ):
        if resource not in config.resource_base_prices:
            unpriced.append(resource)
        commodities.append(
            calculate_commodity_price(
                resource,
                volumes.commodity_supply.get(resource, 0.0),
                volumes.commodity_demand.get(resource, 0.0),
                config,
            )
        )

    products = []
    for product in _item_names(
        config.product_reference_values, volumes.product_supply, volumes.product_demand
    ):
        if product not in config.product_reference_values:
            unpriced.append(product)
        products.append(
            calculate_product_price(
                product,
                volumes.product_supply.get(product, 0.0),
                volumes.product_demand.get(product, 0.0),
                config,
            )
        )

    return PriceSnapshot(
        commodities=tuple(commodities),
        products=tuple(products),
        unpriced=tuple(unpriced),
    )


def snapshot_to_dict(snapshot: PriceSnapshot) -> dict[str, Any]:
    """JSON-ready view for the presentation layer."""
    return {
        "commodity_prices": snapshot.commodity_prices,
        "product_prices": snapshot.product_prices,
        "commodities": [asdict(quote) for quote in snapshot.commodities],
        "products": [asdict(quote) for quote in snapshot.products],
        "unpriced": list(snapshot.unpriced),
    }


# --- Run Function (Atomic Component Pattern) ---


def run(
    input_data: BuildSnapshotInput,
    config: PricingConfig | None = None,
) -> BuildSnapshotOutput:
    """
    Main entry point following the atomic component pattern.

    Unreadable entries or flows are skipped and reported in `errors`;
    the snapshot is always built.
    """
    volumes, errors = _tally(input_data.entries, input_data.sector_unit_flows)
    snapshot = build_price_snapshot(volumes, config)
    return BuildSnapshotOutput(
        snapshot=snapshot,
        volumes=volumes,
        errors=errors,
        success=not errors,
    )


# --- Configuration Loader ---


def load_config_from_rules(rules: EconomyRules) -> PricingConfig:
    """Build pricing config from economy rules."""
    return PricingConfig(
        resource_base_prices={name: r.base_price for name, r in rules.resources.items()},
        reference_pools={name: r.reference_pool for name, r in rules.resources.items()},
        product_reference_values={name: p.reference_value for name, p in rules.products.items()},
        product_min_prices={name: p.min_price for name, p in rules.products.items()},
        min_commodity_price=rules.market.min_commodity_price,
        zero_supply_epsilon=rules.market.zero_supply_epsilon,
        empty_pool_scarcity=rules.market.empty_pool_scarcity,
    )
