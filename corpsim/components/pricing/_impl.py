"""
Pricing internals - volume tally and scarcity arithmetic.

Functional Core - pure business logic.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from corpsim.domain.entities import UNIT_TYPES, MarketEntry, ProductionFlow, clamp_non_negative


def round_price(value: float) -> float:
    """Round to cents, halves away from zero for non-negative prices."""
    return math.floor(value * 100 + 0.5) / 100


def scarcity_from_volumes(supply: float, demand: float, epsilon: float) -> float:
    supply = clamp_non_negative(supply)
    demand = clamp_non_negative(demand)
    if supply <= 0 and demand <= 0:
        return 1.0
    return demand / max(epsilon, supply)


def price_change_pct(current: float, base: float) -> float:
    if base <= 0:
        return 0.0
    return (current - base) / base * 100


def add_volume(totals: dict[str, float], rates: Mapping[str, float], units: int) -> None:
    for name, rate in rates.items():
        totals[name] = totals.get(name, 0.0) + rate * units


def as_entry(raw: Any) -> MarketEntry | None:
    if isinstance(raw, MarketEntry):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return MarketEntry.model_validate(dict(raw))
    except ValidationError:
        return None


def as_flow(raw: Any) -> ProductionFlow | None:
    if isinstance(raw, ProductionFlow):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return ProductionFlow.model_validate(dict(raw))
    except ValidationError:
        return None


def unit_flows(
    entry: MarketEntry, sector_flows: Mapping[str, Any]
) -> list[tuple[str, int, ProductionFlow | None]]:
    """(unit type, count, flow) for every unit type the entry actually holds."""
    held = []
    for unit_type in UNIT_TYPES:
        units = entry.count_for(unit_type)
        raw = sector_flows.get(unit_type)
        if units > 0 and raw is not None:
            held.append((unit_type, units, as_flow(raw)))
    return held
