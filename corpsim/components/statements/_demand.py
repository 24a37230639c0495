"""
Demand-side pricing strategies for retail and service units.

Retail and service units earn revenue from the products they consume, not
the ones they make. Two strategies exist and a sector gets exactly one:

- GeneralDemandPricing: revenue is the shelf value of what was consumed,
  cost is the discounted wholesale price.
- CostFloorDemandPricing: revenue is derived from the wholesale cost
  (procurement-style sectors such as Defense).

Electricity consumed by service units is metered separately through
UtilityPricing regardless of the sector's strategy.

Functional Core - pure business logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .models import DemandPricingPolicy

DemandUnitType = Literal["retail", "service"]


@dataclass(frozen=True)
class DemandLeg:
    """Hourly economics of one consumed product for a single unit."""

    product: str
    consumed: float
    wholesale_cost: float
    revenue: float


@dataclass(frozen=True)
class GeneralDemandPricing:
    consumption: float
    wholesale_discount: float
    kind: Literal["general"] = "general"

    def price_leg(self, product: str, price: float) -> DemandLeg:
        cost = price * self.consumption * self.wholesale_discount
        return DemandLeg(
            product=product,
            consumed=self.consumption,
            wholesale_cost=cost,
            revenue=price * self.consumption,
        )


@dataclass(frozen=True)
class CostFloorDemandPricing:
    consumption: float
    wholesale_discount: float
    revenue_multiplier: float
    kind: Literal["cost_floor"] = "cost_floor"

    def price_leg(self, product: str, price: float) -> DemandLeg:
        cost = price * self.consumption * self.wholesale_discount
        return DemandLeg(
            product=product,
            consumed=self.consumption,
            wholesale_cost=cost,
            revenue=cost * self.revenue_multiplier,
        )


@dataclass(frozen=True)
class UtilityPricing:
    """Metered utility input: no wholesale discount, passed through at price."""

    product: str
    consumption: float

    def price_leg(self, product: str, price: float) -> DemandLeg:
        cost = price * self.consumption
        return DemandLeg(product=product, consumed=self.consumption, wholesale_cost=cost, revenue=cost)


DemandPricing = GeneralDemandPricing | CostFloorDemandPricing


def select_demand_pricing(
    sector: str,
    unit_type: DemandUnitType,
    policy: DemandPricingPolicy,
) -> DemandPricing:
    """Pick the pricing strategy for a sector's retail or service units."""
    if sector in policy.cost_floor_sectors:
        return CostFloorDemandPricing(
            consumption=policy.cost_floor_consumption,
            wholesale_discount=policy.cost_floor_wholesale_discount,
            revenue_multiplier=policy.cost_floor_revenue_multiplier,
        )

    if unit_type == "retail":
        return GeneralDemandPricing(
            consumption=policy.retail_product_consumption,
            wholesale_discount=policy.retail_wholesale_discount,
        )

    return GeneralDemandPricing(
        consumption=policy.service_product_consumption,
        wholesale_discount=policy.service_wholesale_discount,
    )


def utility_pricing_for(
    unit_type: DemandUnitType, policy: DemandPricingPolicy
) -> UtilityPricing | None:
    if unit_type != "service" or not policy.electricity_product:
        return None
    return UtilityPricing(
        product=policy.electricity_product,
        consumption=policy.service_electricity_consumption,
    )


def price_demand_legs(
    product_prices: dict[str, float],
    strategy: DemandPricing,
    utility: UtilityPricing | None = None,
) -> list[DemandLeg]:
    """Price every consumed product. `product_prices` maps name -> resolved price."""
    legs: list[DemandLeg] = []
    for product, price in product_prices.items():
        if utility is not None and product == utility.product:
            legs.append(utility.price_leg(product, price))
        else:
            legs.append(strategy.price_leg(product, price))
    return legs


def floor_revenue(legs: list[DemandLeg], min_gross_margin_pct: float) -> tuple[float, float]:
    """
    Apply the gross-margin floor.

    Returns:
        (revenue per unit-hour, wholesale cost per unit-hour)
    """
    total_cost = sum((leg.wholesale_cost for leg in legs), 0.0)
    raw_revenue = sum((leg.revenue for leg in legs), 0.0)
    min_revenue = total_cost * (1 + min_gross_margin_pct)
    return max(raw_revenue, min_revenue), total_cost
