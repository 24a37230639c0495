from pydantic import BaseModel, Field, field_validator

from corpsim.domain.entities import DEFAULT_PERIOD_HOURS, ProductionFlow, UnitEconomics, UnitType


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class PeriodRules(BaseModel):
    default_hours: int = DEFAULT_PERIOD_HOURS
    turn_hours: int = 1

    @field_validator("default_hours", "turn_hours")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("period hours must be positive")
        return value

class DemandPricingRules(BaseModel):
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
    cost_floor_sectors: list[str] = Field(default_factory=lambda: ["Defense"])
    electricity_product: str = "Electricity"

class ResourceRules(BaseModel):
    base_price: float
    reference_pool: float

class ProductRules(BaseModel):
    reference_value: float
    min_price: float = 0.0

class MarketRules(BaseModel):
    min_commodity_price: float = 10.0
    zero_supply_epsilon: float = 0.01
    empty_pool_scarcity: float = 20.0

class TurnRules(BaseModel):
    max_workers: int = 4

class EconomyRules(BaseModel):
    project: ProjectRules
    period: PeriodRules = Field(default_factory=PeriodRules)
    unit_economics: UnitEconomics = Field(default_factory=UnitEconomics)
    demand_pricing: DemandPricingRules = Field(default_factory=DemandPricingRules)
    market: MarketRules = Field(default_factory=MarketRules)
    resources: dict[str, ResourceRules]
    products: dict[str, ProductRules]
    sectors: dict[str, dict[UnitType, ProductionFlow]]
    turn: TurnRules = Field(default_factory=TurnRules)
