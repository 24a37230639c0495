import math
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enums / Literals ---
UnitType = Literal["retail", "production", "service", "extraction"]
ItemClass = Literal["resource", "product"]

UNIT_TYPES: tuple[UnitType, ...] = ("retail", "production", "service", "extraction")

DEFAULT_PERIOD_HOURS = 96


def clamp_non_negative(value: Any) -> float:
    """Coerce to a finite float >= 0; anything else becomes 0.0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number <= 0:
        return 0.0
    return number


def clamp_unit_count(value: Any) -> int:
    return int(clamp_non_negative(value))


def entry_list(value: Any) -> list[Any] | None:
    """Entries as a list; None when `value` is not a collection of entries."""
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        return None
    return list(value)


# --- Market Presence ---

class MarketEntry(BaseModel):
    """A corporation's presence in one region operating one sector."""

    sector_type: str = ""
    state_code: str | None = None
    retail_count: int = 0
    production_count: int = 0
    service_count: int = 0
    extraction_count: int = 0

    @field_validator(
        "retail_count", "production_count", "service_count", "extraction_count", mode="before"
    )
    @classmethod
    def _clamp_count(cls, value: Any) -> int:
        return clamp_unit_count(value)

    @field_validator("sector_type", mode="before")
    @classmethod
    def _sector_name(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("state_code", mode="before")
    @classmethod
    def _region_code(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    def count_for(self, unit_type: UnitType) -> int:
        return int(getattr(self, f"{unit_type}_count"))

# --- Production Chain ---

class FlowLeg(BaseModel):
    model_config = ConfigDict(frozen=True)

    resources: dict[str, float] = Field(default_factory=dict)
    products: dict[str, float] = Field(default_factory=dict)

    @field_validator("resources", "products", mode="before")
    @classmethod
    def _no_null_map(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("resources", "products")
    @classmethod
    def _non_negative_rates(cls, value: dict[str, float]) -> dict[str, float]:
        for name, rate in value.items():
            if not math.isfinite(rate) or rate < 0:
                raise ValueError(f"rate for '{name}' must be a finite number >= 0, got {rate}")
        return value

    @property
    def is_empty(self) -> bool:
        return not self.resources and not self.products


class ProductionFlow(BaseModel):
    """Per-unit hourly consumption and production for one (sector, unit type)."""

    model_config = ConfigDict(frozen=True)

    inputs: FlowLeg = Field(default_factory=FlowLeg)
    outputs: FlowLeg = Field(default_factory=FlowLeg)


EMPTY_FLOW = ProductionFlow()

SectorUnitFlows = Mapping[str, Mapping[str, ProductionFlow]]
PriceTable = Mapping[str, Any]

# --- Economics ---

class UnitEconomicsEntry(BaseModel):
    base_revenue: float = 0.0
    base_cost: float = 0.0

    @field_validator("base_revenue", "base_cost", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> float:
        return clamp_non_negative(value)


class UnitEconomics(BaseModel):
    """Fallback hourly revenue/cost per unit archetype."""

    retail: UnitEconomicsEntry = Field(
        default_factory=lambda: UnitEconomicsEntry(base_revenue=500, base_cost=300)
    )
    production: UnitEconomicsEntry = Field(
        default_factory=lambda: UnitEconomicsEntry(base_revenue=800, base_cost=600)
    )
    service: UnitEconomicsEntry = Field(
        default_factory=lambda: UnitEconomicsEntry(base_revenue=400, base_cost=200)
    )
    extraction: UnitEconomicsEntry = Field(
        default_factory=lambda: UnitEconomicsEntry(base_revenue=1000, base_cost=700)
    )

    def for_unit(self, unit_type: UnitType) -> UnitEconomicsEntry:
        entry: UnitEconomicsEntry = getattr(self, unit_type)
        return entry


class FixedCosts(BaseModel):
    ceo_salary: float = 0.0
    overhead: float = 0.0
    per_period: float = 0.0  # charged once per sector statement

    @field_validator("ceo_salary", "overhead", "per_period", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> float:
        return clamp_non_negative(value)

    @property
    def corporate(self) -> float:
        return self.ceo_salary + self.overhead


# --- Corporations ---

class Corporation(BaseModel):
    """The slice of a corporation the turn processor settles."""

    id: int | str
    name: str = ""
    entries: list[MarketEntry] = Field(default_factory=list)
    fixed_costs: FixedCosts = Field(default_factory=FixedCosts)
    dividend_percentage: float = 0.0
    shares_outstanding: int = 0

    @field_validator("shares_outstanding", mode="before")
    @classmethod
    def _clamp_shares(cls, value: Any) -> int:
        return clamp_unit_count(value)
