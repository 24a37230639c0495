"""
Pricing component.

Public API for commodity and product market prices.
"""

from .component import (
    build_price_snapshot,
    calculate_commodity_price,
    calculate_product_price,
    calculate_static_commodity_price,
    load_config_from_rules,
    run,
    snapshot_to_dict,
    tally_market_volumes,
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

__all__ = [
    # Functions
    "build_price_snapshot",
    "calculate_commodity_price",
    "calculate_product_price",
    "calculate_static_commodity_price",
    "load_config_from_rules",
    "run",
    "snapshot_to_dict",
    "tally_market_volumes",
    # Models
    "BuildSnapshotInput",
    "BuildSnapshotOutput",
    "CommodityQuote",
    "MarketVolumes",
    "PriceSnapshot",
    "PricingConfig",
    "ProductQuote",
]
