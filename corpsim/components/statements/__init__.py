"""
Statements component.

Public API for per-period corporate financial statements.
"""

from .component import (
    compute_financial_statements,
    compute_for_corporation,
    load_policy_from_rules,
    run,
    statement_to_dict,
)
from .models import (
    ComputeStatementsInput,
    ComputeStatementsOutput,
    ConsolidatedStatement,
    DemandPricingPolicy,
    SectorStatement,
    UnitLine,
)
from .ports import PriceSourcePort, ProductionChainPort

__all__ = [
    # Functions
    "compute_financial_statements",
    "compute_for_corporation",
    "load_policy_from_rules",
    "run",
    "statement_to_dict",
    # Models
    "ComputeStatementsInput",
    "ComputeStatementsOutput",
    "ConsolidatedStatement",
    "DemandPricingPolicy",
    "SectorStatement",
    "UnitLine",
    # Ports
    "PriceSourcePort",
    "ProductionChainPort",
]
