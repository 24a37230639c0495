"""
Turn component.

Public API for settling a game turn across corporations.
"""

from ._impl import InMemoryStatementSink, TurnProcessor
from .component import load_config_from_rules, run, run_turn
from .models import (
    CorporationTurnResult,
    RunTurnInput,
    TurnBatchResult,
    TurnConfig,
    TurnStatus,
)
from .ports import StatementSinkPort

__all__ = [
    # Functions
    "load_config_from_rules",
    "run",
    "run_turn",
    # Processing
    "InMemoryStatementSink",
    "TurnProcessor",
    # Models
    "CorporationTurnResult",
    "RunTurnInput",
    "TurnBatchResult",
    "TurnConfig",
    "TurnStatus",
    # Ports
    "StatementSinkPort",
]
