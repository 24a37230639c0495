"""
Turn component input/output models.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from corpsim.components.statements import (
    ConsolidatedStatement,
    PriceSourcePort,
    ProductionChainPort,
)
from corpsim.domain.entities import Corporation


class TurnStatus(Enum):
    """Settlement result status for one corporation."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class TurnConfig:
    """Configuration for one turn."""

    period_hours: int = 1  # one hourly turn
    max_workers: int = 4


@dataclass(frozen=True)
class RunTurnInput:
    """Input for settling one turn over many corporations."""

    corporations: Sequence[Corporation | Mapping[str, Any]]
    prices: PriceSourcePort
    chain: ProductionChainPort


@dataclass
class CorporationTurnResult:
    """Result of settling one corporation for one turn."""

    corporation_id: int | str | None
    status: TurnStatus
    statement: ConsolidatedStatement | None = None
    capital_delta: float = 0.0  # retained earnings booked to capital
    dividend_per_share: float = 0.0
    message: str = ""
    error: str | None = None
    execution_time_ms: int = 0


@dataclass
class TurnBatchResult:
    """Result of settling a whole turn."""

    total_processed: int
    succeeded: int
    failed: int
    results: list[CorporationTurnResult]
    engine_errors: list[str] = field(default_factory=list)
