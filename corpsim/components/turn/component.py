"""
Turn component - Settle one game turn for every corporation.

Each corporation's statement is computed against the same price snapshot,
its retained earnings become the capital delta, and the result is handed to
a StatementSinkPort.

Invariants:
- One result per corporation, in input order
- A failing corporation never aborts the turn
- capital_delta == statement.retained_earnings for every success
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from corpsim.components.statements import (
    DemandPricingPolicy,
    PriceSourcePort,
    ProductionChainPort,
)
from corpsim.domain.entities import Corporation
from corpsim.rules.models import EconomyRules

from ._impl import TurnProcessor
from .models import RunTurnInput, TurnBatchResult, TurnConfig
from .ports import StatementSinkPort


def run_turn(
    corporations: Sequence[Corporation | Mapping[str, Any]],
    prices: PriceSourcePort,
    chain: ProductionChainPort,
    config: TurnConfig | None = None,
    sink: StatementSinkPort | None = None,
    policy: DemandPricingPolicy | None = None,
) -> TurnBatchResult:
    """Settle one turn. See TurnProcessor.process."""
    processor = TurnProcessor(sink=sink, config=config, policy=policy)
    return processor.process(corporations, prices, chain)


# --- Run Function (Atomic Component Pattern) ---


def run(
    input_data: RunTurnInput,
    config: TurnConfig | None = None,
    sink: StatementSinkPort | None = None,
    policy: DemandPricingPolicy | None = None,
) -> TurnBatchResult:
    """Main entry point following the atomic component pattern."""
    return run_turn(
        input_data.corporations,
        input_data.prices,
        input_data.chain,
        config=config,
        sink=sink,
        policy=policy,
    )


# --- Configuration Loader ---


def load_config_from_rules(rules: EconomyRules, max_workers: int | None = None) -> TurnConfig:
    """Build turn config from economy rules; `max_workers` overrides the rules."""
    return TurnConfig(
        period_hours=rules.period.turn_hours,
        max_workers=max_workers if max_workers is not None else rules.turn.max_workers,
    )
