"""
Turn processing internals.

TurnProcessor settles every corporation against one price snapshot on a
thread pool. Each corporation is isolated: an exception while computing or
recording its statement becomes a FAILURE result and the turn goes on.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from corpsim.components.statements import (
    ConsolidatedStatement,
    DemandPricingPolicy,
    PriceSourcePort,
    ProductionChainPort,
    compute_for_corporation,
)
from corpsim.domain.entities import Corporation

from .models import CorporationTurnResult, TurnBatchResult, TurnConfig, TurnStatus
from .ports import StatementSinkPort

logger = logging.getLogger(__name__)


class InMemoryStatementSink:
    """Thread-safe sink keeping results in memory (dev/test)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: list[CorporationTurnResult] = []

    def record(self, result: CorporationTurnResult) -> None:
        with self._lock:
            self._results.append(result)

    @property
    def results(self) -> list[CorporationTurnResult]:
        with self._lock:
            return list(self._results)

    def for_corporation(self, corporation_id: int | str) -> list[CorporationTurnResult]:
        return [r for r in self.results if r.corporation_id == corporation_id]


def corporation_id_of(raw: Corporation | Mapping[str, Any] | Any) -> int | str | None:
    if isinstance(raw, Corporation):
        return raw.id
    if isinstance(raw, Mapping):
        return raw.get("id")
    return None


def dividend_per_share(statement: ConsolidatedStatement, shares_outstanding: int) -> float:
    if shares_outstanding <= 0:
        return 0.0
    return statement.dividends / shares_outstanding


class TurnProcessor:
    """
    Settles one turn for many corporations.

    Results come back in input order whatever order the workers finish in.
    """

    def __init__(
        self,
        sink: StatementSinkPort | None = None,
        config: TurnConfig | None = None,
        policy: DemandPricingPolicy | None = None,
    ) -> None:
        """
        Initialize processor.

        Args:
            sink: Destination for settled results (defaults to in-memory)
            config: Period length and worker count
            policy: Retail/service pricing constants
        """
        self._sink = sink if sink is not None else InMemoryStatementSink()
        self._config = config or TurnConfig()
        self._policy = policy

    @property
    def sink(self) -> StatementSinkPort:
        return self._sink

    def settle(
        self,
        raw: Corporation | Mapping[str, Any],
        prices: PriceSourcePort,
        chain: ProductionChainPort,
    ) -> CorporationTurnResult:
        """
        Settle a single corporation.

        Never raises; failures are returned as FAILURE results.
        """
        start_time = time.monotonic()
        corporation_id = corporation_id_of(raw)

        try:
            corporation = raw if isinstance(raw, Corporation) else Corporation.model_validate(raw)
            corporation_id = corporation.id

            statement = compute_for_corporation(
                corporation,
                prices,
                chain,
                self._config.period_hours,
                self._policy,
            )
            result = CorporationTurnResult(
                corporation_id=corporation_id,
                status=TurnStatus.SUCCESS,
                statement=statement,
                capital_delta=statement.retained_earnings,
                dividend_per_share=dividend_per_share(statement, corporation.shares_outstanding),
                message=f"Settled corporation {corporation_id}",
                execution_time_ms=int((time.monotonic() - start_time) * 1000),
            )
            self._sink.record(result)
            return result

        except Exception as e:
            logger.exception("Turn settlement failed for corporation %s", corporation_id)
            return CorporationTurnResult(
                corporation_id=corporation_id,
                status=TurnStatus.FAILURE,
                message=f"Exception during settlement of {corporation_id}",
                error=str(e),
                execution_time_ms=int((time.monotonic() - start_time) * 1000),
            )

    def process(
        self,
        corporations: Sequence[Corporation | Mapping[str, Any]],
        prices: PriceSourcePort,
        chain: ProductionChainPort,
    ) -> TurnBatchResult:
        """
        Settle every corporation for this turn.

        Args:
            corporations: Corporations (models or plain mappings)
            prices: Price snapshot shared by the whole turn
            chain: Production chains and unit economics

        Returns:
            TurnBatchResult with one result per corporation, in input order
        """
        corporations = list(corporations)
        if not corporations:
            return TurnBatchResult(total_processed=0, succeeded=0, failed=0, results=[])

        workers = max(1, min(self._config.max_workers, len(corporations)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="corpsim-turn") as pool:
            futures = [pool.submit(self.settle, corp, prices, chain) for corp in corporations]
            results = [future.result() for future in futures]

        succeeded = 0
        failed = 0
        engine_errors: list[str] = []
        for result in results:
            if result.status == TurnStatus.SUCCESS:
                succeeded += 1
            else:
                failed += 1
            if result.statement is not None:
                for tag in result.statement.errors:
                    if tag not in engine_errors:
                        engine_errors.append(tag)

        logger.info(
            "Turn settled: %d corporations, %d succeeded, %d failed",
            len(results),
            succeeded,
            failed,
        )
        if engine_errors:
            logger.warning("Statement errors this turn: %s", ", ".join(engine_errors))

        return TurnBatchResult(
            total_processed=len(results),
            succeeded=succeeded,
            failed=failed,
            results=results,
            engine_errors=engine_errors,
        )
