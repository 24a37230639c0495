"""
Unit tests for the turn component.

Tests:
- Capital delta and dividend per share from the settled statement
- Input order of results
- Isolation of corporations that fail to settle or record
- Batch summary and engine error tags
"""

import itertools
import time
from dataclasses import dataclass, field
from typing import Any

import pytest

from corpsim.components.turn import (
    CorporationTurnResult,
    InMemoryStatementSink,
    RunTurnInput,
    TurnConfig,
    TurnProcessor,
    TurnStatus,
    run,
    run_turn,
)
from corpsim.domain.entities import Corporation, ProductionFlow, UnitEconomics

# --- Fixtures ---


@dataclass
class FakePrices:
    commodity_prices: dict[str, float] = field(default_factory=lambda: {"Oil": 75})
    product_prices: dict[str, float] = field(default_factory=dict)


@dataclass
class FakeChain:
    sectors: dict[str, Any] = field(
        default_factory=lambda: {
            "Energy": {
                "extraction": ProductionFlow.model_validate(
                    {"outputs": {"resources": {"Oil": 2.0}}}
                )
            }
        }
    )
    unit_economics: UnitEconomics = field(default_factory=UnitEconomics)


class FailingSink:
    """Sink that refuses one corporation."""

    def __init__(self, refuse_id: Any) -> None:
        self.refuse_id = refuse_id
        self.recorded: list[CorporationTurnResult] = []

    def record(self, result: CorporationTurnResult) -> None:
        if result.corporation_id == self.refuse_id:
            raise RuntimeError("storage unavailable")
        self.recorded.append(result)


class TimingSink:
    """Sink that notes the timing each result carries when it is recorded."""

    def __init__(self) -> None:
        self.timings: list[int] = []

    def record(self, result: CorporationTurnResult) -> None:
        self.timings.append(result.execution_time_ms)


def _corporation(corp_id: int, extraction: int = 1, **kwargs: Any) -> Corporation:
    return Corporation(
        id=corp_id,
        name=f"Corp {corp_id}",
        entries=[{"sector_type": "Energy", "extraction_count": extraction}],
        **kwargs,
    )


@pytest.fixture
def prices() -> FakePrices:
    return FakePrices()


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def config() -> TurnConfig:
    return TurnConfig(period_hours=10, max_workers=3)


# --- Settlement ---


class TestSettlement:
    def test_capital_delta_is_retained_earnings(
        self, prices: FakePrices, chain: FakeChain, config: TurnConfig
    ) -> None:
        corp = _corporation(1, dividend_percentage=20, shares_outstanding=100)

        result = TurnProcessor(config=config).settle(corp, prices, chain)

        assert result.status == TurnStatus.SUCCESS
        assert result.statement is not None
        # revenue 75 * 2 * 10 = 1500, cost 700 * 10 = 7000
        assert result.statement.revenue == pytest.approx(1500)
        assert result.capital_delta == result.statement.retained_earnings
        assert result.dividend_per_share == 0

    def test_dividend_per_share(self, chain: FakeChain, config: TurnConfig) -> None:
        prices = FakePrices(commodity_prices={"Oil": 1000})
        corp = _corporation(1, dividend_percentage=50, shares_outstanding=100)

        result = TurnProcessor(config=config).settle(corp, prices, chain)

        # revenue 20,000, cost 7,000, operating 13,000, dividends 6,500
        assert result.statement is not None
        assert result.statement.dividends == pytest.approx(6500)
        assert result.dividend_per_share == pytest.approx(65)
        assert result.capital_delta == pytest.approx(6500)

    def test_no_shares_means_no_per_share_dividend(
        self, chain: FakeChain, config: TurnConfig
    ) -> None:
        prices = FakePrices(commodity_prices={"Oil": 1000})
        corp = _corporation(1, dividend_percentage=50)

        result = TurnProcessor(config=config).settle(corp, prices, chain)

        assert result.dividend_per_share == 0

    def test_plain_mapping_corporation(
        self, prices: FakePrices, chain: FakeChain, config: TurnConfig
    ) -> None:
        raw = {"id": "acme", "entries": [{"sector_type": "Energy", "extraction_count": 1}]}

        result = TurnProcessor(config=config).settle(raw, prices, chain)

        assert result.status == TurnStatus.SUCCESS
        assert result.corporation_id == "acme"

    def test_timing_is_set_before_recording(
        self,
        prices: FakePrices,
        chain: FakeChain,
        config: TurnConfig,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        clock = itertools.count(0.0, 0.25)
        monkeypatch.setattr(time, "monotonic", lambda: next(clock))
        sink = TimingSink()

        result = TurnProcessor(sink=sink, config=config).settle(_corporation(1), prices, chain)

        assert result.execution_time_ms > 0
        assert sink.timings == [result.execution_time_ms]

    def test_invalid_corporation_fails(
        self, prices: FakePrices, chain: FakeChain, config: TurnConfig
    ) -> None:
        result = TurnProcessor(config=config).settle({"id": 7, "entries": "nope"}, prices, chain)

        assert result.status == TurnStatus.FAILURE
        assert result.corporation_id == 7
        assert result.error


# --- Batch ---


class TestProcess:
    def test_results_in_input_order(
        self, prices: FakePrices, chain: FakeChain, config: TurnConfig
    ) -> None:
        corporations = [_corporation(i, extraction=i) for i in range(1, 9)]

        batch = run_turn(corporations, prices, chain, config=config)

        assert [r.corporation_id for r in batch.results] == list(range(1, 9))
        assert batch.total_processed == 8
        assert batch.succeeded == 8
        assert batch.failed == 0

    def test_results_recorded_in_sink(
        self, prices: FakePrices, chain: FakeChain, config: TurnConfig
    ) -> None:
        sink = InMemoryStatementSink()

        run_turn([_corporation(1), _corporation(2)], prices, chain, config=config, sink=sink)

        assert sorted(r.corporation_id for r in sink.results) == [1, 2]
        assert len(sink.for_corporation(2)) == 1

    def test_sink_failure_is_isolated(
        self, prices: FakePrices, chain: FakeChain, config: TurnConfig
    ) -> None:
        sink = FailingSink(refuse_id=2)

        batch = run_turn(
            [_corporation(1), _corporation(2), _corporation(3)],
            prices,
            chain,
            config=config,
            sink=sink,
        )

        assert [r.status for r in batch.results] == [
            TurnStatus.SUCCESS,
            TurnStatus.FAILURE,
            TurnStatus.SUCCESS,
        ]
        assert batch.results[1].error == "storage unavailable"
        assert batch.succeeded == 2
        assert batch.failed == 1
        assert sorted(r.corporation_id for r in sink.recorded) == [1, 3]

    def test_engine_errors_are_collected(
        self, prices: FakePrices, chain: FakeChain, config: TurnConfig
    ) -> None:
        lost = Corporation(id=9, entries=[{"sector_type": "Atlantis", "retail_count": 1}])

        batch = run_turn([lost, _corporation(1)], prices, chain, config=config)

        assert batch.succeeded == 2
        assert batch.engine_errors == ["missing_flow_Atlantis"]

    def test_empty_turn(self, prices: FakePrices, chain: FakeChain) -> None:
        batch = run_turn([], prices, chain)

        assert batch.total_processed == 0
        assert batch.results == []

    def test_run_entry_point(self, prices: FakePrices, chain: FakeChain) -> None:
        batch = run(
            RunTurnInput(corporations=[_corporation(1)], prices=prices, chain=chain),
            config=TurnConfig(period_hours=1, max_workers=1),
        )

        assert batch.succeeded == 1
        assert batch.results[0].statement is not None
        assert batch.results[0].statement.period_hours == 1
