"""Tests for height-range orchestration and fetch strategies."""

import threading

import pytest

from cosmos_txdump.api.fetcher import PageFetcher
from cosmos_txdump.api.orchestrator import (
    ConcurrentFetchStrategy,
    RangeOrchestrator,
    SequentialFetchStrategy,
    build_strategy,
)
from cosmos_txdump.errors import NetworkError, TaskFailure
from cosmos_txdump.models.core import FetcherConfig


class TestFetchStrategies:
    """Test cases for the strategy implementations"""

    def test_concurrent_results_keyed_by_height(self):
        strategy = ConcurrentFetchStrategy(max_workers=4)

        results = strategy.run([1, 2, 3], lambda h: h * 10)

        assert results == {1: 10, 2: 20, 3: 30}

    def test_concurrent_empty(self):
        assert ConcurrentFetchStrategy().run([], lambda h: h) == {}

    def test_concurrent_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            ConcurrentFetchStrategy(max_workers=0)

    def test_concurrent_respects_pool_size(self):
        lock = threading.Lock()
        state = {'active': 0, 'peak': 0}
        release = threading.Event()

        def job(height):
            with lock:
                state['active'] += 1
                state['peak'] = max(state['peak'], state['active'])
            release.wait(0.05)
            with lock:
                state['active'] -= 1
            return height

        ConcurrentFetchStrategy(max_workers=2).run(list(range(8)), job)

        assert state['peak'] <= 2

    def test_concurrent_wraps_failure(self):
        def job(height):
            if height == 3:
                raise NetworkError("boom", status_code=500)
            return height

        with pytest.raises(TaskFailure) as exc_info:
            ConcurrentFetchStrategy(max_workers=2).run([1, 2, 3, 4], job)

        assert exc_info.value.height == 3
        assert isinstance(exc_info.value.cause, NetworkError)
        assert not exc_info.value.is_infrastructure

    def test_concurrent_infrastructure_failure(self):
        def job(height):
            raise KeyError("worker crashed")

        with pytest.raises(TaskFailure) as exc_info:
            ConcurrentFetchStrategy().run([5], job)

        assert exc_info.value.is_infrastructure

    def test_sequential_sleeps_between_heights(self):
        sleeps = []
        order = []
        strategy = SequentialFetchStrategy(delay=0.25, sleep=sleeps.append)

        results = strategy.run([10, 11, 12], lambda h: order.append(h) or h)

        assert results == {10: 10, 11: 11, 12: 12}
        assert order == [10, 11, 12]
        assert sleeps == [0.25, 0.25]

    def test_sequential_zero_delay_never_sleeps(self):
        sleeps = []
        SequentialFetchStrategy(delay=0, sleep=sleeps.append).run([1, 2], lambda h: h)
        assert sleeps == []

    def test_sequential_stops_at_first_failure(self):
        calls = []

        def job(height):
            calls.append(height)
            if height == 2:
                raise NetworkError("down")
            return height

        with pytest.raises(TaskFailure) as exc_info:
            SequentialFetchStrategy(delay=0, sleep=lambda s: None).run([1, 2, 3], job)

        assert exc_info.value.height == 2
        assert calls == [1, 2]

    def test_sequential_rejects_negative_delay(self):
        with pytest.raises(ValueError):
            SequentialFetchStrategy(delay=-1)

    def test_build_strategy(self):
        concurrent = build_strategy(FetcherConfig(strategy="concurrent", max_concurrency=3))
        sequential = build_strategy(FetcherConfig(strategy="sequential", request_delay=1.5))

        assert isinstance(concurrent, ConcurrentFetchStrategy)
        assert concurrent.max_workers == 3
        assert isinstance(sequential, SequentialFetchStrategy)
        assert sequential.delay == 1.5

    def test_build_strategy_unknown(self):
        with pytest.raises(ValueError):
            build_strategy(FetcherConfig(strategy="parallel"))


class TestRangeOrchestrator:
    """Test cases for RangeOrchestrator"""

    def setup_method(self):
        """Set up test fixtures"""
        self.config = FetcherConfig(url="http://node.example", max_concurrency=4)

    def _orchestrator(self, session, strategy=None):
        fetcher = PageFetcher(self.config, session=session)
        return RangeOrchestrator(fetcher, strategy)

    def test_ascending_order_regardless_of_completion(self, payloads, fake_session):
        # earlier heights finish last
        session = fake_session(
            routes={(h, None): (200, payloads.height_page(h, count=2)) for h in range(100, 105)},
            delays={100: 0.2, 101: 0.15, 102: 0.1, 103: 0.05},
        )

        pages = self._orchestrator(session).fetch_range(100, 104)

        heights = [int(r.height) for page in pages for r in page.tx_responses]
        assert heights == sorted(heights)
        assert [r.txhash for r in pages[0].tx_responses] == ["H100T0", "H100T1"]
        assert len(pages) == 5

    def test_single_height_range_matches_fetch_height(self, payloads, fake_session):
        routes = {
            (50, None): (200, payloads.height_page(50, count=2, next_key="P2")),
            (50, "P2"): (200, payloads.height_page(50, count=1, offset=2)),
        }

        ranged = self._orchestrator(fake_session(routes)).fetch_range(50, 50)
        direct = PageFetcher(self.config, session=fake_session(routes)).fetch_height(50)

        assert ranged == direct

    def test_paginated_heights_are_concatenated(self, payloads, fake_session):
        session = fake_session({
            (1, None): (200, payloads.height_page(1, next_key="A")),
            (1, "A"): (200, payloads.height_page(1, offset=1)),
            (2, None): (200, payloads.height_page(2)),
        })

        records = self._orchestrator(session).fetch_range_comprehensive(1, 2)

        assert [r.txhash for r in records] == ["H1T0", "H1T1", "H2T0"]

    def test_failure_returns_no_partial_results(self, payloads, fake_session):
        session = fake_session(
            routes={(h, None): (200, payloads.height_page(h)) for h in range(1, 6)},
        )
        session.routes[(3, None)] = (500, {"message": "internal"})

        with pytest.raises(TaskFailure) as exc_info:
            self._orchestrator(session).fetch_range(1, 5)

        assert exc_info.value.height == 3
        assert isinstance(exc_info.value.cause, NetworkError)
        assert exc_info.value.cause.status_code == 500

    def test_transport_failure_in_range(self, payloads, fake_session, connection_error):
        session = fake_session(errors={2: connection_error})
        orchestrator = self._orchestrator(session, SequentialFetchStrategy(delay=0, sleep=lambda s: None))

        with pytest.raises(TaskFailure) as exc_info:
            orchestrator.fetch_range(1, 3)

        assert exc_info.value.height == 2
        assert not exc_info.value.is_infrastructure

    def test_fetch_range_individual(self, payloads, fake_session):
        two_messages = payloads.page(
            [payloads.tx(messages=[payloads.send(), payloads.delegate()])],
            [payloads.tx_response(height="8", txhash="EIGHT")],
        )
        session = fake_session({(8, None): (200, two_messages), (9, None): (200, payloads.height_page(9))})

        records = self._orchestrator(session).fetch_range_individual(8, 9)

        assert [(r.txhash, r.message_index) for r in records] == [("EIGHT", 0), ("EIGHT", 1), ("H9T0", 0)]

    def test_invalid_interval(self, fake_session):
        orchestrator = self._orchestrator(fake_session())

        with pytest.raises(ValueError):
            orchestrator.fetch_range(10, 9)
        with pytest.raises(ValueError):
            orchestrator.fetch_range(-1, 3)

    def test_default_strategy_from_config(self, fake_session):
        orchestrator = self._orchestrator(fake_session())

        assert isinstance(orchestrator.strategy, ConcurrentFetchStrategy)
        assert orchestrator.strategy.max_workers == 4

    def test_concurrency_bounded_by_config(self, fake_session):
        session = fake_session(delays={h: 0.02 for h in range(20)})

        self._orchestrator(session).fetch_range(0, 19)

        assert session.max_active <= 4
        assert len(session.calls) == 20

    def test_sequential_pauses_between_pages(self, payloads, fake_session):
        session = fake_session({
            (7, None): (200, payloads.height_page(7, next_key="P2")),
            (7, "P2"): (200, payloads.height_page(7, next_key="P3", offset=1)),
            (7, "P3"): (200, payloads.height_page(7, offset=2)),
            (8, None): (200, payloads.height_page(8)),
        })
        sleeps = []
        strategy = SequentialFetchStrategy(delay=0.5, sleep=sleeps.append)

        pages = self._orchestrator(session, strategy).fetch_range(7, 8)

        assert len(pages) == 4
        # two follow-up pages at height 7, one gap between heights
        assert sleeps == [0.5, 0.5, 0.5]

    def test_concurrent_never_pauses_between_pages(self, payloads, fake_session):
        session = fake_session({
            (7, None): (200, payloads.height_page(7, next_key="P2")),
            (7, "P2"): (200, payloads.height_page(7, offset=1)),
        })

        pages = self._orchestrator(session).fetch_range(7, 7)

        assert len(pages) == 2
        assert ConcurrentFetchStrategy().between_pages() is None
