"""Height-range orchestration over the page fetcher.

A range ``[start, end]`` is split into one job per height. Jobs run under a
FetchStrategy - either a bounded thread pool or a polite sequential loop -
and their results are reassembled in ascending height order regardless of
completion order. The first failing height aborts the whole range.
"""

import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from .fetcher import PageFetcher
from ..errors import TaskFailure
from ..models.core import ComprehensiveTransaction, FetcherConfig, IndividualMessageTransaction
from ..models.wire import RawPage


logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_MAX_WORKERS = 10


class FetchStrategy(ABC):
    """Runs one job per height and returns results keyed by height"""

    @abstractmethod
    def run(self, heights: Sequence[int], job: Callable[[int], T]) -> Dict[int, T]:
        """Run ``job`` for every height.

        Raises:
            TaskFailure: on the first height whose job failed
        """
        pass

    def between_pages(self) -> None:
        """Called before each follow-up page of one height; no pause by default"""


class ConcurrentFetchStrategy(FetchStrategy):
    """Bounded fan-out on a fixed-size thread pool"""

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers

    def run(self, heights: Sequence[int], job: Callable[[int], T]) -> Dict[int, T]:
        results: Dict[int, T] = {}
        if not heights:
            return results

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="txdump-fetch")
        try:
            try:
                futures = {executor.submit(job, height): height for height in heights}
            except RuntimeError as e:
                raise TaskFailure(heights[0], e) from e

            done, _ = wait(futures, return_when=FIRST_EXCEPTION)

            # lowest failing height among the finished jobs
            failed = sorted(
                (futures[f] for f in done if not f.cancelled() and f.exception() is not None)
            )
            if failed:
                height = failed[0]
                future = next(f for f, h in futures.items() if h == height)
                cause = future.exception()
                logger.error(f"Height {height} failed, aborting range: {cause}")
                raise TaskFailure(height, cause) from cause

            for future, height in futures.items():
                results[height] = future.result()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        return results


class SequentialFetchStrategy(FetchStrategy):
    """One height at a time with a fixed pause between requests.

    The pause applies between heights and between the pages of one height.
    """

    def __init__(self, delay: float = 0.5, sleep: Callable[[float], None] = time.sleep):
        if delay < 0:
            raise ValueError("delay cannot be negative")
        self.delay = delay
        self.sleep = sleep

    def run(self, heights: Sequence[int], job: Callable[[int], T]) -> Dict[int, T]:
        results: Dict[int, T] = {}
        for index, height in enumerate(heights):
            if index > 0 and self.delay:
                self.sleep(self.delay)
            try:
                results[height] = job(height)
            except Exception as e:
                logger.error(f"Height {height} failed, aborting range: {e}")
                raise TaskFailure(height, e) from e
        return results

    def between_pages(self) -> None:
        if self.delay:
            self.sleep(self.delay)


def build_strategy(config: FetcherConfig) -> FetchStrategy:
    """Select the execution strategy named in the configuration"""
    if config.strategy == 'concurrent':
        return ConcurrentFetchStrategy(max_workers=config.max_concurrency)
    if config.strategy == 'sequential':
        return SequentialFetchStrategy(delay=config.request_delay)
    raise ValueError(f"Unknown fetch strategy: {config.strategy}")


class RangeOrchestrator:
    """Fetches every height of a closed interval, all-or-nothing"""

    def __init__(self, fetcher: PageFetcher, strategy: Optional[FetchStrategy] = None):
        self.fetcher = fetcher
        self.strategy = strategy or build_strategy(fetcher.config)

    def fetch_range(self, start: int, end: int) -> List[RawPage]:
        """Raw pages for ``[start, end]`` in ascending height order

        Raises:
            ValueError: invalid interval
            TaskFailure: any height failed; no partial results are returned
        """
        heights = self._heights(start, end)
        logger.info(f"Fetching heights {start}..{end} ({len(heights)} heights) "
                    f"with {type(self.strategy).__name__}")

        by_height = self.strategy.run(
            heights, partial(self.fetcher.fetch_height, between_pages=self.strategy.between_pages)
        )

        pages: List[RawPage] = []
        for height in heights:
            pages.extend(by_height[height])
        logger.info(f"Fetched {len(pages)} page(s) for heights {start}..{end}")
        return pages

    def fetch_range_comprehensive(self, start: int, end: int) -> List[ComprehensiveTransaction]:
        return self.fetcher.translator.translate_pages(self.fetch_range(start, end))

    def fetch_range_individual(self, start: int, end: int) -> List[IndividualMessageTransaction]:
        return self.fetcher.translator.explode_all(self.fetch_range_comprehensive(start, end))

    @staticmethod
    def _heights(start: int, end: int) -> List[int]:
        if start < 0 or end < 0:
            raise ValueError(f"Heights must be non-negative: {start}..{end}")
        if start > end:
            raise ValueError(f"Start height {start} is greater than end height {end}")
        return list(range(start, end + 1))
