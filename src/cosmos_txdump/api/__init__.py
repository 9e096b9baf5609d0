"""Remote API access: page fetching and range orchestration"""

from .fetcher import PageFetcher, create_session
from .orchestrator import (
    ConcurrentFetchStrategy,
    FetchStrategy,
    RangeOrchestrator,
    SequentialFetchStrategy,
    build_strategy,
)

__all__ = [
    'PageFetcher',
    'create_session',
    'ConcurrentFetchStrategy',
    'FetchStrategy',
    'RangeOrchestrator',
    'SequentialFetchStrategy',
    'build_strategy',
]
