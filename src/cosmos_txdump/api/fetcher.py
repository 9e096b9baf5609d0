"""HTTP page fetcher for the transaction query endpoint."""

import logging
from typing import Callable, Dict, List, Optional, Set

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import NetworkError, ParseError
from ..models.core import ComprehensiveTransaction, FetcherConfig
from ..models.wire import RawPage
from ..parsers.base import ResponseParser
from ..parsers.page_parser import PageParser, SingleTransactionParser
from ..parsers.translator import TransactionTranslator


logger = logging.getLogger(__name__)


def create_session(config: FetcherConfig) -> requests.Session:
    """Create a requests session with a connection pool sized for the worker pool.

    Transport retries stay off unless ``config.retries`` is set.
    """
    session = requests.Session()
    retry_strategy = Retry(
        total=config.retries,
        backoff_factor=config.backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    pool_size = max(1, config.max_concurrency)
    adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({'Accept': 'application/json'})
    return session


class PageFetcher:
    """Fetches raw transaction pages for one height or one hash.

    Stateless apart from the HTTP session: no caching, no retry. The
    session's connection pool is safe to share between worker threads.
    """

    def __init__(self,
                 config: FetcherConfig,
                 session: Optional[requests.Session] = None,
                 request_hook: Optional[Callable[[str], None]] = None,
                 translator: Optional[TransactionTranslator] = None):
        self.config = config
        self.session = session or create_session(config)
        self.request_hook = request_hook
        self.translator = translator or TransactionTranslator()
        self.page_parser = PageParser()
        self.single_parser = SingleTransactionParser()

    def hash_url(self, txhash: str) -> str:
        return f"{self.config.txs_endpoint}/{txhash}"

    def fetch_height(self, height: int,
                     between_pages: Optional[Callable[[], None]] = None) -> List[RawPage]:
        """Fetch every page of transactions at ``height``, following the cursor

        Args:
            height: Block height to query
            between_pages: Called before each follow-up page request

        Raises:
            NetworkError: transport failure or non-2xx status
            ParseError: malformed body, or a cursor that does not advance
        """
        pages = []
        seen_keys: Set[str] = set()
        next_key: Optional[str] = None

        while True:
            params = {'events': f'tx.height={height}'}
            if next_key:
                params['pagination_key'] = next_key
                if between_pages is not None:
                    between_pages()

            page = self._get(self.config.txs_endpoint, params, self.page_parser)
            pages.append(page)

            next_key = page.pagination.next_key
            if not next_key:
                break
            if next_key in seen_keys:
                raise ParseError(f"Pagination for height {height} repeated next_key {next_key!r}")
            seen_keys.add(next_key)

        logger.debug(f"Height {height}: {len(pages)} page(s), "
                     f"{sum(len(p.txs) for p in pages)} transaction(s)")
        return pages

    def fetch_by_hash(self, txhash: str) -> RawPage:
        """Fetch a single transaction by hash"""
        if not txhash or not txhash.strip():
            raise ValueError("Transaction hash cannot be empty")
        return self._get(self.hash_url(txhash.strip()), None, self.single_parser)

    def fetch_height_comprehensive(self, height: int) -> List[ComprehensiveTransaction]:
        return self.translator.translate_pages(self.fetch_height(height))

    def fetch_by_hash_comprehensive(self, txhash: str) -> List[ComprehensiveTransaction]:
        return self.translator.translate_page(self.fetch_by_hash(txhash))

    def _get(self, url: str, params: Optional[Dict[str, str]], parser: ResponseParser) -> RawPage:
        request = requests.Request('GET', url, params=params).prepare()
        full_url = request.url

        logger.info(full_url)
        if self.request_hook is not None:
            self.request_hook(full_url)

        try:
            response = self.session.get(url, params=params, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"Request to {full_url} failed: {e}", url=full_url) from e

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"Request to {full_url} returned HTTP {response.status_code}",
                url=full_url,
                status_code=response.status_code,
            )

        try:
            return parser.parse(response.content)
        except ParseError as e:
            raise ParseError(f"Failed to parse response from {full_url}: {e}") from e
