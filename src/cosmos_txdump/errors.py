"""Exception hierarchy for the fetch-and-translate pipeline."""

from typing import Optional


class TxDumpError(Exception):
    """Base class for every error raised by cosmos_txdump"""


class FetchError(TxDumpError):
    """A single fetch call failed"""


class NetworkError(FetchError):
    """Transport-level failure or non-2xx HTTP status"""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(FetchError):
    """Response body is not JSON or does not match the wire model"""


class TranslationError(TxDumpError):
    """A stringly-typed field of a fetched record failed validation"""

    def __init__(self, message: str, field_name: Optional[str] = None, raw_value: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name
        self.raw_value = raw_value


class GasParseError(TranslationError):
    """gas_used is not a non-negative integer"""


class TimestampParseError(TranslationError):
    """timestamp is not RFC-3339"""


class TaskFailure(TxDumpError):
    """A unit of work in a range fetch failed.

    ``cause`` is either a propagated FetchError or whatever exception kept the
    unit from running at all.
    """

    def __init__(self, height: int, cause: BaseException):
        super().__init__(f"Fetching height {height} failed: {cause}")
        self.height = height
        self.cause = cause

    @property
    def is_infrastructure(self) -> bool:
        return not isinstance(self.cause, FetchError)
