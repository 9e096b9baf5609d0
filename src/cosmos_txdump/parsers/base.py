"""Abstract base classes and scalar normalization for response parsers."""

import json
import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Union

from ..errors import GasParseError, ParseError, TimestampParseError
from ..models.wire import RawPage


logger = logging.getLogger(__name__)

RFC3339_PATTERN = re.compile(
    r'^([0-9]{4})-([0-9]{2})-([0-9]{2})[Tt]([0-9]{2}):([0-9]{2}):([0-9]{2})(\.[0-9]+)?([Zz]|[+-][0-9]{2}:[0-9]{2})$'
)
DIGITS_PATTERN = re.compile(r'[0-9]+')


class ResponseParser(ABC):
    """Abstract base class for REST response parsers"""

    @abstractmethod
    def parse(self, body: Union[bytes, str]) -> RawPage:
        """Parse a response body and return a RawPage"""
        pass

    def load_json(self, body: Union[bytes, str]) -> Dict[str, Any]:
        """Decode a response body into a JSON object"""
        if isinstance(body, bytes):
            try:
                body = body.decode('utf-8')
            except UnicodeDecodeError as e:
                raise ParseError(f"Response body is not valid UTF-8: {e}") from e

        try:
            data = json.loads(body)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Response body is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
        return data


class DataTransformer:
    """Turns stringly-typed wire fields into typed values"""

    def normalize_gas(self, gas_str: str, field_name: str = 'gas_used') -> int:
        """Parse a gas amount; must be a non-negative base-10 integer of ASCII digits"""
        if not isinstance(gas_str, str) or not DIGITS_PATTERN.fullmatch(gas_str):
            raise GasParseError(
                f"Unable to parse {field_name}: {gas_str!r} is not a non-negative integer",
                field_name=field_name,
                raw_value=gas_str,
            )
        return int(gas_str)

    def normalize_timestamp(self, timestamp_str: str) -> datetime:
        """Parse an RFC-3339 timestamp and convert it to UTC"""
        match = RFC3339_PATTERN.fullmatch(timestamp_str) if isinstance(timestamp_str, str) else None
        if not match:
            raise TimestampParseError(
                f"Unable to parse timestamp: {timestamp_str!r} is not RFC-3339",
                field_name='timestamp',
                raw_value=timestamp_str,
            )

        year, month, day, hour, minute, second, fraction, offset = match.groups()

        # datetime keeps microseconds; nanosecond digits are dropped
        microsecond = int((fraction[1:] + '000000')[:6]) if fraction else 0

        try:
            if offset in ('Z', 'z'):
                tz = timezone.utc
            else:
                offset_hours, offset_minutes = int(offset[1:3]), int(offset[4:6])
                if offset_hours > 23 or offset_minutes > 59:
                    raise ValueError(f"offset {offset} out of range")
                sign = 1 if offset[0] == '+' else -1
                tz = timezone(sign * timedelta(hours=offset_hours, minutes=offset_minutes))

            parsed = datetime(int(year), int(month), int(day), int(hour), int(minute),
                              int(second), microsecond, tzinfo=tz)
        except ValueError as e:
            raise TimestampParseError(
                f"Unable to parse timestamp: {timestamp_str!r} ({e})",
                field_name='timestamp',
                raw_value=timestamp_str,
            ) from e

        return parsed.astimezone(timezone.utc)

    def normalize_height(self, height_str: str) -> int:
        """Parse a block height, falling back to 0 when it is not a non-negative integer"""
        if not isinstance(height_str, str) or not DIGITS_PATTERN.fullmatch(height_str):
            logger.warning(f"Unparsable height {height_str!r}, defaulting to 0")
            return 0
        return int(height_str)
