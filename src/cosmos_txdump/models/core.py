"""Core data models for the transaction dump pipeline."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Dict

from .wire import RawMessage, MessageType, message_to_dict, messages_to_json


VALID_STRATEGIES = ('concurrent', 'sequential')


@dataclass(frozen=True)
class FetcherConfig:
    """Configuration for fetch behavior.

    Attributes:
        url: Base URL of the REST query service
        txs_path: Path of the transaction query endpoint under ``url``
        timeout: Per-request timeout in seconds, handed to the HTTP transport
        strategy: Range execution strategy - "concurrent" or "sequential"
        max_concurrency: Worker pool size for the concurrent strategy
        request_delay: Pause between requests for the sequential strategy
        retries: Transport-level retries (0 disables them)
        backoff_factor: Backoff factor for transport retries
        output_directory: Where CSV dumps are written
        log_directory: Where structured JSON logs are written
    """
    url: str = "https://localhost:1317"
    txs_path: str = "/tx/v1/txs"
    timeout: float = 30.0
    strategy: str = "concurrent"
    max_concurrency: int = 10
    request_delay: float = 0.5
    retries: int = 0
    backoff_factor: float = 0.5
    output_directory: str = "."
    log_directory: str = "logs"

    @property
    def txs_endpoint(self) -> str:
        return f"{self.url.rstrip('/')}/{self.txs_path.strip('/')}"


class SortField(Enum):
    """Fields translated records can be ordered by"""
    GAS_USED = "gas_used"
    TIMESTAMP = "timestamp"
    HEIGHT = "height"

    @classmethod
    def from_string(cls, value: str) -> 'SortField':
        normalized = str(value).strip().lower().replace('-', '_')
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown sort field: {value}")


@dataclass(frozen=True)
class ComprehensiveTransaction:
    """Normalized transaction: body and execution result combined"""
    messages: List[RawMessage]
    height: int
    txhash: str
    gas_used: int
    gas_wanted: str
    timestamp: datetime
    data: str
    signatures: List[str]
    memo: str
    timeout_height: str
    code: int = 0

    @property
    def message_types(self) -> List[MessageType]:
        return [m.message_type for m in self.messages]

    def to_row(self) -> Dict[str, str]:
        return {
            'height': str(self.height),
            'txhash': self.txhash,
            'code': str(self.code),
            'gas_used': str(self.gas_used),
            'gas_wanted': self.gas_wanted,
            'timestamp': self.timestamp.isoformat(),
            'memo': self.memo,
            'timeout_height': self.timeout_height,
            'signatures': ";".join(self.signatures),
            'data': self.data,
            'messages': messages_to_json(self.messages),
        }

    def __str__(self) -> str:
        kinds = ",".join(t.value for t in self.message_types) or "-"
        return (f"#{self.height} {self.txhash} [{kinds}] gas={self.gas_used}/{self.gas_wanted} "
                f"code={self.code} at {self.timestamp.isoformat()}")


@dataclass(frozen=True)
class IndividualMessageTransaction:
    """One message of a ComprehensiveTransaction with its parent's metadata"""
    height: int
    txhash: str
    message_index: int
    message: RawMessage
    gas_used: int
    gas_wanted: str
    timestamp: datetime
    memo: str
    signatures: List[str] = field(default_factory=list)
    timeout_height: str = "0"
    code: int = 0

    @property
    def message_type(self) -> MessageType:
        return self.message.message_type

    def to_row(self) -> Dict[str, str]:
        return {
            'height': str(self.height),
            'txhash': self.txhash,
            'message_index': str(self.message_index),
            'message_type': self.message_type.value,
            'gas_used': str(self.gas_used),
            'gas_wanted': self.gas_wanted,
            'timestamp': self.timestamp.isoformat(),
            'memo': self.memo,
            'timeout_height': self.timeout_height,
            'signatures': ";".join(self.signatures),
            'code': str(self.code),
            'message': json.dumps(message_to_dict(self.message), separators=(',', ':')),
        }

    def __str__(self) -> str:
        return (f"#{self.height} {self.txhash}[{self.message_index}] {self.message.summary()} "
                f"gas={self.gas_used} at {self.timestamp.isoformat()}")

