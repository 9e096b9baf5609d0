"""Data models and structures"""

from .core import (
    ComprehensiveTransaction,
    FetcherConfig,
    IndividualMessageTransaction,
    SortField,
)
from .wire import (
    Amount,
    MessageType,
    MsgDelegate,
    MsgSend,
    MsgTransfer,
    OtherMessage,
    PaginationCursor,
    RawPage,
    RawTransaction,
    RawTransactionResult,
    TimeoutHeight,
)

__all__ = [
    'Amount',
    'ComprehensiveTransaction',
    'FetcherConfig',
    'IndividualMessageTransaction',
    'MessageType',
    'MsgDelegate',
    'MsgSend',
    'MsgTransfer',
    'OtherMessage',
    'PaginationCursor',
    'RawPage',
    'RawTransaction',
    'RawTransactionResult',
    'SortField',
    'TimeoutHeight',
]
