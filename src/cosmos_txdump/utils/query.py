"""Filter and sort operations over translated transaction records."""

from typing import List, Union, TypeVar

from ..models.core import ComprehensiveTransaction, IndividualMessageTransaction, SortField
from ..models.wire import MessageType


Record = Union[ComprehensiveTransaction, IndividualMessageTransaction]
R = TypeVar('R', ComprehensiveTransaction, IndividualMessageTransaction)


def _matches(record: Record, message_type: MessageType) -> bool:
    if isinstance(record, IndividualMessageTransaction):
        return record.message_type is message_type
    return message_type in record.message_types


def filter_by_type(records: List[R], message_type: MessageType) -> List[R]:
    """Keep records whose message matches ``message_type``.

    Comprehensive records match when any of their messages does.
    ``MessageType.OTHER`` is a pass-through: every record is kept.
    """
    if message_type is MessageType.OTHER:
        return list(records)
    return [record for record in records if _matches(record, message_type)]


def _sort_key(field: SortField):
    if field is SortField.GAS_USED:
        return lambda record: record.gas_used
    if field is SortField.TIMESTAMP:
        return lambda record: record.timestamp
    if field is SortField.HEIGHT:
        return lambda record: record.height
    raise ValueError(f"Unsupported sort field: {field}")


def sort_by(records: List[R], field: SortField, ascending: bool = True) -> List[R]:
    """Stable in-place sort; returns the same list"""
    records.sort(key=_sort_key(field), reverse=not ascending)
    return records
