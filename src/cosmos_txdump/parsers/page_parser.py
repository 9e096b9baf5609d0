"""Parsers for transaction query responses.

Two response shapes are supported:

* ``GET {txs_path}?events=tx.height=H`` returns ``{txs, tx_responses, pagination}``
* ``GET {txs_path}/{hash}`` returns ``{tx, tx_response}``

Message payloads are decoded permissively: an unrecognized ``@type`` becomes
an ``OtherMessage`` instead of failing the whole page.
"""

import logging
from typing import Any, Dict, Optional, Union

from .base import ResponseParser
from ..errors import ParseError
from ..models.wire import (
    Amount,
    MsgDelegate,
    MsgSend,
    MsgTransfer,
    OtherMessage,
    PaginationCursor,
    RawMessage,
    RawPage,
    RawTransaction,
    RawTransactionResult,
    TimeoutHeight,
    TYPE_URLS,
    MessageType,
)


logger = logging.getLogger(__name__)


def _require(data: Dict[str, Any], key: str, expected: type, context: str) -> Any:
    if not isinstance(data, dict):
        raise ParseError(f"{context}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise ParseError(f"{context}: missing required field '{key}'")
    value = data[key]
    # bool is an int subclass; a JSON true is never a valid code
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ParseError(
            f"{context}: field '{key}' must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _optional_str(data: Dict[str, Any], key: str, context: str, default: str = "") -> str:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ParseError(f"{context}: field '{key}' must be str, got {type(value).__name__}")
    return value


def parse_amount(data: Any, context: str) -> Amount:
    return Amount(
        denom=_require(data, 'denom', str, context),
        amount=_require(data, 'amount', str, context),
    )


def _parse_send(data: Dict[str, Any], context: str) -> MsgSend:
    coins = _require(data, 'amount', list, context)
    return MsgSend(
        from_address=_require(data, 'from_address', str, context),
        to_address=_require(data, 'to_address', str, context),
        amount=[parse_amount(c, f"{context}.amount[{i}]") for i, c in enumerate(coins)],
    )


def _parse_delegate(data: Dict[str, Any], context: str) -> MsgDelegate:
    return MsgDelegate(
        delegator_address=_require(data, 'delegator_address', str, context),
        validator_address=_require(data, 'validator_address', str, context),
        amount=parse_amount(_require(data, 'amount', dict, context), f"{context}.amount"),
    )


def _parse_transfer(data: Dict[str, Any], context: str) -> MsgTransfer:
    timeout = _require(data, 'timeout_height', dict, context)
    return MsgTransfer(
        source_port=_require(data, 'source_port', str, context),
        source_channel=_require(data, 'source_channel', str, context),
        token=parse_amount(_require(data, 'token', dict, context), f"{context}.token"),
        sender=_require(data, 'sender', str, context),
        receiver=_require(data, 'receiver', str, context),
        timeout_height=TimeoutHeight(
            revision_number=_require(timeout, 'revision_number', str, f"{context}.timeout_height"),
            revision_height=_require(timeout, 'revision_height', str, f"{context}.timeout_height"),
        ),
        timeout_timestamp=_require(data, 'timeout_timestamp', str, context),
        memo=_optional_str(data, 'memo', context),
    )


MESSAGE_PARSERS = {
    TYPE_URLS[MessageType.SEND]: _parse_send,
    TYPE_URLS[MessageType.DELEGATE]: _parse_delegate,
    TYPE_URLS[MessageType.TRANSFER]: _parse_transfer,
}


def parse_message(data: Any, context: str = "message") -> RawMessage:
    """Decode one message payload selected by its ``@type`` discriminator"""
    if not isinstance(data, dict):
        raise ParseError(f"{context}: expected an object, got {type(data).__name__}")

    type_url = data.get('@type')
    parser = MESSAGE_PARSERS.get(type_url) if isinstance(type_url, str) else None
    if parser is None:
        logger.debug(f"{context}: unrecognized message type {type_url!r}, keeping as other")
        payload = {k: v for k, v in data.items() if k != '@type'}
        return OtherMessage(type_url=type_url if isinstance(type_url, str) else "", payload=payload)

    return parser(data, context)


def parse_transaction(data: Any, context: str = "tx") -> RawTransaction:
    body = _require(data, 'body', dict, context)
    messages = _require(body, 'messages', list, f"{context}.body")
    signatures = data.get('signatures') or []
    if not isinstance(signatures, list) or not all(isinstance(s, str) for s in signatures):
        raise ParseError(f"{context}: field 'signatures' must be a list of strings")

    return RawTransaction(
        messages=[parse_message(m, f"{context}.body.messages[{i}]") for i, m in enumerate(messages)],
        memo=_optional_str(body, 'memo', f"{context}.body"),
        timeout_height=_optional_str(body, 'timeout_height', f"{context}.body", default="0"),
        signatures=list(signatures),
        auth_info=data.get('auth_info') or {},
    )


def parse_transaction_result(data: Any, context: str = "tx_response") -> RawTransactionResult:
    return RawTransactionResult(
        height=_require(data, 'height', str, context),
        txhash=_require(data, 'txhash', str, context),
        code=_require(data, 'code', int, context),
        gas_wanted=_require(data, 'gas_wanted', str, context),
        gas_used=_require(data, 'gas_used', str, context),
        timestamp=_require(data, 'timestamp', str, context),
        codespace=_optional_str(data, 'codespace', context),
        data=_optional_str(data, 'data', context),
        raw_log=data.get('raw_log', ""),
        logs=data.get('logs'),
    )


def parse_pagination(data: Optional[Dict[str, Any]]) -> PaginationCursor:
    """A null cursor is terminal; an empty ``next_key`` is treated as absent"""
    if data is None:
        return PaginationCursor(next_key=None, total="0")
    if not isinstance(data, dict):
        raise ParseError(f"pagination: expected an object, got {type(data).__name__}")

    next_key = data.get('next_key')
    if next_key is not None and not isinstance(next_key, str):
        raise ParseError("pagination: field 'next_key' must be a string or null")

    total = data.get('total', "0")
    if total is None:
        total = "0"
    if not isinstance(total, (str, int)) or isinstance(total, bool):
        raise ParseError("pagination: field 'total' must be a string")

    return PaginationCursor(next_key=next_key or None, total=str(total))


class PageParser(ResponseParser):
    """Parses a paginated ``{txs, tx_responses, pagination}`` response"""

    def parse(self, body: Union[bytes, str]) -> RawPage:
        data = self.load_json(body)

        txs = _require(data, 'txs', list, "page")
        tx_responses = _require(data, 'tx_responses', list, "page")
        if 'pagination' not in data:
            raise ParseError("page: missing required field 'pagination'")

        if len(txs) != len(tx_responses):
            raise ParseError(
                f"page: txs and tx_responses are not index-aligned "
                f"({len(txs)} vs {len(tx_responses)} entries)"
            )

        return RawPage(
            txs=[parse_transaction(t, f"txs[{i}]") for i, t in enumerate(txs)],
            tx_responses=[parse_transaction_result(r, f"tx_responses[{i}]")
                          for i, r in enumerate(tx_responses)],
            pagination=parse_pagination(data['pagination']),
        )


class SingleTransactionParser(ResponseParser):
    """Parses a by-hash ``{tx, tx_response}`` response into a one-entry page"""

    def parse(self, body: Union[bytes, str]) -> RawPage:
        data = self.load_json(body)

        tx = parse_transaction(_require(data, 'tx', dict, "response"), "tx")
        result = parse_transaction_result(_require(data, 'tx_response', dict, "response"))

        return RawPage(
            txs=[tx],
            tx_responses=[result],
            pagination=PaginationCursor(next_key=None, total="1"),
        )


def parse_page(body: Union[bytes, str]) -> RawPage:
    return PageParser().parse(body)


def parse_single(body: Union[bytes, str]) -> RawPage:
    return SingleTransactionParser().parse(body)
