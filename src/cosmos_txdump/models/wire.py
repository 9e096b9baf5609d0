"""Raw on-wire shapes returned by the Cosmos REST query service."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Union


class MessageType(Enum):
    """Logical message kinds selected by the ``@type`` discriminator"""
    SEND = "send"
    DELEGATE = "delegate"
    TRANSFER = "transfer"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: str) -> 'MessageType':
        """Parse user input such as ``send``, ``MsgSend`` or a full type URL"""
        if not value or not str(value).strip():
            raise ValueError("Message type cannot be empty")

        normalized = str(value).strip()
        if normalized in TYPE_URLS.values():
            return next(t for t, url in TYPE_URLS.items() if url == normalized)

        normalized = normalized.lower().replace('-', '').replace('_', '')
        if normalized.startswith('msg'):
            normalized = normalized[3:]

        for member in cls:
            if member.value == normalized:
                return member

        raise ValueError(f"Unknown message type: {value}")


TYPE_URLS = {
    MessageType.SEND: "/cosmos.bank.v1beta1.MsgSend",
    MessageType.DELEGATE: "/cosmos.staking.v1beta1.MsgDelegate",
    MessageType.TRANSFER: "/ibc.applications.transfer.v1.MsgTransfer",
}


@dataclass(frozen=True)
class Amount:
    denom: str
    amount: str

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class TimeoutHeight:
    revision_number: str
    revision_height: str


@dataclass(frozen=True)
class MsgSend:
    """Bank send: one sender, one recipient, one or more coins"""
    from_address: str
    to_address: str
    amount: List[Amount]

    message_type = MessageType.SEND

    def summary(self) -> str:
        coins = ",".join(str(a) for a in self.amount)
        return f"send {coins} {self.from_address} -> {self.to_address}"


@dataclass(frozen=True)
class MsgDelegate:
    """Staking delegation to a validator"""
    delegator_address: str
    validator_address: str
    amount: Amount

    message_type = MessageType.DELEGATE

    def summary(self) -> str:
        return f"delegate {self.amount} {self.delegator_address} -> {self.validator_address}"


@dataclass(frozen=True)
class MsgTransfer:
    """IBC fungible token transfer"""
    source_port: str
    source_channel: str
    token: Amount
    sender: str
    receiver: str
    timeout_height: TimeoutHeight
    timeout_timestamp: str
    memo: str = ""

    message_type = MessageType.TRANSFER

    def summary(self) -> str:
        return (f"transfer {self.token} {self.sender} -> {self.receiver} "
                f"via {self.source_port}/{self.source_channel}")


@dataclass(frozen=True)
class OtherMessage:
    """Fallback for any discriminator without a dedicated variant"""
    type_url: str = ""
    payload: Dict[str, Any] = field(default_factory=dict, hash=False)

    message_type = MessageType.OTHER

    def summary(self) -> str:
        return f"other {self.type_url or '<untyped>'}"


RawMessage = Union[MsgSend, MsgDelegate, MsgTransfer, OtherMessage]


def message_to_dict(message: RawMessage) -> Dict[str, Any]:
    """Serialize a message back to its wire form (``@type`` plus fields)"""
    if isinstance(message, OtherMessage):
        data = dict(message.payload)
        if message.type_url:
            data['@type'] = message.type_url
        return data

    data: Dict[str, Any] = {'@type': TYPE_URLS[message.message_type]}
    for name, value in vars(message).items():
        if isinstance(value, list):
            data[name] = [vars(item) for item in value]
        elif isinstance(value, (Amount, TimeoutHeight)):
            data[name] = vars(value)
        else:
            data[name] = value
    return data


def messages_to_json(messages: List[RawMessage]) -> str:
    return json.dumps([message_to_dict(m) for m in messages], separators=(',', ':'))


@dataclass(frozen=True)
class RawTransaction:
    """Transaction envelope: body messages plus signatures"""
    messages: List[RawMessage]
    memo: str
    timeout_height: str
    signatures: List[str] = field(default_factory=list)
    auth_info: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class RawTransactionResult:
    """Execution result paired with a RawTransaction. Numeric fields stay strings."""
    height: str
    txhash: str
    code: int
    gas_wanted: str
    gas_used: str
    timestamp: str
    codespace: str = ""
    data: str = ""
    raw_log: Any = field(default="", compare=False, hash=False)
    logs: Any = field(default=None, compare=False, hash=False)


@dataclass(frozen=True)
class PaginationCursor:
    next_key: Optional[str]
    total: str = "0"

    @property
    def has_more(self) -> bool:
        return bool(self.next_key)


@dataclass(frozen=True)
class RawPage:
    """One HTTP response worth of transactions.

    ``txs`` and ``tx_responses`` are index-aligned: position i of one
    belongs to position i of the other.
    """
    txs: List[RawTransaction]
    tx_responses: List[RawTransactionResult]
    pagination: PaginationCursor

    def pairs(self):
        return list(zip(self.txs, self.tx_responses))

    def to_rows(self) -> List[Dict[str, str]]:
        """Simplified, untranslated rows (one per transaction)"""
        rows = []
        for tx, result in self.pairs():
            rows.append({
                'height': result.height,
                'txhash': result.txhash,
                'code': str(result.code),
                'gas_used': result.gas_used,
                'gas_wanted': result.gas_wanted,
                'timestamp': result.timestamp,
                'memo': tx.memo,
                'message_count': str(len(tx.messages)),
            })
        return rows

    def __str__(self) -> str:
        return (f"page: {len(self.txs)} txs, total={self.pagination.total}, "
                f"next_key={self.pagination.next_key or '-'}")
