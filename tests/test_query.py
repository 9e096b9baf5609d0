"""Tests for record filtering and sorting."""

from datetime import datetime, timedelta, timezone

import pytest

from cosmos_txdump.models.core import ComprehensiveTransaction, IndividualMessageTransaction, SortField
from cosmos_txdump.models.wire import Amount, MessageType, MsgDelegate, MsgSend, OtherMessage
from cosmos_txdump.utils.query import filter_by_type, sort_by


BASE_TIME = datetime(2023, 10, 1, 12, 0, 0, tzinfo=timezone.utc)

SEND = MsgSend(from_address="a", to_address="b", amount=[Amount("uatom", "1")])
DELEGATE = MsgDelegate(delegator_address="a", validator_address="v", amount=Amount("uatom", "2"))
VOTE = OtherMessage(type_url="/cosmos.gov.v1beta1.MsgVote", payload={"option": "yes"})


def individual(txhash, message, gas_used=100, minutes=0, height=1, index=0):
    return IndividualMessageTransaction(
        height=height,
        txhash=txhash,
        message_index=index,
        message=message,
        gas_used=gas_used,
        gas_wanted="200000",
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        memo="",
    )


def comprehensive(txhash, messages, gas_used=100):
    return ComprehensiveTransaction(
        messages=messages,
        height=1,
        txhash=txhash,
        gas_used=gas_used,
        gas_wanted="200000",
        timestamp=BASE_TIME,
        data="",
        signatures=[],
        memo="",
        timeout_height="0",
    )


class TestFilterByType:
    """Test cases for filter_by_type"""

    def setup_method(self):
        """Set up test fixtures"""
        self.records = [
            individual("T1", SEND),
            individual("T2", DELEGATE),
            individual("T3", VOTE),
            individual("T4", SEND),
        ]

    def test_filter_send(self):
        result = filter_by_type(self.records, MessageType.SEND)
        assert [r.txhash for r in result] == ["T1", "T4"]

    def test_filter_delegate(self):
        result = filter_by_type(self.records, MessageType.DELEGATE)
        assert [r.txhash for r in result] == ["T2"]

    def test_filter_transfer_empty(self):
        assert filter_by_type(self.records, MessageType.TRANSFER) == []

    def test_other_is_passthrough(self):
        result = filter_by_type(self.records, MessageType.OTHER)

        assert result == self.records
        assert result is not self.records

    def test_comprehensive_matches_any_message(self):
        records = [
            comprehensive("MIXED", [VOTE, DELEGATE]),
            comprehensive("SENDS", [SEND]),
            comprehensive("EMPTY", []),
        ]

        result = filter_by_type(records, MessageType.DELEGATE)
        assert [r.txhash for r in result] == ["MIXED"]

    def test_message_type_from_string(self):
        assert MessageType.from_string("send") is MessageType.SEND
        assert MessageType.from_string("MsgDelegate") is MessageType.DELEGATE
        assert MessageType.from_string("msg-transfer") is MessageType.TRANSFER
        assert MessageType.from_string("/cosmos.bank.v1beta1.MsgSend") is MessageType.SEND
        with pytest.raises(ValueError):
            MessageType.from_string("vote")


class TestSortBy:
    """Test cases for sort_by"""

    def setup_method(self):
        """Set up test fixtures"""
        self.records = [
            individual("A", SEND, gas_used=300, minutes=2, height=3),
            individual("B", SEND, gas_used=100, minutes=0, height=1),
            individual("C", SEND, gas_used=300, minutes=1, height=2),
            individual("D", SEND, gas_used=200, minutes=3, height=2),
        ]

    def test_gas_ascending(self):
        result = sort_by(self.records, SortField.GAS_USED)
        assert [r.gas_used for r in result] == [100, 200, 300, 300]

    def test_gas_descending_is_non_increasing(self):
        result = sort_by(self.records, SortField.GAS_USED, ascending=False)

        gas = [r.gas_used for r in result]
        assert all(gas[i] >= gas[i + 1] for i in range(len(gas) - 1))

    def test_sort_is_stable(self):
        ascending = sort_by(list(self.records), SortField.GAS_USED)
        descending = sort_by(list(self.records), SortField.GAS_USED, ascending=False)

        assert [r.txhash for r in ascending] == ["B", "D", "A", "C"]
        assert [r.txhash for r in descending] == ["A", "C", "D", "B"]

    def test_timestamp_sort(self):
        result = sort_by(self.records, SortField.TIMESTAMP)
        assert [r.txhash for r in result] == ["B", "C", "A", "D"]

    def test_height_sort(self):
        result = sort_by(self.records, SortField.HEIGHT, ascending=False)
        assert [r.txhash for r in result] == ["A", "C", "D", "B"]

    def test_sort_in_place(self):
        result = sort_by(self.records, SortField.GAS_USED)
        assert result is self.records

    def test_sort_empty(self):
        assert sort_by([], SortField.TIMESTAMP) == []

    def test_sort_field_from_string(self):
        assert SortField.from_string("gas-used") is SortField.GAS_USED
        assert SortField.from_string("timestamp") is SortField.TIMESTAMP
        with pytest.raises(ValueError):
            SortField.from_string("fee")
