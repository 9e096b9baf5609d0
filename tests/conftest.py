"""Shared fixtures: wire payload builders and a fake HTTP session."""

import json
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests


class Payloads:
    """Builders for raw JSON shapes returned by the query service"""

    @staticmethod
    def send(from_address="cosmos1sender", to_address="cosmos1recipient", amount="1000", denom="uatom"):
        return {
            "@type": "/cosmos.bank.v1beta1.MsgSend",
            "from_address": from_address,
            "to_address": to_address,
            "amount": [{"denom": denom, "amount": amount}],
        }

    @staticmethod
    def delegate(delegator="cosmos1delegator", validator="cosmosvaloper1validator", amount="5000"):
        return {
            "@type": "/cosmos.staking.v1beta1.MsgDelegate",
            "delegator_address": delegator,
            "validator_address": validator,
            "amount": {"denom": "uatom", "amount": amount},
        }

    @staticmethod
    def transfer(sender="cosmos1sender", receiver="osmo1receiver"):
        return {
            "@type": "/ibc.applications.transfer.v1.MsgTransfer",
            "source_port": "transfer",
            "source_channel": "channel-141",
            "token": {"denom": "uatom", "amount": "250"},
            "sender": sender,
            "receiver": receiver,
            "timeout_height": {"revision_number": "1", "revision_height": "12345"},
            "timeout_timestamp": "0",
            "memo": "",
        }

    @staticmethod
    def vote():
        return {
            "@type": "/cosmos.gov.v1beta1.MsgVote",
            "proposal_id": "82",
            "voter": "cosmos1voter",
            "option": "VOTE_OPTION_YES",
        }

    @staticmethod
    def tx(messages=None, memo="", timeout_height="0", signatures=None):
        return {
            "body": {
                "messages": messages if messages is not None else [Payloads.send()],
                "memo": memo,
                "timeout_height": timeout_height,
                "extension_options": [],
                "non_critical_extension_options": [],
            },
            "auth_info": {"signer_infos": [], "fee": {"amount": [], "gas_limit": "200000"}},
            "signatures": signatures if signatures is not None else ["c2lnbmF0dXJl"],
        }

    @staticmethod
    def tx_response(height="100", txhash="AAAA", gas_used="50000", gas_wanted="80000",
                    timestamp="2023-10-01T12:00:00Z", code=0):
        return {
            "height": height,
            "txhash": txhash,
            "codespace": "",
            "code": code,
            "data": "0A1E0A1C2F636F736D6F73",
            "raw_log": "[]",
            "logs": [],
            "info": "",
            "gas_wanted": gas_wanted,
            "gas_used": gas_used,
            "tx": None,
            "timestamp": timestamp,
            "events": [],
        }

    @staticmethod
    def page(txs, tx_responses, next_key=None, total=None):
        return {
            "txs": txs,
            "tx_responses": tx_responses,
            "pagination": {
                "next_key": next_key,
                "total": str(total if total is not None else len(txs)),
            },
        }

    @staticmethod
    def height_page(height, count=1, next_key=None, offset=0):
        """A page of ``count`` send transactions at ``height``"""
        txs = [Payloads.tx(memo=f"h{height}-{offset + i}") for i in range(count)]
        responses = [
            Payloads.tx_response(height=str(height), txhash=f"H{height}T{offset + i}",
                                 gas_used=str(1000 * (offset + i + 1)))
            for i in range(count)
        ]
        return Payloads.page(txs, responses, next_key=next_key)


class FakeResponse:
    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        if isinstance(body, (bytes, str)):
            self.content = body if isinstance(body, bytes) else body.encode('utf-8')
        else:
            self.content = json.dumps(body).encode('utf-8')


class FakeSession:
    """Stands in for requests.Session; routes GETs by height/pagination key or hash.

    ``routes`` maps ``(height, pagination_key)`` or a tx hash to
    ``(status_code, body)``. Unknown heights return an empty page.
    """

    def __init__(self, routes: Optional[Dict[Any, Tuple[int, Any]]] = None,
                 delays: Optional[Dict[int, float]] = None,
                 errors: Optional[Dict[int, Exception]] = None):
        self.routes = routes or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls: List[Tuple[str, Optional[Dict[str, str]]]] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.calls.append((url, dict(params) if params else None))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            return self._respond(url, params)
        finally:
            with self._lock:
                self.active -= 1

    def _respond(self, url, params):
        if params and 'events' in params:
            height = int(params['events'].split('=', 1)[1])
            if height in self.delays:
                time.sleep(self.delays[height])
            if height in self.errors:
                raise self.errors[height]
            key = (height, params.get('pagination_key'))
            status, body = self.routes.get(key, (200, Payloads.page([], [])))
            return FakeResponse(status, body)

        txhash = url.rsplit('/', 1)[-1]
        status, body = self.routes.get(txhash, (404, {"code": 5, "message": "tx not found"}))
        return FakeResponse(status, body)


@pytest.fixture
def payloads():
    return Payloads


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
