"""
Pytest configuration and fixtures for hostwallet tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from hostwallet.builder import BuilderState, TransactionBuilder
from hostwallet.crypto import encrypt
from hostwallet.errors import NetworkError
from hostwallet.models import Keychain, Recipient
from hostwallet.transport import Transport

PASSPHRASE = "correct"
XPRV = "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPGJxWUtg6LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"


class FakeTransport(Transport):
    """
    In-memory transport.

    Responses are keyed by (method, path). Every call is recorded in
    `calls`; a response that is an exception instance is raised.
    """

    def __init__(self, responses: dict[tuple[str, str], Any] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str, Any]] = []
        self.closed = False

    def _respond(self, method: str, path: str, payload: Any) -> Any:
        self.calls.append((method, path, payload))
        try:
            response = self.responses[(method, path)]
        except KeyError:
            raise NetworkError(f"HTTP 404 for {method} {path}", status_code=404) from None
        if isinstance(response, Exception):
            raise response
        return response

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._respond("GET", path, params)

    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        return self._respond("POST", path, body)

    async def delete(self, path: str) -> Any:
        return self._respond("DELETE", path, None)

    async def close(self) -> None:
        self.closed = True

    def paths(self, method: str | None = None) -> list[str]:
        return [path for m, path, _ in self.calls if method is None or m == method]


class FakeBuilder(TransactionBuilder):
    """Builder returning a fixed transaction and fee."""

    def __init__(self, tx_hex: str = "deadbeef", fee: int = 1000, complete: bool = True):
        self.tx_hex = tx_hex
        self.fee = fee
        self.complete = complete
        self.prepared: list[tuple[Recipient, int | None]] = []
        self.signed_with: list[Keychain] = []

    async def prepare(self, recipient: Recipient, fee: int | None = None) -> BuilderState:
        self.prepared.append((recipient, fee))
        return BuilderState(fee=self.fee if fee is None else fee)

    async def sign(self, state: BuilderState, keychain: Keychain) -> BuilderState | None:
        self.signed_with.append(keychain)
        if not self.complete:
            return None
        state.tx_hex = self.tx_hex
        return state


@pytest.fixture(scope="session")
def encrypted_xprv() -> str:
    """XPRV encrypted under PASSPHRASE (low iteration count to keep tests fast)."""
    return encrypt(PASSPHRASE, XPRV, iterations=1000)


@pytest.fixture
def wallet_json() -> dict[str, Any]:
    return {
        "id": "2Mxyz1111111111111111111111111111",
        "label": "test wallet",
        "balance": 5_000_000,
        "pendingBalance": 100_000,
        "availableBalance": 4_900_000,
        "type": "safehd",
        "private": {"keychains": [{"xpub": "xpub1", "path": "/0/0"}]},
    }


@pytest.fixture
def transport(wallet_json: dict[str, Any], encrypted_xprv: str) -> FakeTransport:
    return FakeTransport(
        {
            ("GET", f"/wallet/{wallet_json['id']}"): wallet_json,
            ("POST", "/keychain/xpub1"): {"xpub": "xpub1", "encryptedXprv": encrypted_xprv},
            ("POST", "/tx/send"): {"transaction": "deadbeef", "transactionHash": "h1"},
        }
    )


@pytest.fixture
def builder() -> FakeBuilder:
    return FakeBuilder()
