"""
Tests for transaction broadcast.
"""

from __future__ import annotations

import pytest
from conftest import FakeTransport

from hostwallet.broadcast import BroadcastSubmitter
from hostwallet.errors import NetworkError, ValidationError
from hostwallet.models import BroadcastReceipt


class TestBroadcastSubmitter:
    @pytest.mark.asyncio
    async def test_broadcast(self) -> None:
        transport = FakeTransport(
            {("POST", "/tx/send"): {"transaction": "deadbeef", "transactionHash": "h1"}}
        )

        receipt = await BroadcastSubmitter(transport).broadcast("deadbeef")

        assert receipt == BroadcastReceipt(tx="deadbeef", hash="h1")
        assert transport.calls == [("POST", "/tx/send", {"tx": "deadbeef"})]

    @pytest.mark.asyncio
    async def test_empty_payload_rejected(self) -> None:
        transport = FakeTransport()

        with pytest.raises(ValidationError, match="tx"):
            await BroadcastSubmitter(transport).broadcast("")

        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_transport_error_not_retried(self) -> None:
        transport = FakeTransport({("POST", "/tx/send"): NetworkError("rejected", 400)})

        with pytest.raises(NetworkError, match="rejected"):
            await BroadcastSubmitter(transport).broadcast("deadbeef")

        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{}, {"transaction": "deadbeef"}, {"transactionHash": "h1"}, ["deadbeef"], None],
    )
    async def test_malformed_response(self, body: object) -> None:
        transport = FakeTransport({("POST", "/tx/send"): body})

        with pytest.raises(NetworkError, match="Malformed response"):
            await BroadcastSubmitter(transport).broadcast("deadbeef")
