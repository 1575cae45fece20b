"""
Submit signed transactions to the wallet service.
"""

from __future__ import annotations

from loguru import logger

from hostwallet.errors import NetworkError, ValidationError
from hostwallet.models import BroadcastReceipt
from hostwallet.transport import Transport

SEND_PATH = "/tx/send"


class BroadcastSubmitter:
    """
    Sends a signed transaction to the service, which co-signs (if approved)
    and relays it to the P2P network.
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    async def broadcast(self, tx_hex: str) -> BroadcastReceipt:
        """Broadcast transaction, returns the service's receipt"""
        if not isinstance(tx_hex, str) or not tx_hex:
            raise ValidationError("missing or invalid parameter: tx")

        body = await self.transport.post(SEND_PATH, {"tx": tx_hex})

        if not isinstance(body, dict):
            raise NetworkError("Malformed response from /tx/send")
        tx = body.get("transaction")
        tx_hash = body.get("transactionHash")
        if not tx or not tx_hash:
            raise NetworkError("Malformed response from /tx/send: missing transaction fields")

        logger.info(f"Broadcast transaction {tx_hash}")
        return BroadcastReceipt(tx=tx, hash=tx_hash)
