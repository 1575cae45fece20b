"""
Transaction assembly.

Input selection, script construction and signing belong to a
TransactionBuilder implementation. The assembler drives its two phases
(prepare, then sign) and turns the result into a SignedTransaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from hostwallet.errors import BuildError, NetworkError, ValidationError
from hostwallet.models import Keychain, Recipient, SignedTransaction


@dataclass
class BuilderState:
    """State carried between the builder's prepare and sign phases."""

    fee: int
    tx_hex: str = ""
    inputs: list[dict[str, Any]] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def tx(self) -> str:
        """Serialized transaction (hex)"""
        return self.tx_hex


class TransactionBuilder(ABC):
    """
    Abstract transaction builder interface.
    Implementations are bound to one wallet.
    """

    @abstractmethod
    async def prepare(self, recipient: Recipient, fee: int | None = None) -> BuilderState:
        """Select inputs, compute the transaction skeleton and the fee"""

    @abstractmethod
    async def sign(self, state: BuilderState, keychain: Keychain) -> BuilderState | None:
        """
        Sign with the unlocked keychain.
        Returns None when signing is not complete yet (e.g. a multi-signature
        transaction waiting for a second signer).
        """


class TransactionAssembler:
    """Facade over a TransactionBuilder."""

    def __init__(self, builder: TransactionBuilder):
        self.builder = builder

    async def assemble(
        self, recipient: Recipient, keychain: Keychain
    ) -> SignedTransaction | None:
        """
        Build and sign a transaction.

        Returns:
            The signed transaction, or None if the builder produced nothing.

        Raises:
            ValidationError: If the keychain has not been unlocked
            BuildError: If the builder fails or returns an unusable state
            NetworkError: Passed through from the builder unchanged
        """
        if not isinstance(recipient, Recipient):
            raise ValidationError("invalid argument - recipient expected")
        if not isinstance(keychain, Keychain) or not keychain.is_unlocked:
            raise ValidationError("invalid argument - unlocked keychain expected")

        try:
            state = await self.builder.prepare(
                Recipient(address=recipient.address, amount=recipient.amount), recipient.fee
            )
            signed = await self.builder.sign(state, keychain)
        except (NetworkError, BuildError):
            raise
        except Exception as e:
            logger.error(f"Transaction builder failed: {type(e).__name__}")
            raise BuildError(f"Failed to build transaction: {e}") from e

        if signed is None:
            logger.info("Builder did not produce a signed transaction")
            return None

        tx_hex = signed.tx()
        if not tx_hex:
            raise BuildError("Builder returned a signed state without a transaction")
        if not isinstance(signed.fee, int) or isinstance(signed.fee, bool) or signed.fee < 0:
            raise BuildError(f"Builder returned an invalid fee: {signed.fee!r}")

        return SignedTransaction(tx=tx_hex, fee=signed.fee)
