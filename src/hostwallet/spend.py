"""
Spend pipeline: turn a send request into one broadcast, signed transaction.

Steps run strictly in order, each on the output of the previous one:

1. Resolve the user keychain (first keychain with an encrypted xprv)
2. Unlock it with the wallet passphrase
3. Build and sign the transaction
4. Broadcast it through the wallet service

Errors abort the pipeline at the current step and reach the caller
unmodified. Nothing is retried.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from typing import TypeVar

from loguru import logger

from hostwallet.broadcast import BroadcastSubmitter
from hostwallet.builder import TransactionAssembler
from hostwallet.crypto import CredentialUnlocker
from hostwallet.errors import NetworkError, ValidationError, WalletError
from hostwallet.keychains import KeychainResolver
from hostwallet.models import (
    Keychain,
    KeychainRef,
    SpendOutcome,
    SpendRequest,
    SpendResult,
    SpendState,
)

T = TypeVar("T")


class SpendOrchestrator:
    """
    Composes keychain resolution, unlocking, assembly and broadcast.

    The orchestrator holds no per-spend state, so one instance can serve
    concurrent spends. Unlocked key material only lives in the local scope
    of spend().
    """

    def __init__(
        self,
        resolver: KeychainResolver,
        unlocker: CredentialUnlocker,
        assembler: TransactionAssembler,
        submitter: BroadcastSubmitter,
    ):
        self.resolver = resolver
        self.unlocker = unlocker
        self.assembler = assembler
        self.submitter = submitter

    async def spend(
        self,
        request: SpendRequest,
        keychains: Sequence[KeychainRef],
        deadline: float | None = None,
    ) -> SpendOutcome:
        """
        Run the spend pipeline.

        Args:
            request: Validated spend request
            keychains: The wallet's keychains, in the wallet's order
            deadline: Optional time budget in seconds for the whole operation.
                Every network-bound step is bounded by what is left of it.

        Returns:
            SpendOutcome in state COMPLETE (with result) or INCOMPLETE (the
            builder produced no transaction).

        Raises:
            ValidationError, AmountError: Invalid request, before any network call
            NoKeychainFound, DecryptionError, BuildError, NetworkError
        """
        if not isinstance(request, SpendRequest):
            raise ValidationError("invalid argument - SpendRequest expected")
        if deadline is not None and deadline <= 0:
            raise ValidationError("deadline must be positive")

        loop = asyncio.get_running_loop()
        expires_at = loop.time() + deadline if deadline is not None else None

        state = SpendState.IDLE
        unlocked: Keychain | None = None

        def transition(new_state: SpendState) -> SpendState:
            logger.debug(f"Spend {state.value} -> {new_state.value}")
            return new_state

        try:
            state = transition(SpendState.RESOLVING_KEYCHAIN)
            keychain = await self._bounded(
                self.resolver.find_signing_keychain(keychains), expires_at, state
            )

            state = transition(SpendState.UNLOCKING)
            unlocked = self.unlocker.unlock(keychain, request.wallet_passphrase)

            state = transition(SpendState.ASSEMBLING)
            signed = await self._bounded(
                self.assembler.assemble(request.recipient, unlocked), expires_at, state
            )
            if signed is None:
                state = transition(SpendState.INCOMPLETE)
                logger.info("No transaction produced, nothing to broadcast")
                return SpendOutcome(state=state)

            state = transition(SpendState.BROADCASTING)
            receipt = await self._bounded(self.submitter.broadcast(signed.tx), expires_at, state)

            state = transition(SpendState.COMPLETE)
            result = SpendResult(tx=receipt.tx, hash=receipt.hash, fee=signed.fee)
            logger.info(f"Sent {request.amount} sats to {request.address}: {receipt.hash}")
            return SpendOutcome(state=state, result=result)

        except WalletError as e:
            logger.warning(f"Spend failed while {state.value}: {type(e).__name__}: {e}")
            transition(SpendState.FAILED)
            raise
        finally:
            # Drop the decrypted key on every exit path
            unlocked = None  # noqa: F841

    @staticmethod
    async def _bounded(
        awaitable: Awaitable[T], expires_at: float | None, state: SpendState
    ) -> T:
        """Await a network-bound step within the remaining deadline."""
        if expires_at is None:
            return await awaitable

        remaining = expires_at - asyncio.get_running_loop().time()
        if remaining <= 0:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise NetworkError(f"Deadline exceeded before {state.value}")

        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Deadline exceeded while {state.value}") from e
