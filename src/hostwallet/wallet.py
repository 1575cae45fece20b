"""
Hosted wallet accessor.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from hostwallet.broadcast import BroadcastSubmitter
from hostwallet.builder import TransactionAssembler, TransactionBuilder
from hostwallet.crypto import CredentialUnlocker, Decrypt, decrypt
from hostwallet.errors import BuildError, NetworkError, ValidationError
from hostwallet.keychains import KeychainResolver, KeychainService
from hostwallet.models import (
    BroadcastReceipt,
    Keychain,
    KeychainRef,
    Recipient,
    SignedTransaction,
    SpendOutcome,
    SpendRequest,
    SpendResult,
    WalletInfo,
)
from hostwallet.spend import SpendOrchestrator
from hostwallet.transport import Transport

SATOSHIS_PER_BTC = 100_000_000


class Wallet:
    """
    Accessor for one wallet on the service.

    Read accessors are served from the wallet snapshot or passed straight
    through to the service. Spending goes through the SpendOrchestrator.
    """

    def __init__(
        self,
        transport: Transport,
        info: WalletInfo,
        builder: TransactionBuilder | None = None,
        decrypt: Decrypt = decrypt,
        keychains: KeychainService | None = None,
    ):
        self.transport = transport
        self.info = info
        self.builder = builder
        self.keychain_service = keychains or KeychainService(transport)
        self.resolver = KeychainResolver(self.keychain_service)
        self.unlocker = CredentialUnlocker(decrypt)
        self.submitter = BroadcastSubmitter(transport)

    @classmethod
    async def fetch(cls, transport: Transport, wallet_id: str, **kwargs: Any) -> Wallet:
        """Fetch the wallet record and wrap it"""
        if not isinstance(wallet_id, str) or not wallet_id:
            raise ValidationError("missing or invalid parameter: id")
        data = await transport.get(f"/wallet/{wallet_id}")
        try:
            info = WalletInfo.from_json(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise NetworkError(f"Malformed wallet record for {wallet_id}") from e
        return cls(transport, info, **kwargs)

    @property
    def keychains(self) -> tuple[KeychainRef, ...]:
        return self.info.keychains

    def address(self) -> str:
        return self.info.id

    def label(self) -> str:
        return self.info.label

    def balance(self) -> int:
        return self.info.balance

    def pending_balance(self) -> int:
        return self.info.pending_balance

    def available_balance(self) -> int:
        return self.info.available_balance

    def type(self) -> str:
        """Wallet type, e.g. 'safehd'"""
        return self.info.type

    def url(self, extra: str = "") -> str:
        return f"/wallet/{self.address()}{extra}"

    async def create_address(self, chain: int = 0) -> dict[str, Any]:
        """Create a new address for use with this wallet"""
        if not isinstance(chain, int) or isinstance(chain, bool):
            raise ValidationError("invalid chain argument, expecting number")
        return await self.transport.post(self.url(f"/address/{chain}"), {})

    async def addresses(self, limit: int | None = None) -> dict[str, Any]:
        """List the wallet's addresses"""
        params = None
        if limit is not None:
            if not isinstance(limit, int) or isinstance(limit, bool):
                raise ValidationError("invalid limit argument, expecting number")
            params = {"limit": limit}
        return await self.transport.get(self.url("/addresses"), params)

    async def unspents(self, btc_limit: float | None = None) -> list[dict[str, Any]]:
        """
        List the wallet's unspents.

        Args:
            btc_limit: Optional limit on the value of unspents to collect, in BTC
        """
        params = None
        if btc_limit is not None:
            if not isinstance(btc_limit, (int, float)) or isinstance(btc_limit, bool):
                raise ValidationError("invalid btc_limit argument, expecting number")
            params = {"limit": round(btc_limit * SATOSHIS_PER_BTC)}
        body = await self.transport.get(self.url("/unspents"), params)
        return body.get("unspents", [])

    async def transactions(self) -> dict[str, Any]:
        """List the wallet's transactions"""
        return await self.transport.get(self.url("/tx"))

    async def delete(self) -> dict[str, Any]:
        """Delete the wallet"""
        logger.info(f"Deleting wallet {self.address()}")
        return await self.transport.delete(self.url())

    async def get_encrypted_user_keychain(self) -> Keychain:
        """
        Get the user keychain: the first of the wallet's keychains whose
        encrypted xprv is stored on the service.
        """
        return await self.resolver.find_signing_keychain(self.keychains)

    def _assembler(self) -> TransactionAssembler:
        if self.builder is None:
            raise BuildError("No transaction builder configured for this wallet")
        return TransactionAssembler(self.builder)

    async def create_transaction(
        self, address: str, amount: int, keychain: Keychain, fee: int | None = None
    ) -> SignedTransaction | None:
        """
        Create and sign a transaction.

        Args:
            address: Destination address
            amount: Amount to send, in satoshis
            keychain: Decrypted keychain to sign with
            fee: Optional blockchain fee, in satoshis
        """
        recipient = Recipient(address=address, amount=amount, fee=fee)
        return await self._assembler().assemble(recipient, keychain)

    async def send_transaction(self, tx: str) -> BroadcastReceipt:
        """Send a hex encoded, signed transaction via the service"""
        return await self.submitter.broadcast(tx)

    async def spend(self, request: SpendRequest, deadline: float | None = None) -> SpendOutcome:
        orchestrator = SpendOrchestrator(
            resolver=self.resolver,
            unlocker=self.unlocker,
            assembler=self._assembler(),
            submitter=self.submitter,
        )
        return await orchestrator.spend(request, self.keychains, deadline=deadline)

    async def send_coins(
        self,
        address: str,
        amount: int,
        wallet_passphrase: str,
        fee: int | None = None,
        deadline: float | None = None,
    ) -> SpendResult | None:
        """
        Send coins to a destination address using the user key.

        Returns:
            The result, or None when no transaction was produced (e.g. the
            transaction still needs another signature).
        """
        request = SpendRequest(
            address=address, amount=amount, wallet_passphrase=wallet_passphrase, fee=fee
        )
        outcome = await self.spend(request, deadline=deadline)
        return outcome.result
