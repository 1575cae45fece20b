"""
Wallet data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hostwallet.errors import AmountError, ValidationError


@dataclass(frozen=True)
class KeychainRef:
    """Reference to a keychain as listed on the wallet record"""

    xpub: str
    path: str | None = None


@dataclass(frozen=True)
class Keychain:
    """
    Key material container of a wallet.

    `xprv` is only set on the copy returned by the credential unlocker and
    is kept out of repr() so it can't end up in a log line.
    """

    xpub: str
    encrypted_xprv: str | None = None
    xprv: str | None = field(default=None, repr=False, compare=False)

    @property
    def is_unlocked(self) -> bool:
        return self.xprv is not None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Keychain:
        return cls(xpub=data["xpub"], encrypted_xprv=data.get("encryptedXprv") or None)


@dataclass(frozen=True)
class WalletInfo:
    """Immutable snapshot of a wallet record"""

    id: str
    label: str = ""
    balance: int = 0
    pending_balance: int = 0
    available_balance: int = 0
    type: str = ""
    keychains: tuple[KeychainRef, ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> WalletInfo:
        private = data.get("private") or {}
        keychains = tuple(
            KeychainRef(xpub=k["xpub"], path=k.get("path")) for k in private.get("keychains", [])
        )
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            balance=data.get("balance", 0),
            pending_balance=data.get("pendingBalance", 0),
            available_balance=data.get("availableBalance", 0),
            type=data.get("type", ""),
            keychains=keychains,
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_amount(amount: Any, fee: Any = None) -> None:
    """Check amount (and optional fee) are integer satoshis in range."""
    if not _is_int(amount):
        raise ValidationError("invalid argument for amount - integer satoshis expected")
    if amount <= 0:
        raise AmountError("must send positive number of Satoshis!")
    if fee is not None:
        if not _is_int(fee):
            raise ValidationError("invalid argument for fee - integer satoshis expected")
        if fee < 0:
            raise AmountError("fee must not be negative")


def require_string(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"missing or invalid parameter: {name}")


@dataclass(frozen=True)
class Recipient:
    """Destination, amount and optional fee handed to the transaction builder"""

    address: str
    amount: int
    fee: int | None = None

    def __post_init__(self) -> None:
        require_string("address", self.address)
        validate_amount(self.amount, self.fee)


@dataclass(frozen=True)
class SpendRequest:
    """A validated request to send coins from a wallet."""

    address: str
    amount: int
    wallet_passphrase: str = field(repr=False)
    fee: int | None = None

    def __post_init__(self) -> None:
        require_string("address", self.address)
        require_string("walletPassphrase", self.wallet_passphrase)
        validate_amount(self.amount, self.fee)

    @property
    def recipient(self) -> Recipient:
        return Recipient(address=self.address, amount=self.amount, fee=self.fee)


@dataclass(frozen=True)
class SignedTransaction:
    tx: str
    fee: int


@dataclass(frozen=True)
class BroadcastReceipt:
    tx: str
    hash: str


@dataclass(frozen=True)
class SpendResult:
    tx: str
    hash: str
    fee: int

    def to_dict(self) -> dict[str, Any]:
        return {"tx": self.tx, "hash": self.hash, "fee": self.fee}


class SpendState(str, Enum):
    IDLE = "idle"
    RESOLVING_KEYCHAIN = "resolving_keychain"
    UNLOCKING = "unlocking"
    ASSEMBLING = "assembling"
    BROADCASTING = "broadcasting"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


@dataclass(frozen=True)
class SpendOutcome:
    """
    Terminal outcome of a spend operation that did not fail.

    `INCOMPLETE` means the builder signed nothing (for instance a
    multi-signature transaction still waiting for another signer); there is
    no result and no error.
    """

    state: SpendState
    result: SpendResult | None = None

    @property
    def completed(self) -> bool:
        return self.state == SpendState.COMPLETE
