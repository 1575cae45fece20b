"""
Exceptions raised by the wallet spend pipeline.
"""

from __future__ import annotations


class WalletError(Exception):
    """Base class for all wallet errors."""

    pass


class ValidationError(WalletError):
    """A request field is missing or has the wrong type."""

    pass


class AmountError(ValidationError):
    """An amount or fee is out of range."""

    pass


class NoKeychainFound(WalletError):
    """None of the wallet's keychains carries encrypted private key material."""

    def __init__(self, message: str = "No encrypted keychains on this wallet.") -> None:
        super().__init__(message)


class DecryptionError(WalletError):
    """The user keychain could not be unlocked.

    The message is fixed so that a wrong passphrase and a corrupt blob
    look the same to the caller.
    """

    MESSAGE = "Unable to decrypt user keychain"

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


class BuildError(WalletError):
    """The transaction builder failed to produce a signed transaction."""

    pass


class NetworkError(WalletError):
    """Transport or remote service failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
