"""
hostwallet - Client for hosted multi-key wallets

Resolves the user keychain, unlocks it with the wallet passphrase, has a
transaction builder sign the spend and broadcasts it via the service.
"""

__version__ = "0.1.0"

from hostwallet.broadcast import BroadcastSubmitter
from hostwallet.builder import BuilderState, TransactionAssembler, TransactionBuilder
from hostwallet.crypto import CipherError, CredentialUnlocker, decrypt, encrypt
from hostwallet.errors import (
    AmountError,
    BuildError,
    DecryptionError,
    NetworkError,
    NoKeychainFound,
    ValidationError,
    WalletError,
)
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
    SpendState,
    WalletInfo,
)
from hostwallet.spend import SpendOrchestrator
from hostwallet.transport import HttpTransport, Transport
from hostwallet.wallet import Wallet

__all__ = [
    "AmountError",
    "BroadcastReceipt",
    "BroadcastSubmitter",
    "BuildError",
    "BuilderState",
    "CipherError",
    "CredentialUnlocker",
    "DecryptionError",
    "HttpTransport",
    "Keychain",
    "KeychainRef",
    "KeychainResolver",
    "KeychainService",
    "NetworkError",
    "NoKeychainFound",
    "Recipient",
    "SignedTransaction",
    "SpendOrchestrator",
    "SpendOutcome",
    "SpendRequest",
    "SpendResult",
    "SpendState",
    "TransactionAssembler",
    "TransactionBuilder",
    "Transport",
    "ValidationError",
    "Wallet",
    "WalletError",
    "WalletInfo",
    "decrypt",
    "encrypt",
]
