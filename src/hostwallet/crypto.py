"""
Passphrase encryption of keychain private keys.

The wallet service stores each user xprv as an SJCL JSON envelope:
PBKDF2-HMAC-SHA256 derives the key from the passphrase and AES-CCM
encrypts the payload. Binary fields are base64 encoded.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json
import secrets
from collections.abc import Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESCCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from loguru import logger

from hostwallet.errors import DecryptionError
from hostwallet.models import Keychain

DEFAULT_ITERATIONS = 10000
DEFAULT_KEY_SIZE = 256  # bits
DEFAULT_TAG_SIZE = 64  # bits

SALT_LENGTH = 8
IV_LENGTH = 16

Decrypt = Callable[[str, str], str]


class CipherError(Exception):
    """Exception for malformed envelopes and failed decryption."""

    pass


def _b64decode(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (TypeError, binascii.Error) as exc:
        raise CipherError("Invalid base64 field") from exc


def _b64encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def _derive_key(password: str, salt: bytes, iterations: int, key_size: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=key_size // 8,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def _ccm_nonce(iv: bytes, plaintext_length: int) -> bytes:
    """
    Truncate the 16 byte IV to the CCM nonce length SJCL uses.

    The length field L grows with the message size (2 bytes up to 64KiB)
    and the nonce takes the remaining 15 - L bytes.
    """
    length_bytes = 2
    while length_bytes < 4 and plaintext_length >> (8 * length_bytes):
        length_bytes += 1
    if length_bytes < 15 - len(iv):
        length_bytes = 15 - len(iv)
    return iv[: 15 - length_bytes]


def encrypt(
    password: str,
    plaintext: str,
    iterations: int = DEFAULT_ITERATIONS,
    key_size: int = DEFAULT_KEY_SIZE,
    tag_size: int = DEFAULT_TAG_SIZE,
) -> str:
    """
    Encrypt plaintext under a password.

    Returns:
        SJCL JSON envelope as a string.
    """
    salt = secrets.token_bytes(SALT_LENGTH)
    iv = secrets.token_bytes(IV_LENGTH)
    data = plaintext.encode("utf-8")

    key = _derive_key(password, salt, iterations, key_size)
    ct = AESCCM(key, tag_length=tag_size // 8).encrypt(_ccm_nonce(iv, len(data)), data, None)

    envelope = {
        "iv": _b64encode(iv),
        "v": 1,
        "iter": iterations,
        "ks": key_size,
        "ts": tag_size,
        "mode": "ccm",
        "adata": "",
        "cipher": "aes",
        "salt": _b64encode(salt),
        "ct": _b64encode(ct),
    }
    return json.dumps(envelope)


def decrypt(password: str, opaque: str) -> str:
    """
    Decrypt an SJCL envelope.

    Raises:
        CipherError: If the envelope is malformed or the password is wrong.
    """
    try:
        params = json.loads(opaque)
    except (TypeError, ValueError) as exc:
        raise CipherError("Envelope is not valid JSON") from exc
    if not isinstance(params, dict):
        raise CipherError("Envelope is not a JSON object")

    if params.get("cipher", "aes") != "aes" or params.get("mode", "ccm") != "ccm":
        raise CipherError("Unsupported cipher mode")

    try:
        iv = _b64decode(params["iv"])
        salt = _b64decode(params["salt"])
        ct = _b64decode(params["ct"])
        iterations = int(params.get("iter", DEFAULT_ITERATIONS))
        key_size = int(params.get("ks", 128))
        tag_size = int(params.get("ts", DEFAULT_TAG_SIZE))
    except (KeyError, TypeError, ValueError) as exc:
        raise CipherError("Envelope is missing required fields") from exc
    adata = _b64decode(params["adata"]) if params.get("adata") else None

    tag_length = tag_size // 8
    if key_size not in (128, 192, 256) or len(ct) < tag_length:
        raise CipherError("Invalid envelope parameters")

    try:
        key = _derive_key(password, salt, iterations, key_size)
        cipher = AESCCM(key, tag_length=tag_length)
        data = cipher.decrypt(_ccm_nonce(iv, len(ct) - tag_length), ct, adata)
    except (InvalidTag, ValueError) as exc:
        raise CipherError("Decryption failed") from exc

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CipherError("Plaintext is not valid UTF-8") from exc


class CredentialUnlocker:
    """
    Decrypts the private key of a keychain with the wallet passphrase.
    """

    def __init__(self, decrypt: Decrypt = decrypt):
        self._decrypt = decrypt

    def unlock(self, keychain: Keychain, passphrase: str) -> Keychain:
        """
        Return a copy of keychain with xprv populated.

        Raises:
            DecryptionError: For any failure of the decryption primitive. The
                underlying error is dropped so nothing derived from the
                passphrase reaches the caller.
        """
        if not keychain.encrypted_xprv:
            raise DecryptionError()

        try:
            xprv = self._decrypt(passphrase, keychain.encrypted_xprv)
        except Exception:
            logger.warning("Failed to unlock user keychain")
            raise DecryptionError() from None

        if not xprv:
            raise DecryptionError()

        return dataclasses.replace(keychain, xprv=xprv)
