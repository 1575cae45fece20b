"""
Keychain lookup for the spend pipeline.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from hostwallet.errors import NetworkError, NoKeychainFound
from hostwallet.models import Keychain, KeychainRef
from hostwallet.transport import Transport


class KeychainService:
    """
    Fetches keychain records from the wallet service.

    Records are immutable, so they can be cached per service instance and
    shared between concurrent spends.
    """

    def __init__(self, transport: Transport, cache: bool = True):
        self.transport = transport
        self.cache = cache
        self._records: dict[str, Keychain] = {}

    async def get(self, xpub: str) -> Keychain:
        """Get the keychain record for an xpub"""
        if self.cache and xpub in self._records:
            return self._records[xpub]

        data = await self.transport.post(f"/keychain/{xpub}", {})
        try:
            keychain = Keychain.from_json(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise NetworkError(f"Malformed keychain record for {xpub}") from e

        if self.cache:
            self._records[xpub] = keychain
        return keychain


class KeychainResolver:
    """
    Finds the keychain used to sign for a wallet.

    The user keychain is the one whose encrypted xprv is stored on the
    service. Candidates are tried in order and the search stops at the first
    match, so later keychains are never fetched.
    """

    def __init__(self, keychains: KeychainService):
        self.keychains = keychains

    async def find_signing_keychain(self, candidates: Iterable[KeychainRef]) -> Keychain:
        for index, ref in enumerate(candidates):
            keychain = await self.keychains.get(ref.xpub)
            if keychain.encrypted_xprv:
                logger.debug(f"Using keychain #{index} ({ref.xpub[:12]}...) for signing")
                return keychain
            logger.debug(f"Keychain #{index} has no encrypted xprv, trying next")

        raise NoKeychainFound()
