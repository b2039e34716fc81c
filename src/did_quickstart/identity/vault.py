"""IdentityVault — password-gated storage for an agent's DIDs.

On first launch the vault creates the agent's own DID and seals it under a
key derived from the password (scrypt). Every later session must
:meth:`~IdentityVault.unlock` with the same password; a different password
fails authentication of the sealed agent DID and is rejected.

The vault applies no password policy. Whatever string the caller supplies
is used as-is.
"""
from __future__ import annotations

import datetime
import logging

from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.did.bearer import BearerDid, PortableDid
from did_quickstart.did.did_key import create_did
from did_quickstart.errors import InvalidPasswordError, VaultError

logger = logging.getLogger(__name__)

_SALT_SIZE: int = 16


class IdentityVault:
    """In-memory vault holding sealed :class:`PortableDid` entries.

    Parameters
    ----------
    crypto:
        Provider used for key derivation, sealing, and DID creation.

    Example
    -------
    ::

        vault = IdentityVault(CryptoProvider())
        agent_did = vault.initialize("correct horse")
        vault.lock()
        assert vault.unlock("correct horse").uri == agent_did.uri
    """

    def __init__(self, crypto: CryptoProvider) -> None:
        self._crypto = crypto
        self._salt: bytes | None = None
        self._agent_did_uri: str | None = None
        self._sealed: dict[str, bytes] = {}
        self._labels: dict[str, tuple[str, datetime.datetime]] = {}
        self._content_key: bytes | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._agent_did_uri is not None

    @property
    def is_locked(self) -> bool:
        return self._content_key is None

    @property
    def agent_did_uri(self) -> str | None:
        return self._agent_did_uri

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, password: str) -> BearerDid:
        """Create the agent DID and seal it under *password*.

        Returns
        -------
        BearerDid
            The agent's own DID. The vault is left unlocked.

        Raises
        ------
        VaultError
            If the vault has already been initialized.
        """
        if self.is_initialized:
            raise VaultError("Identity vault is already initialized; call unlock().")

        self._salt = self._crypto.random_bytes(_SALT_SIZE)
        self._content_key = self._crypto.derive_key(password, self._salt)

        agent_did = create_did(self._crypto)
        self._seal(agent_did)
        self._agent_did_uri = agent_did.uri
        logger.info("Identity vault initialized for agent DID %s", agent_did.uri)
        return agent_did

    def unlock(self, password: str) -> BearerDid:
        """Unlock the vault and return the agent DID.

        Raises
        ------
        VaultError
            If the vault has never been initialized.
        InvalidPasswordError
            If *password* does not open the sealed agent DID.
        """
        if self._agent_did_uri is None or self._salt is None:
            raise VaultError("Identity vault is not initialized; call initialize().")

        candidate_key = self._crypto.derive_key(password, self._salt)
        try:
            agent_did = self._open(self._agent_did_uri, candidate_key)
        except InvalidPasswordError:
            logger.warning("Identity vault unlock rejected for %s", self._agent_did_uri)
            raise
        self._content_key = candidate_key
        logger.debug("Identity vault unlocked")
        return agent_did

    def lock(self) -> None:
        self._content_key = None

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def store(self, bearer: BearerDid, name: str) -> datetime.datetime:
        """Seal an identity's bearer DID under a human-readable *name*.

        Returns
        -------
        datetime.datetime
            UTC creation timestamp recorded for the identity.
        """
        self._require_unlocked()
        self._seal(bearer)
        created_at = datetime.datetime.now(datetime.timezone.utc)
        self._labels[bearer.uri] = (name, created_at)
        return created_at

    def load(self, did_uri: str) -> BearerDid | None:
        """Return the bearer DID for *did_uri*, or ``None`` if not stored."""
        key = self._require_unlocked()
        if did_uri not in self._sealed:
            return None
        return self._open(did_uri, key)

    def list_dids(self) -> list[str]:
        """Return a sorted list of stored DID strings, agent DID included."""
        return sorted(self._sealed)

    def identities(self) -> list[tuple[str, str, datetime.datetime]]:
        """Return ``(uri, name, created_at)`` for each stored identity, oldest first."""
        return [(uri, name, created) for uri, (name, created) in self._labels.items()]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_unlocked(self) -> bytes:
        if self._content_key is None:
            raise VaultError("Identity vault is locked.")
        return self._content_key

    def _seal(self, bearer: BearerDid) -> None:
        key = self._require_unlocked()
        plaintext = bearer.export().model_dump_json().encode("utf-8")
        self._sealed[bearer.uri] = self._crypto.encrypt(key, plaintext)

    def _open(self, did_uri: str, key: bytes) -> BearerDid:
        plaintext = self._crypto.decrypt(key, self._sealed[did_uri])
        portable = PortableDid.model_validate_json(plaintext)
        return BearerDid.from_portable(portable)


__all__ = ["IdentityVault"]
