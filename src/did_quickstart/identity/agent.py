"""IdentityAgent — the user agent that manages identities on behalf of a session.

The agent owns an :class:`~did_quickstart.identity.vault.IdentityVault` and
exposes an :class:`IdentityApi` for creating and looking up the identities
it manages. Looking up an identity returns a :class:`ManagedIdentity` whose
``did`` is a :class:`~did_quickstart.did.bearer.BearerDid` able to sign.
"""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field

from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.did.bearer import BearerDid
from did_quickstart.did.did_key import create_did
from did_quickstart.errors import IdentityNotFoundError
from did_quickstart.identity.vault import IdentityVault

logger = logging.getLogger(__name__)


@dataclass
class ManagedIdentity:
    """An identity managed by the agent.

    Parameters
    ----------
    did:
        Bearer DID carrying the identity's signing key.
    name:
        Human-readable label for the identity.
    created_at:
        UTC datetime when the identity was created.
    """

    did: BearerDid
    name: str
    created_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    @property
    def uri(self) -> str:
        return self.did.uri

    def to_dict(self) -> dict[str, object]:
        """Serialize metadata only. Key material is omitted."""
        return {
            "uri": self.did.uri,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
        }


class IdentityApi:
    """Create, list, and retrieve identities held in the agent's vault.

    Identity names and creation times live in the vault, so a new agent
    over the same vault sees every identity created before it.
    """

    def __init__(self, vault: IdentityVault, crypto: CryptoProvider) -> None:
        self._vault = vault
        self._crypto = crypto

    async def create(self, name: str) -> ManagedIdentity:
        """Create a new identity and seal its key into the vault."""
        bearer = create_did(self._crypto)
        created_at = self._vault.store(bearer, name)
        logger.info("Created identity %r with DID %s", name, bearer.uri)
        return ManagedIdentity(did=bearer, name=name, created_at=created_at)

    async def get(self, did_uri: str) -> ManagedIdentity:
        """Return the managed identity for *did_uri*.

        Raises
        ------
        IdentityNotFoundError
            If the DID is not an identity created through this agent.
        """
        for uri, name, created_at in self._vault.identities():
            if uri == did_uri:
                bearer = self._vault.load(uri)
                if bearer is None:
                    break
                return ManagedIdentity(did=bearer, name=name, created_at=created_at)
        raise IdentityNotFoundError(did_uri)

    async def list(self) -> list[ManagedIdentity]:
        """Return every managed identity, oldest first."""
        return [await self.get(uri) for uri, _, _ in self._vault.identities()]


class IdentityAgent:
    """Agent facade bundling the vault and the identity API.

    Parameters
    ----------
    vault:
        The password-gated vault holding all key material.
    crypto:
        Provider used to create new identities.
    """

    def __init__(self, vault: IdentityVault, crypto: CryptoProvider) -> None:
        self.vault = vault
        self.crypto = crypto
        self.identity = IdentityApi(vault, crypto)

    @property
    def agent_did_uri(self) -> str | None:
        return self.vault.agent_did_uri


__all__ = ["IdentityAgent", "IdentityApi", "ManagedIdentity"]
