"""connect — establish an identity session in one call.

:func:`connect` is the entry point of the SDK. On the first call against an
:class:`AgentEnvironment` it initializes the identity vault with the given
password and creates a ``Default`` identity. Later calls unlock the vault
with the same password and reconnect to the first identity.

Example
-------
::

    crypto = CryptoProvider()
    result = await connect("your-secure-password", crypto)
    identity = await result.session.agent.identity.get(result.did)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.dwn.records import DwnApi, DwnNode
from did_quickstart.errors import EnvironmentUnavailableError
from did_quickstart.identity.agent import IdentityAgent
from did_quickstart.identity.vault import IdentityVault

logger = logging.getLogger(__name__)

DEFAULT_IDENTITY_NAME: str = "Default"


@dataclass
class AgentEnvironment:
    """Backing services for sessions: the identity vault and the DWN node.

    Reusing one environment across :func:`connect` calls models relaunching
    the same agent. A fresh environment models a first launch.
    """

    vault: IdentityVault
    node: DwnNode = field(default_factory=DwnNode)

    @classmethod
    def create(cls, crypto: CryptoProvider) -> "AgentEnvironment":
        return cls(vault=IdentityVault(crypto))


@dataclass
class Session:
    """A connected identity session.

    Parameters
    ----------
    agent:
        The identity agent holding the unlocked vault.
    did:
        URI of the identity this session acts as.
    dwn:
        DWN interfaces scoped to ``did``.
    """

    agent: IdentityAgent
    did: str
    dwn: DwnApi


@dataclass(frozen=True)
class ConnectResult:
    session: Session
    did: str


async def connect(
    password: str,
    crypto: CryptoProvider,
    environment: AgentEnvironment | None = None,
) -> ConnectResult:
    """Open a session, creating the agent and its first identity if needed.

    Parameters
    ----------
    password:
        Vault password. Used as given; no policy is enforced.
    crypto:
        Cryptographic provider used by the vault and for DID creation.
    environment:
        Services to connect to. A new environment is created when omitted.

    Returns
    -------
    ConnectResult
        The session and the DID it is connected as.

    Raises
    ------
    InvalidPasswordError
        If the environment's vault rejects *password*.
    EnvironmentUnavailableError
        If the environment's DWN node is not running.
    """
    env = environment or AgentEnvironment.create(crypto)
    if not env.node.is_running:
        raise EnvironmentUnavailableError("Cannot connect: the DWN node is not running.")

    agent = IdentityAgent(env.vault, crypto)
    if env.vault.is_initialized:
        env.vault.unlock(password)
        identities = await agent.identity.list()
        identity = (
            identities[0]
            if identities
            else await agent.identity.create(DEFAULT_IDENTITY_NAME)
        )
    else:
        env.vault.initialize(password)
        identity = await agent.identity.create(DEFAULT_IDENTITY_NAME)

    logger.info("Connected as %s", identity.uri)
    session = Session(agent=agent, did=identity.uri, dwn=DwnApi(env.node, identity.did))
    return ConnectResult(session=session, did=identity.uri)


__all__ = [
    "AgentEnvironment",
    "ConnectResult",
    "DEFAULT_IDENTITY_NAME",
    "Session",
    "connect",
]
