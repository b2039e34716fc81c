"""did-quickstart — decentralized identity quickstart.

Create a DID, issue and sign a verifiable credential, store it in the
identity's decentralized web node, then read it back and parse it.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import did_quickstart
>>> did_quickstart.__version__
'0.1.0'

Quick start
-----------
::

    import asyncio
    from did_quickstart import CryptoProvider, QuickstartConfig, QuickstartWorkflow

    workflow = QuickstartWorkflow(CryptoProvider(), QuickstartConfig(password="pw123"))
    outcome = asyncio.run(workflow.run())
    print(outcome.parsed_vc.subject == outcome.did)  # True
"""
from __future__ import annotations

__version__: str = "0.1.0"

from did_quickstart.config import QuickstartConfig
from did_quickstart.connect import AgentEnvironment, ConnectResult, Session, connect
from did_quickstart.credentials.credential import CredentialSubject, VerifiableCredential
from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.did.bearer import BearerDid, PortableDid
from did_quickstart.did.did_key import DidDocument, create_did, resolve_did
from did_quickstart.dwn.records import DwnNode, Record, RecordsApi
from did_quickstart.errors import (
    CredentialError,
    CredentialParseError,
    CredentialVerificationError,
    DidResolutionError,
    EnvironmentUnavailableError,
    IdentityNotFoundError,
    InvalidPasswordError,
    QuickstartError,
    RecordNotFoundError,
    SessionError,
    SigningError,
    StorageError,
    VaultError,
)
from did_quickstart.identity.agent import IdentityAgent, ManagedIdentity
from did_quickstart.identity.vault import IdentityVault
from did_quickstart.workflow import (
    QuickstartOutcome,
    QuickstartWorkflow,
    StepResult,
    WorkflowError,
    WorkflowStep,
)

__all__ = [
    "__version__",
    # workflow
    "QuickstartConfig",
    "QuickstartOutcome",
    "QuickstartWorkflow",
    "StepResult",
    "WorkflowError",
    "WorkflowStep",
    # session
    "AgentEnvironment",
    "ConnectResult",
    "Session",
    "connect",
    # identity
    "BearerDid",
    "CryptoProvider",
    "DidDocument",
    "IdentityAgent",
    "IdentityVault",
    "ManagedIdentity",
    "PortableDid",
    "create_did",
    "resolve_did",
    # credentials
    "CredentialSubject",
    "VerifiableCredential",
    # dwn
    "DwnNode",
    "Record",
    "RecordsApi",
    # errors
    "CredentialError",
    "CredentialParseError",
    "CredentialVerificationError",
    "DidResolutionError",
    "EnvironmentUnavailableError",
    "IdentityNotFoundError",
    "InvalidPasswordError",
    "QuickstartError",
    "RecordNotFoundError",
    "SessionError",
    "SigningError",
    "StorageError",
    "VaultError",
]
