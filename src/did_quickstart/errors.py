"""Exception taxonomy for did-quickstart.

Every error raised by the in-process identity SDK derives from
:class:`QuickstartError`, so the workflow driver can classify a failure by
its type instead of inspecting messages.

Hierarchy
---------
::

    QuickstartError
    ├── SessionError
    │   ├── InvalidPasswordError
    │   ├── EnvironmentUnavailableError
    │   └── VaultError
    ├── IdentityNotFoundError
    ├── DidResolutionError
    ├── CredentialError
    │   ├── CredentialParseError
    │   └── CredentialVerificationError
    ├── SigningError
    └── StorageError
        └── RecordNotFoundError
"""
from __future__ import annotations


class QuickstartError(Exception):
    """Base exception for did-quickstart errors."""


# ------------------------------------------------------------------
# Session
# ------------------------------------------------------------------


class SessionError(QuickstartError):
    """Raised when an identity session cannot be established."""


class InvalidPasswordError(SessionError):
    """Raised when the vault password is rejected."""

    def __init__(self) -> None:
        super().__init__("The identity vault rejected the supplied password.")


class EnvironmentUnavailableError(SessionError):
    """Raised when the backing agent environment is not running."""


class VaultError(SessionError):
    """Raised on invalid identity vault state transitions."""


# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------


class IdentityNotFoundError(QuickstartError):
    """Raised when a DID is not known to the current session."""

    def __init__(self, did_uri: str) -> None:
        super().__init__(f"Identity {did_uri!r} is not managed by this agent.")
        self.did_uri = did_uri


class DidResolutionError(QuickstartError):
    """Raised when a DID string cannot be resolved to a document."""


# ------------------------------------------------------------------
# Credentials
# ------------------------------------------------------------------


class CredentialError(QuickstartError):
    """Raised when a credential cannot be constructed from its claims."""


class CredentialParseError(CredentialError):
    """Raised when a VC-JWT cannot be decoded into a credential."""


class CredentialVerificationError(CredentialError):
    """Raised when a VC-JWT fails signature or validity checks."""


class SigningError(QuickstartError):
    """Raised when a credential or message cannot be signed."""


# ------------------------------------------------------------------
# Storage
# ------------------------------------------------------------------


class StorageError(QuickstartError):
    """Raised when a DWN record cannot be written or read."""


class RecordNotFoundError(StorageError):
    """Raised when a record ID is not present in the tenant's store."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record {record_id!r} does not exist.")
        self.record_id = record_id


__all__ = [
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
