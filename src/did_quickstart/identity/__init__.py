"""Identity agent and password-gated vault."""
from __future__ import annotations

from did_quickstart.identity.agent import IdentityAgent, IdentityApi, ManagedIdentity
from did_quickstart.identity.vault import IdentityVault

__all__ = ["IdentityAgent", "IdentityApi", "IdentityVault", "ManagedIdentity"]
