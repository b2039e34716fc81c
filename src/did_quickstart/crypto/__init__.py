"""Cryptographic provider injected into every SDK component."""
from __future__ import annotations

from did_quickstart.crypto.provider import CryptoProvider

__all__ = ["CryptoProvider"]
