"""did_quickstart.did — ``did:key`` identifiers and bearer DIDs.

Submodules
----------
did_key
    create_did, resolve_did, DidDocument and the base58btc codec.
bearer
    BearerDid (identity handle with signing rights) and PortableDid.
"""
from __future__ import annotations

from did_quickstart.did.bearer import BearerDid, PortableDid, public_key_to_jwk
from did_quickstart.did.did_key import (
    DID_KEY_PREFIX,
    DidDocument,
    create_did,
    key_id_for,
    public_key_to_did,
    resolve_did,
)

__all__ = [
    "BearerDid",
    "DID_KEY_PREFIX",
    "DidDocument",
    "PortableDid",
    "create_did",
    "key_id_for",
    "public_key_to_did",
    "public_key_to_jwk",
    "resolve_did",
]
