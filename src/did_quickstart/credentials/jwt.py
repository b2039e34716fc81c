"""Compact JWS/JWT helpers shared by credentials and DWN authorization.

Tokens are signed with EdDSA (Ed25519) through ``jwcrypto``. The protected
header always carries a ``kid`` that is a ``did:key`` DID URL, so any token
can be verified by resolving its key ID. No registry is consulted.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from jwcrypto import jws
from jwcrypto.common import JWException, json_encode

from did_quickstart.did.bearer import BearerDid, public_key_to_jwk
from did_quickstart.did.did_key import resolve_did
from did_quickstart.errors import DidResolutionError

ALGORITHM: str = "EdDSA"


@dataclass(frozen=True)
class DecodedJwt:
    """The three parts of a compact JWS, with header and payload decoded."""

    header: dict[str, Any]
    payload: dict[str, Any]
    signature: bytes


def sign_jwt(signer: BearerDid, payload: dict[str, Any], typ: str = "JWT") -> str:
    """Sign *payload* as a compact JWS using the bearer DID's key.

    Parameters
    ----------
    signer:
        Bearer DID whose private key signs the token.
    payload:
        JSON-serializable claims.
    typ:
        Value of the ``typ`` protected header.

    Returns
    -------
    str
        ``<header>.<payload>.<signature>``, each part base64url encoded.
    """
    token = jws.JWS(json.dumps(payload, sort_keys=True, separators=(",", ":")))
    protected_header = {"alg": ALGORITHM, "typ": typ, "kid": signer.key_id}
    token.add_signature(signer.to_jwk(), None, json_encode(protected_header), None)
    return token.serialize(compact=True)


def decode_jwt(token: str) -> DecodedJwt:
    """Decode a compact JWS without verifying its signature.

    Raises
    ------
    ValueError
        If *token* is not a compact JWS or its payload is not a JSON object.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        raise ValueError("Malformed JWT: expected three dot-separated parts.")

    parsed = jws.JWS()
    try:
        parsed.deserialize(token)
    except (JWException, ValueError) as exc:
        raise ValueError(f"Malformed JWT: {exc}") from exc

    try:
        header = json.loads(parsed.objects["protected"])
        raw_payload = parsed.objects["payload"]
        if isinstance(raw_payload, bytes):
            raw_payload = raw_payload.decode("utf-8")
        payload = json.loads(raw_payload)
    except (KeyError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Malformed JWT: {exc}") from exc

    if not isinstance(payload, dict) or not isinstance(header, dict):
        raise ValueError("Malformed JWT: header and payload must be JSON objects.")
    return DecodedJwt(header=header, payload=payload, signature=parsed.objects["signature"])


def verify_jwt(token: str) -> DecodedJwt:
    """Verify a compact JWS against the DID named in its ``kid`` header.

    Raises
    ------
    ValueError
        If the token is malformed, its ``kid`` cannot be resolved, the
        algorithm is not EdDSA, or the signature does not verify.
    """
    decoded = decode_jwt(token)
    kid = decoded.header.get("kid")
    if not isinstance(kid, str):
        raise ValueError("JWT header is missing a 'kid' DID URL.")
    if decoded.header.get("alg") != ALGORITHM:
        raise ValueError(f"Unsupported JWT algorithm {decoded.header.get('alg')!r}.")

    try:
        document = resolve_did(kid)
    except DidResolutionError as exc:
        raise ValueError(f"Cannot resolve signing key {kid!r}: {exc}") from exc

    verifier = jws.JWS()
    try:
        verifier.deserialize(token)
        verifier.verify(public_key_to_jwk(document.public_key), alg=ALGORITHM)
    except (JWException, ValueError) as exc:
        raise ValueError(f"JWT signature verification failed for {kid!r}.") from exc
    return decoded


__all__ = ["ALGORITHM", "DecodedJwt", "decode_jwt", "sign_jwt", "verify_jwt"]
