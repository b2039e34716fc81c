"""did_quickstart.credentials — W3C Verifiable Credentials as VC-JWTs.

Quick start
-----------
::

    vc = VerifiableCredential.create(
        type="Web5QuickstartCompletionCredential",
        issuer=bearer.uri,
        subject=bearer.uri,
        data={"name": "Alice Smith"},
    )
    vc_jwt = await vc.sign(bearer)
    parsed = VerifiableCredential.parse_jwt(vc_jwt)
"""
from __future__ import annotations

from did_quickstart.credentials.credential import (
    BASE_CONTEXT,
    BASE_TYPE,
    CredentialSubject,
    VerifiableCredential,
)
from did_quickstart.credentials.jwt import DecodedJwt, decode_jwt, sign_jwt, verify_jwt

__all__ = [
    "BASE_CONTEXT",
    "BASE_TYPE",
    "CredentialSubject",
    "DecodedJwt",
    "VerifiableCredential",
    "decode_jwt",
    "sign_jwt",
    "verify_jwt",
]
