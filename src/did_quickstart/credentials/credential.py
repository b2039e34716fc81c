"""Verifiable Credentials issued as VC-JWTs.

Implements the W3C Verifiable Credentials Data Model
(https://www.w3.org/TR/vc-data-model/) with the JWT proof format
(https://www.w3.org/TR/vc-data-model/#json-web-token).

A credential is built from structured claims with
:meth:`VerifiableCredential.create`, signed by the issuer's bearer DID into
a compact token, and turned back into a credential with
:meth:`VerifiableCredential.parse_jwt` (decode only) or
:meth:`VerifiableCredential.verify` (decode and check the signature).

JWT claim mapping
-----------------
``iss``  credential issuer
``sub``  credential subject ID
``jti``  credential ID
``nbf``  issuance date (epoch seconds)
``exp``  expiration date, when present
``vc``   the full credential in W3C JSON form
"""
from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from jwcrypto.common import JWException
from pydantic import BaseModel, Field, ValidationError, model_validator

from did_quickstart.credentials.jwt import decode_jwt, sign_jwt, verify_jwt
from did_quickstart.did.bearer import BearerDid
from did_quickstart.errors import (
    CredentialError,
    CredentialParseError,
    CredentialVerificationError,
    SigningError,
)

BASE_CONTEXT: str = "https://www.w3.org/2018/credentials/v1"
BASE_TYPE: str = "VerifiableCredential"


# ------------------------------------------------------------------
# CredentialSubject
# ------------------------------------------------------------------


@dataclass(frozen=True)
class CredentialSubject:
    """Who a credential is about, and what it says about them.

    ``to_dict`` emits ``id`` first, followed by the claims in insertion
    order. Use :meth:`build` for untrusted input.
    """

    id: str
    claims: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(cls, subject_id: str, data: Any = None) -> "CredentialSubject":
        """Check *data* as claims about *subject_id* and wrap them.

        ``None`` and ``{}`` both mean no claims.

        Raises
        ------
        CredentialError
            If the subject is empty, the claims are not a mapping of
            non-empty string names, a claim is named ``id``, or a value is
            not JSON-serializable.
        """
        if not subject_id:
            raise CredentialError("Credential subject must not be empty.")
        claims = {} if data is None else data
        if not isinstance(claims, dict):
            raise CredentialError(
                f"Credential claims must be a mapping, got {type(claims).__name__}."
            )
        bad_names = [name for name in claims if not isinstance(name, str) or not name]
        if bad_names:
            raise CredentialError(f"Claim names must be non-empty strings, got {bad_names[0]!r}.")
        if "id" in claims:
            raise CredentialError("Claim name 'id' is reserved for the credential subject.")
        try:
            json.dumps(claims)
        except (TypeError, ValueError) as exc:
            raise CredentialError(f"Credential claims are not JSON-serializable: {exc}") from exc
        return cls(id=subject_id, claims=dict(claims))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CredentialSubject":
        """Split a W3C ``credentialSubject`` object into its ID and claims.

        Raises ``KeyError`` when ``id`` is absent and ``ValueError`` when it is
        not a non-empty string.
        """
        claims = dict(data)
        subject_id = claims.pop("id")
        if not isinstance(subject_id, str) or not subject_id:
            raise ValueError(f"credentialSubject.id must be a DID string, got {subject_id!r}.")
        return cls(id=subject_id, claims=claims)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.claims}


# ------------------------------------------------------------------
# VerifiableCredential (Pydantic v2)
# ------------------------------------------------------------------


class VerifiableCredential(BaseModel):
    """A W3C Verifiable Credential.

    Instances are frozen: once created, a credential cannot be changed, so
    the signed token always reflects the object it was produced from.

    Parameters
    ----------
    context:
        JSON-LD context URIs.
    id:
        Unique identifier for this credential (``urn:uuid:`` URI by default).
    type:
        Credential type list. Always includes ``"VerifiableCredential"``.
    issuer:
        DID of the issuer.
    issuance_date:
        UTC datetime when the credential was issued.
    expiration_date:
        Optional UTC datetime after which the credential is no longer valid.
    credential_subject:
        The subject and their claims.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    context: list[str] = Field(default_factory=lambda: [BASE_CONTEXT])
    id: str = Field(default_factory=lambda: f"urn:uuid:{uuid.uuid4()}")
    type: list[str] = Field(default_factory=lambda: [BASE_TYPE])
    issuer: str
    issuance_date: datetime
    expiration_date: datetime | None = None
    credential_subject: CredentialSubject

    @model_validator(mode="after")
    def _check_issuer_and_type(self) -> "VerifiableCredential":
        if not self.issuer:
            raise ValueError("A credential needs an issuer DID.")
        if not self.type or self.type[0] != BASE_TYPE:
            raise ValueError(f"Credential type must start with {BASE_TYPE!r}, got {self.type!r}.")
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        type: str,
        issuer: str,
        subject: str,
        data: dict[str, Any] | None = None,
        issuance_date: datetime | None = None,
        expiration_date: datetime | None = None,
    ) -> "VerifiableCredential":
        """Build a credential from structured claims.

        Parameters
        ----------
        type:
            Domain-specific credential type, appended after
            ``"VerifiableCredential"``.
        issuer:
            DID of the issuer.
        subject:
            DID of the subject.
        data:
            Claims about the subject. ``None`` and ``{}`` both produce a
            credential with no claims.
        issuance_date:
            Defaults to the current UTC time, truncated to whole seconds.
        expiration_date:
            Optional expiry. Must be later than ``issuance_date``.

        Raises
        ------
        CredentialError
            If any field is empty or the claims are malformed.
        """
        if not type:
            raise CredentialError("Credential type must not be empty.")
        if not issuer:
            raise CredentialError("Credential issuer must not be empty.")

        credential_subject = CredentialSubject.build(subject, data)

        issued = _normalize_date(issuance_date or datetime.now(timezone.utc))
        expires = _normalize_date(expiration_date) if expiration_date else None
        if expires is not None and expires <= issued:
            raise CredentialError(
                f"expiration_date {expires.isoformat()} must be after "
                f"issuance_date {issued.isoformat()}."
            )

        return cls(
            type=[BASE_TYPE, type] if type != BASE_TYPE else [BASE_TYPE],
            issuer=issuer,
            issuance_date=issued,
            expiration_date=expires,
            credential_subject=credential_subject,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def vc_type(self) -> str:
        """The most specific credential type."""
        return self.type[-1]

    @property
    def subject(self) -> str:
        return self.credential_subject.id

    @property
    def claims(self) -> dict[str, Any]:
        return dict(self.credential_subject.claims)

    def is_expired(self) -> bool:
        """Return ``True`` if the credential has passed its expiration date."""
        if self.expiration_date is None:
            return False
        return datetime.now(timezone.utc) > self.expiration_date

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    async def sign(self, did: BearerDid) -> str:
        """Sign the credential as a VC-JWT with the issuer's bearer DID.

        Raises
        ------
        SigningError
            If *did* is not the credential's issuer or the key is unusable.
        """
        if did.uri != self.issuer:
            raise SigningError(
                f"Bearer DID {did.uri!r} cannot sign a credential issued by {self.issuer!r}."
            )

        payload: dict[str, Any] = {
            "iss": self.issuer,
            "sub": self.subject,
            "jti": self.id,
            "nbf": int(self.issuance_date.timestamp()),
            "iat": int(time.time()),
            "vc": self.to_dict(),
        }
        if self.expiration_date is not None:
            payload["exp"] = int(self.expiration_date.timestamp())

        try:
            return sign_jwt(did, payload)
        except (JWException, ValueError) as exc:
            raise SigningError(f"Failed to sign credential {self.id!r}: {exc}") from exc

    # ------------------------------------------------------------------
    # Parsing and verification
    # ------------------------------------------------------------------

    @classmethod
    def parse_jwt(cls, vc_jwt: str) -> "VerifiableCredential":
        """Decode a VC-JWT into a credential without checking its signature.

        Raises
        ------
        CredentialParseError
            If the token is malformed or carries no ``vc`` claim.
        """
        try:
            decoded = decode_jwt(vc_jwt)
        except ValueError as exc:
            raise CredentialParseError(str(exc)) from exc
        return cls._from_payload(decoded.payload)

    @classmethod
    def verify(cls, vc_jwt: str) -> "VerifiableCredential":
        """Decode a VC-JWT and verify its signature and validity window.

        The signing key is resolved from the ``kid`` header, which must
        belong to the ``iss`` DID.

        Raises
        ------
        CredentialVerificationError
            If the signature, the issuer binding, or the validity window
            does not check out.
        """
        try:
            decoded = verify_jwt(vc_jwt)
        except ValueError as exc:
            raise CredentialVerificationError(str(exc)) from exc

        payload = decoded.payload
        kid_did = str(decoded.header.get("kid", "")).split("#", 1)[0]
        if kid_did != payload.get("iss"):
            raise CredentialVerificationError(
                f"Signing key {decoded.header.get('kid')!r} does not belong to "
                f"issuer {payload.get('iss')!r}."
            )

        try:
            credential = cls._from_payload(payload)
        except CredentialParseError as exc:
            raise CredentialVerificationError(str(exc)) from exc

        if credential.issuer != payload.get("iss"):
            raise CredentialVerificationError("vc.issuer does not match the 'iss' claim.")
        if credential.subject != payload.get("sub"):
            raise CredentialVerificationError("vc.credentialSubject.id does not match 'sub'.")

        expires = _numeric_claim(payload, "exp")
        not_before = _numeric_claim(payload, "nbf")
        _numeric_claim(payload, "iat")

        now = time.time()
        if expires is not None and now > expires:
            raise CredentialVerificationError(f"Credential {credential.id!r} has expired.")
        if not_before is not None and now < not_before:
            raise CredentialVerificationError(
                f"Credential {credential.id!r} is not valid yet."
            )
        return credential

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize using W3C VC Data Model field names."""
        data: dict[str, Any] = {
            "@context": list(self.context),
            "id": self.id,
            "type": list(self.type),
            "issuer": self.issuer,
            "issuanceDate": _format_date(self.issuance_date),
            "credentialSubject": self.credential_subject.to_dict(),
        }
        if self.expiration_date is not None:
            data["expirationDate"] = _format_date(self.expiration_date)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VerifiableCredential":
        """Reconstruct a credential from its W3C JSON form.

        Raises
        ------
        CredentialParseError
            If required fields are missing or invalid.
        """
        try:
            subject = CredentialSubject.from_dict(data["credentialSubject"])
            expiration_raw = data.get("expirationDate")
            return cls(
                context=data.get("@context", [BASE_CONTEXT]),
                id=data["id"],
                type=data.get("type", [BASE_TYPE]),
                issuer=data["issuer"],
                issuance_date=_parse_date(data["issuanceDate"]),
                expiration_date=_parse_date(expiration_raw) if expiration_raw else None,
                credential_subject=subject,
            )
        except KeyError as exc:
            raise CredentialParseError(f"Credential is missing required field {exc}.") from exc
        except (AttributeError, TypeError, ValueError, ValidationError) as exc:
            raise CredentialParseError(f"Invalid credential data: {exc}") from exc

    @classmethod
    def _from_payload(cls, payload: dict[str, Any]) -> "VerifiableCredential":
        vc_data = payload.get("vc")
        if not isinstance(vc_data, dict):
            raise CredentialParseError("JWT payload has no 'vc' object.")
        return cls.from_dict(vc_data)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _numeric_claim(payload: dict[str, Any], name: str) -> float | None:
    """Return the NumericDate claim *name*, or ``None`` when absent."""
    if name not in payload:
        return None
    value = payload[name]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CredentialVerificationError(
            f"JWT claim {name!r} must be a NumericDate, got {value!r}."
        )
    return value


def _normalize_date(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0)


def _format_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_date(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = [
    "BASE_CONTEXT",
    "BASE_TYPE",
    "CredentialSubject",
    "VerifiableCredential",
]
