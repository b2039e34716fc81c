"""BearerDid — a DID together with the key material that can sign for it.

A :class:`BearerDid` is the identity handle the agent hands out for a DID it
manages. Holding one grants signing rights for the identifier. The private
key never leaves the object except through :meth:`BearerDid.export`, which
the identity vault uses to seal it.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from jwcrypto import jwk
from jwcrypto.common import base64url_encode
from pydantic import BaseModel


class PortableDid(BaseModel):
    """Serializable form of a bearer DID, including its private key.

    Only ever persisted in encrypted form by
    :class:`~did_quickstart.identity.vault.IdentityVault`.
    """

    uri: str
    key_id: str
    public_key_hex: str
    private_key_hex: str


@dataclass
class BearerDid:
    """An identifier plus the Ed25519 keypair that controls it.

    Parameters
    ----------
    uri:
        The DID string, e.g. ``did:key:z6Mk...``.
    key_id:
        Fully qualified verification method ID (``<uri>#<fragment>``).
        Used as the JOSE ``kid`` header on everything this DID signs.
    public_key:
        32-byte raw Ed25519 public key.
    private_key:
        32-byte raw Ed25519 private key.
    """

    uri: str
    key_id: str
    public_key: bytes
    private_key: bytes = field(repr=False)

    def to_jwk(self) -> jwk.JWK:
        """Return the private signing key as a jwcrypto :class:`JWK`."""
        return jwk.JWK(
            kty="OKP",
            crv="Ed25519",
            x=base64url_encode(self.public_key),
            d=base64url_encode(self.private_key),
            kid=self.key_id,
        )

    def public_jwk(self) -> jwk.JWK:
        return public_key_to_jwk(self.public_key, self.key_id)

    def export(self) -> PortableDid:
        return PortableDid(
            uri=self.uri,
            key_id=self.key_id,
            public_key_hex=self.public_key.hex(),
            private_key_hex=self.private_key.hex(),
        )

    @classmethod
    def from_portable(cls, portable: PortableDid) -> "BearerDid":
        return cls(
            uri=portable.uri,
            key_id=portable.key_id,
            public_key=bytes.fromhex(portable.public_key_hex),
            private_key=bytes.fromhex(portable.private_key_hex),
        )


def public_key_to_jwk(public_key: bytes, key_id: str | None = None) -> jwk.JWK:
    """Wrap a raw Ed25519 public key in a jwcrypto :class:`JWK`."""
    params: dict[str, str] = {
        "kty": "OKP",
        "crv": "Ed25519",
        "x": base64url_encode(public_key),
    }
    if key_id is not None:
        params["kid"] = key_id
    return jwk.JWK(**params)


__all__ = ["BearerDid", "PortableDid", "public_key_to_jwk"]
