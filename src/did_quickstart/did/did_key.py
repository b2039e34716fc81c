"""did:key — create and resolve self-certifying identifiers.

Implements the ``did:key`` DID method as specified in:
https://w3c-ccg.github.io/did-method-key/

did:key encoding
----------------
1. Generate an Ed25519 public key (32 raw bytes).
2. Prepend the Ed25519 multicodec prefix: ``0xed 0x01`` (2 bytes).
3. Encode the 34-byte result with base58btc.
4. Prefix the encoded string with ``z`` (the multibase indicator for base58btc).
5. Assemble: ``did:key:z<base58btc-encoded>``.

The public key is recoverable from the DID string alone, so resolution
needs no registry and no network.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from did_quickstart.did.bearer import BearerDid, public_key_to_jwk
from did_quickstart.errors import DidResolutionError

if TYPE_CHECKING:
    from did_quickstart.crypto.provider import CryptoProvider

DID_KEY_PREFIX: str = "did:key:z"

# Multicodec prefix for Ed25519 public keys (varint-encoded 0xed01)
_ED25519_MULTICODEC_PREFIX: bytes = b"\xed\x01"
_ED25519_KEY_SIZE: int = 32

_BASE58_ALPHABET: str = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX: dict[str, int] = {char: index for index, char in enumerate(_BASE58_ALPHABET)}


# ---------------------------------------------------------------------------
# Base58btc codec
# ---------------------------------------------------------------------------


def base58btc_encode(data: bytes) -> str:
    """Encode *data* as base58btc. Each leading zero byte becomes a ``1``."""
    digits: list[int] = []  # base-58 digits, least significant first
    for byte in data:
        carry = byte
        for position, digit in enumerate(digits):
            carry += digit << 8
            digits[position], carry = carry % 58, carry // 58
        while carry:
            digits.append(carry % 58)
            carry //= 58
    zeros = next((i for i, byte in enumerate(data) if byte), len(data))
    return _BASE58_ALPHABET[0] * zeros + "".join(_BASE58_ALPHABET[d] for d in reversed(digits))


def base58btc_decode(encoded: str) -> bytes:
    """Decode a base58btc string back to bytes.

    Raises
    ------
    ValueError
        If the string contains a character not in the base58btc alphabet.
    """
    out: list[int] = []  # bytes, least significant first
    for char in encoded:
        carry = _BASE58_INDEX.get(char)
        if carry is None:
            raise ValueError(
                f"Invalid base58btc character {char!r} in encoded string {encoded!r}"
            )
        for position, byte in enumerate(out):
            carry += byte * 58
            out[position], carry = carry & 0xFF, carry >> 8
        while carry:
            out.append(carry & 0xFF)
            carry >>= 8
    zeros = next((i for i, char in enumerate(encoded) if char != _BASE58_ALPHABET[0]), len(encoded))
    return bytes(zeros) + bytes(reversed(out))


# ---------------------------------------------------------------------------
# DID documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DidDocument:
    """Resolved form of a ``did:key`` identifier.

    Parameters
    ----------
    id:
        The DID string.
    key_id:
        ID of the single verification method (``<did>#<fragment>``).
    public_key:
        The 32-byte raw Ed25519 public key decoded from the DID.
    """

    id: str
    key_id: str
    public_key: bytes

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a W3C DID Core document."""
        public_jwk = public_key_to_jwk(self.public_key).export_public(as_dict=True)
        return {
            "@context": [
                "https://www.w3.org/ns/did/v1",
                "https://w3id.org/security/suites/jws-2020/v1",
            ],
            "id": self.id,
            "verificationMethod": [
                {
                    "id": self.key_id,
                    "type": "JsonWebKey2020",
                    "controller": self.id,
                    "publicKeyJwk": public_jwk,
                }
            ],
            "authentication": [self.key_id],
            "assertionMethod": [self.key_id],
        }


# ---------------------------------------------------------------------------
# Create / resolve
# ---------------------------------------------------------------------------


def public_key_to_did(public_key_bytes: bytes) -> str:
    """Encode a raw Ed25519 public key as a ``did:key`` DID."""
    encoded = base58btc_encode(_ED25519_MULTICODEC_PREFIX + public_key_bytes)
    return f"{DID_KEY_PREFIX}{encoded}"


def key_id_for(did_uri: str) -> str:
    """Return the verification method ID for a ``did:key`` DID."""
    return f"{did_uri}#{did_uri[len('did:key:'):]}"


def create_did(crypto: "CryptoProvider") -> BearerDid:
    """Generate a fresh keypair and return the bearer DID it controls."""
    private_bytes, public_bytes = crypto.generate_keypair()
    uri = public_key_to_did(public_bytes)
    return BearerDid(
        uri=uri,
        key_id=key_id_for(uri),
        public_key=public_bytes,
        private_key=private_bytes,
    )


def resolve_did(did_uri: str) -> DidDocument:
    """Resolve a ``did:key`` DID (or DID URL) to its document.

    A fragment such as ``#z6Mk...`` is accepted and ignored.

    Raises
    ------
    DidResolutionError
        If the DID is malformed, is not base58btc, or does not carry an
        Ed25519 multicodec key.
    """
    did = did_uri.split("#", 1)[0]
    if not did.startswith(DID_KEY_PREFIX) or len(did) == len(DID_KEY_PREFIX):
        raise DidResolutionError(
            f"Invalid did:key format: {did_uri!r}. "
            "Expected format: did:key:z<base58btc-encoded-public-key>"
        )
    try:
        decoded = base58btc_decode(did[len(DID_KEY_PREFIX):])
    except ValueError as exc:
        raise DidResolutionError(str(exc)) from exc

    if not decoded.startswith(_ED25519_MULTICODEC_PREFIX):
        raise DidResolutionError(
            f"Unsupported multicodec prefix 0x{decoded[:2].hex()} in DID {did!r}. "
            "Only Ed25519 (0xed01) keys are supported."
        )
    public_bytes = decoded[len(_ED25519_MULTICODEC_PREFIX):]
    if len(public_bytes) != _ED25519_KEY_SIZE:
        raise DidResolutionError(
            f"DID {did!r} encodes a {len(public_bytes)}-byte key; expected 32 bytes."
        )
    return DidDocument(id=did, key_id=key_id_for(did), public_key=public_bytes)


__all__ = [
    "DID_KEY_PREFIX",
    "DidDocument",
    "base58btc_decode",
    "base58btc_encode",
    "create_did",
    "key_id_for",
    "public_key_to_did",
    "resolve_did",
]
