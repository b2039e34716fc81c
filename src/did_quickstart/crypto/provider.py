"""CryptoProvider — Ed25519 key generation, randomness, and password sealing.

A thin wrapper around the ``cryptography`` package. Key material is handled
as raw bytes so callers can store or transmit keys without depending on
this module's internal types.

The provider is passed explicitly to everything that needs cryptography
(DID creation and the identity vault). Nothing in
this package installs a provider into global state.
"""
from __future__ import annotations

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from did_quickstart.errors import InvalidPasswordError

_NONCE_SIZE: int = 12
_KEY_SIZE: int = 32


class CryptoProvider:
    """Ed25519 key generation plus scrypt / ChaCha20-Poly1305 sealing.

    Parameters
    ----------
    scrypt_n:
        scrypt CPU/memory cost parameter. Must be a power of two.

    Example
    -------
    ::

        crypto = CryptoProvider()
        private_bytes, public_bytes = crypto.generate_keypair()
        key = crypto.derive_key("correct horse", crypto.random_bytes(16))
        assert crypto.decrypt(key, crypto.encrypt(key, b"secret")) == b"secret"
    """

    def __init__(self, scrypt_n: int = 2**14) -> None:
        self._scrypt_n = scrypt_n

    # ------------------------------------------------------------------
    # Ed25519
    # ------------------------------------------------------------------

    def generate_keypair(self) -> tuple[bytes, bytes]:
        """Generate a new Ed25519 keypair.

        Returns
        -------
        tuple[bytes, bytes]
            A ``(private_key_bytes, public_key_bytes)`` pair. Both are
            32-byte raw representations.
        """
        private_key = Ed25519PrivateKey.generate()
        private_bytes = private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        )
        public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return private_bytes, public_bytes

    # ------------------------------------------------------------------
    # Randomness and sealing
    # ------------------------------------------------------------------

    def random_bytes(self, size: int) -> bytes:
        return os.urandom(size)

    def derive_key(self, password: str, salt: bytes) -> bytes:
        """Derive a 32-byte symmetric key from *password* with scrypt."""
        kdf = Scrypt(salt=salt, length=_KEY_SIZE, n=self._scrypt_n, r=8, p=1)
        return kdf.derive(password.encode("utf-8"))

    def encrypt(self, key: bytes, plaintext: bytes) -> bytes:
        """Seal *plaintext* with ChaCha20-Poly1305. The nonce is prepended."""
        nonce = self.random_bytes(_NONCE_SIZE)
        return nonce + ChaCha20Poly1305(key).encrypt(nonce, plaintext, None)

    def decrypt(self, key: bytes, blob: bytes) -> bytes:
        """Open a blob produced by :meth:`encrypt`.

        Raises
        ------
        InvalidPasswordError
            If the key does not authenticate the ciphertext.
        """
        nonce, ciphertext = blob[:_NONCE_SIZE], blob[_NONCE_SIZE:]
        try:
            return ChaCha20Poly1305(key).decrypt(nonce, ciphertext, None)
        except InvalidTag as exc:
            raise InvalidPasswordError() from exc


__all__ = ["CryptoProvider"]
