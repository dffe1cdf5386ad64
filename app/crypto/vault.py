"""Authenticated encryption for third-party API keys."""

from __future__ import annotations

import base64
import binascii
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.errors import ConfigurationError, DecryptionError

KEY_LENGTH = 32  # AES-256
NONCE_LENGTH = 12  # 96-bit
TAG_LENGTH = 16  # 128-bit


@dataclass(frozen=True, slots=True)
class EncryptedSecret:
    """One AES-GCM encrypted value, each part base64 encoded.

    The three parts only make sense together and must be persisted as a unit.
    """

    ciphertext: str
    nonce: str
    tag: str


class CredentialVault:
    """Encrypt and decrypt secrets with a single AES-256-GCM key.

    Parameters
    ----------
    key : bytes
        Raw 32-byte key.
    """

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_LENGTH:
            raise ConfigurationError(
                f"Encryption key must be {KEY_LENGTH} bytes (found {len(key)})"
            )
        self._aead = AESGCM(key)

    @classmethod
    def from_encoded(cls, encoded_key: str | None) -> "CredentialVault":
        """Build a vault from the configured base64 key text.

        Parameters
        ----------
        encoded_key : str | None
            Base64 text decoding to exactly 32 bytes.

        Returns
        -------
        CredentialVault
            Vault bound to the decoded key.
        """
        if not encoded_key:
            raise ConfigurationError("Encryption key is not configured")
        try:
            key = base64.b64decode(encoded_key, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ConfigurationError(
                "Encryption key must be base64 text representing 32 bytes"
            ) from exc
        return cls(key)

    def encrypt(self, plaintext: str) -> EncryptedSecret:
        """Encrypt a secret under a fresh random nonce.

        Parameters
        ----------
        plaintext : str
            Secret value to encrypt.

        Returns
        -------
        EncryptedSecret
            Ciphertext, nonce and authentication tag.
        """
        nonce = os.urandom(NONCE_LENGTH)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return EncryptedSecret(
            ciphertext=_b64(ciphertext),
            nonce=_b64(nonce),
            tag=_b64(tag),
        )

    def decrypt(self, encrypted: EncryptedSecret) -> str:
        """Decrypt and authenticate a stored secret.

        Parameters
        ----------
        encrypted : EncryptedSecret
            Value produced by :meth:`encrypt`.

        Returns
        -------
        str
            Original plaintext.
        """
        try:
            ciphertext = _unb64(encrypted.ciphertext)
            nonce = _unb64(encrypted.nonce)
            tag = _unb64(encrypted.tag)
        except (binascii.Error, ValueError) as exc:
            raise DecryptionError("Encrypted secret is not valid base64") from exc
        if len(nonce) != NONCE_LENGTH or len(tag) != TAG_LENGTH:
            raise DecryptionError("Encrypted secret has malformed nonce or tag")
        try:
            plaintext = self._aead.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as exc:
            raise DecryptionError("Encrypted secret failed authentication") from exc
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError("Decrypted secret is not UTF-8") from exc


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.b64decode(text, validate=True)
