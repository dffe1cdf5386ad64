"""Credential vault tests."""

import base64

import pytest

from app.crypto.vault import NONCE_LENGTH, TAG_LENGTH, CredentialVault, EncryptedSecret
from app.errors import ConfigurationError, DecryptionError
from app.models.credential import Integration
from app.services.vault import decrypt_secret, describe_secret, encrypt_secret

KEY = bytes(range(32))


def _flip_bit(encoded: str, index: int = 0, bit: int = 0) -> str:
    raw = bytearray(base64.b64decode(encoded))
    raw[index] ^= 1 << bit
    return base64.b64encode(bytes(raw)).decode("ascii")


class TestRoundTrip:
    """Encrypt/decrypt behavior."""

    @pytest.mark.parametrize(
        "plaintext",
        ["tly-abc123", "", "sk-ümlaut-密钥-🔑", "x" * 4096],
    )
    def test_decrypt_returns_original(self, plaintext: str) -> None:
        """Return the exact plaintext, including empty and multi-byte text.

        Parameters
        ----------
        plaintext : str
            Value to round-trip.

        Returns
        -------
        None
            Asserts byte-for-byte equality.
        """
        vault = CredentialVault(KEY)
        assert vault.decrypt(vault.encrypt(plaintext)) == plaintext

    def test_parts_have_expected_sizes(self) -> None:
        """Produce a 96-bit nonce and a 128-bit tag."""
        encrypted = CredentialVault(KEY).encrypt("tly-abc123")

        assert len(base64.b64decode(encrypted.nonce)) == NONCE_LENGTH
        assert len(base64.b64decode(encrypted.tag)) == TAG_LENGTH
        assert len(base64.b64decode(encrypted.ciphertext)) == len("tly-abc123")

    def test_same_plaintext_encrypts_differently(self) -> None:
        """Use a fresh nonce for every encryption.

        Returns
        -------
        None
            Asserts nonces and ciphertexts differ.
        """
        vault = CredentialVault(KEY)
        first = vault.encrypt("sk-same")
        second = vault.encrypt("sk-same")

        assert first != second
        assert first.nonce != second.nonce
        assert first.ciphertext != second.ciphertext

    def test_ciphertext_does_not_contain_plaintext(self) -> None:
        """Never store the key in the clear."""
        encrypted = CredentialVault(KEY).encrypt("sk-live-visible")

        assert "sk-live-visible" not in encrypted.ciphertext
        assert b"sk-live-visible" not in base64.b64decode(encrypted.ciphertext)


class TestTamperDetection:
    """Authentication-tag enforcement."""

    @pytest.mark.parametrize("field", ["ciphertext", "nonce", "tag"])
    @pytest.mark.parametrize("bit", [0, 7])
    def test_single_bit_flip_is_rejected(self, field: str, bit: int) -> None:
        """Reject a single flipped bit in any component.

        Parameters
        ----------
        field : str
            Component to corrupt.
        bit : int
            Bit position flipped in the first byte.

        Returns
        -------
        None
            Asserts ``DecryptionError``.
        """
        vault = CredentialVault(KEY)
        encrypted = vault.encrypt("tly-abc123")
        tampered = EncryptedSecret(
            **{
                "ciphertext": encrypted.ciphertext,
                "nonce": encrypted.nonce,
                "tag": encrypted.tag,
                field: _flip_bit(getattr(encrypted, field), bit=bit),
            }
        )

        with pytest.raises(DecryptionError):
            vault.decrypt(tampered)

    def test_wrong_key_is_rejected(self) -> None:
        """Reject ciphertext produced under another key."""
        encrypted = CredentialVault(KEY).encrypt("tly-abc123")

        with pytest.raises(DecryptionError):
            CredentialVault(bytes(32)).decrypt(encrypted)

    def test_malformed_base64_is_rejected(self) -> None:
        """Report undecodable parts as decryption failures."""
        encrypted = CredentialVault(KEY).encrypt("tly-abc123")

        with pytest.raises(DecryptionError):
            CredentialVault(KEY).decrypt(
                EncryptedSecret(
                    ciphertext="not base64!",
                    nonce=encrypted.nonce,
                    tag=encrypted.tag,
                )
            )

    def test_truncated_tag_is_rejected(self) -> None:
        """Reject a tag shorter than 128 bits."""
        vault = CredentialVault(KEY)
        encrypted = vault.encrypt("tly-abc123")
        short_tag = base64.b64encode(base64.b64decode(encrypted.tag)[:12]).decode()

        with pytest.raises(DecryptionError):
            vault.decrypt(
                EncryptedSecret(
                    ciphertext=encrypted.ciphertext,
                    nonce=encrypted.nonce,
                    tag=short_tag,
                )
            )


class TestKeyConfiguration:
    """Key material validation."""

    def test_missing_key_is_configuration_error(self) -> None:
        """Refuse to build a vault without a key."""
        with pytest.raises(ConfigurationError):
            CredentialVault.from_encoded(None)

    @pytest.mark.parametrize(
        "encoded",
        [
            base64.b64encode(bytes(16)).decode(),
            base64.b64encode(bytes(33)).decode(),
            "%%% not base64 %%%",
        ],
    )
    def test_bad_key_is_configuration_error(self, encoded: str) -> None:
        """Require base64 text decoding to exactly 32 bytes.

        Parameters
        ----------
        encoded : str
            Invalid configured key.

        Returns
        -------
        None
            Asserts ``ConfigurationError``.
        """
        with pytest.raises(ConfigurationError):
            CredentialVault.from_encoded(encoded)

    def test_service_uses_configured_key(self) -> None:
        """Round-trip through the settings-bound vault."""
        assert decrypt_secret(encrypt_secret("tly-service")) == "tly-service"

    def test_service_without_key_raises_configuration_error(
        self, monkeypatch: pytest.MonkeyPatch, reset_caches
    ) -> None:
        """Surface a missing key as ``ConfigurationError``.

        Parameters
        ----------
        monkeypatch : pytest.MonkeyPatch
            Environment monkeypatch helper.
        reset_caches : Callable[[], None]
            Cache reset helper.

        Returns
        -------
        None
            Asserts configuration failure on encrypt and decrypt.
        """
        encrypted = encrypt_secret("tly-service")
        monkeypatch.delenv("SURVEY_DESK_ENCRYPTION_KEY")
        reset_caches()

        with pytest.raises(ConfigurationError):
            encrypt_secret("tly-service")
        with pytest.raises(ConfigurationError):
            decrypt_secret(encrypted)


class TestDescribeSecret:
    """Masked status reporting."""

    def test_present_secret_reports_last_four(self) -> None:
        """Expose only the last four characters."""
        status = describe_secret(
            encrypt_secret("tly-abcd1234"), integration=Integration.TALLY
        )

        assert status.present is True
        assert status.last4 == "1234"

    def test_undecryptable_secret_reports_absent(self) -> None:
        """Treat a tampered secret as absent instead of failing."""
        encrypted = encrypt_secret("tly-abcd1234")
        tampered = EncryptedSecret(
            ciphertext=_flip_bit(encrypted.ciphertext),
            nonce=encrypted.nonce,
            tag=encrypted.tag,
        )

        status = describe_secret(tampered, integration=Integration.TALLY)

        assert status.present is False
        assert status.last4 is None

    def test_missing_secret_reports_absent(self) -> None:
        """Report absent when nothing is stored."""
        assert describe_secret(None, integration=Integration.OPENAI).present is False
