"""Per-user encrypted provider credentials."""

import enum
import uuid

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.crypto.vault import EncryptedSecret
from app.database import Base
from app.models.mixins import TimestampMixin, uuid_column


class Integration(str, enum.Enum):
    """Third-party integrations that take a per-user API key."""

    TALLY = "tally"
    OPENAI = "openai"


class ApiCredential(TimestampMixin, Base):
    """Encrypted API key slots for one user.

    Each integration owns three columns that are written and cleared together.
    """

    __tablename__ = "api_credentials"

    id: Mapped[uuid.UUID] = uuid_column()
    user_email: Mapped[str] = mapped_column(String(320), unique=True)
    tally_cipher: Mapped[str | None] = mapped_column(Text, nullable=True)
    tally_iv: Mapped[str | None] = mapped_column(String(32), nullable=True)
    tally_tag: Mapped[str | None] = mapped_column(String(32), nullable=True)
    openai_cipher: Mapped[str | None] = mapped_column(Text, nullable=True)
    openai_iv: Mapped[str | None] = mapped_column(String(32), nullable=True)
    openai_tag: Mapped[str | None] = mapped_column(String(32), nullable=True)

    def get_secret(self, integration: Integration) -> EncryptedSecret | None:
        """Return the stored secret for an integration.

        Parameters
        ----------
        integration : Integration
            Integration slot to read.

        Returns
        -------
        EncryptedSecret | None
            Stored secret, or ``None`` unless all three parts are present.
        """
        prefix = integration.value
        ciphertext = getattr(self, f"{prefix}_cipher")
        nonce = getattr(self, f"{prefix}_iv")
        tag = getattr(self, f"{prefix}_tag")
        if not (ciphertext and nonce and tag):
            return None
        return EncryptedSecret(ciphertext=ciphertext, nonce=nonce, tag=tag)

    def set_secret(
        self, integration: Integration, secret: EncryptedSecret | None
    ) -> None:
        """Write or clear the slot for an integration.

        Parameters
        ----------
        integration : Integration
            Integration slot to write.
        secret : EncryptedSecret | None
            New secret, or ``None`` to clear all three columns.

        Returns
        -------
        None
            Mutates the row in place.
        """
        prefix = integration.value
        setattr(self, f"{prefix}_cipher", secret.ciphertext if secret else None)
        setattr(self, f"{prefix}_iv", secret.nonce if secret else None)
        setattr(self, f"{prefix}_tag", secret.tag if secret else None)
