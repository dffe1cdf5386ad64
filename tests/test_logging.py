"""Logging configuration tests."""

import logging

import pytest

from app.logging_config import SecretRedactionFilter, configure_logging
from app.models.user import Role
from app.services.session import Identity, SessionAuthority


@pytest.mark.parametrize(
    ("message", "secret"),
    [
        ("Authorization: Bearer tly-abc123", "tly-abc123"),
        ("login password=hunter2 rejected", "hunter2"),
        ("api_key: sk-live-0001", "sk-live-0001"),
        ("secret_key=abcdef", "abcdef"),
        ("Cookie: session=opaque-value", "opaque-value"),
    ],
)
def test_redact_masks_known_secret_shapes(message: str, secret: str) -> None:
    """Mask credentials in rendered messages.

    Parameters
    ----------
    message : str
        Log message containing a secret.
    secret : str
        Value that must not survive.

    Returns
    -------
    None
        Asserts the secret is gone.
    """
    redacted = SecretRedactionFilter.redact(message)

    assert secret not in redacted
    assert "[REDACTED]" in redacted


def test_redact_masks_session_tokens() -> None:
    token = SessionAuthority(b"logging-test-secret-0123456789abcdef").issue(
        Identity(subject_id="user-1", email="alice@example.com", role=Role.USER)
    )

    redacted = SecretRedactionFilter.redact(f"issued {token} to alice")

    assert token not in redacted
    assert "[REDACTED_JWT]" in redacted


def test_filter_rewrites_formatted_record() -> None:
    """Redact values passed as formatting arguments."""
    record = logging.LogRecord(
        name="app.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="calling with %s",
        args=("Bearer tly-abc123",),
        exc_info=None,
    )

    assert SecretRedactionFilter().filter(record) is True
    assert record.getMessage() == "calling with Bearer [REDACTED]"


def test_configure_logging_is_idempotent() -> None:
    """Install the redacting handler once."""
    configure_logging("DEBUG")
    configure_logging("INFO")

    logger = logging.getLogger("app")
    handlers = [h for h in logger.handlers if h.get_name() == "survey-desk"]

    assert len(handlers) == 1
    assert logger.level == logging.INFO
    assert any(isinstance(f, SecretRedactionFilter) for f in handlers[0].filters)
