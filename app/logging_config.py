"""Logging setup and secret redaction."""

from __future__ import annotations

import logging
import re

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "survey-desk"


class SecretRedactionFilter(logging.Filter):
    """Mask credentials that end up in rendered log messages.

    Covers bearer tokens, passwords, API keys, secrets and the session
    cookies issued by this service.
    """

    REDACTION_PATTERNS = [
        (re.compile(r"(?i)(bearer\s+)([^\s,;\"']+)"), r"\1[REDACTED]"),
        (
            re.compile(r"(?i)(password\s*[=:]\s*)([^\s,;\"']+)"),
            r"\1[REDACTED]",
        ),
        (
            re.compile(r"(?i)(api[_-]?key\s*[=:]\s*)([^\s,;\"']+)"),
            r"\1[REDACTED]",
        ),
        (
            re.compile(r"(?i)(secret(?:[_-]?key)?\s*[=:]\s*)([^\s,;\"']+)"),
            r"\1[REDACTED]",
        ),
        (re.compile(r"(?i)(session\s*=\s*)([^\s,;\"']+)"), r"\1[REDACTED]"),
        # Compact JWS: three base64url segments.
        (
            re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
            "[REDACTED_JWT]",
        ),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact the rendered message in place.

        Parameters
        ----------
        record : logging.LogRecord
            Record about to be emitted.

        Returns
        -------
        bool
            Always ``True``; records are rewritten, never dropped.
        """
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        """Return ``text`` with known secret shapes masked.

        Parameters
        ----------
        text : str
            Text to scrub.

        Returns
        -------
        str
            Scrubbed text.
        """
        for pattern, replacement in cls.REDACTION_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


def configure_logging(level: str = "INFO") -> None:
    """Attach a redacting stream handler to the ``app`` logger.

    Safe to call more than once; the handler is installed a single time.

    Parameters
    ----------
    level : str, default="INFO"
        Log level name.

    Returns
    -------
    None
        Configures logging in place.
    """
    logger = logging.getLogger("app")
    logger.setLevel(level.upper())
    if any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        return
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SecretRedactionFilter())
    logger.addHandler(handler)
