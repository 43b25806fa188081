from enum import Enum
from typing import Dict, Optional


class ErrorCode(str, Enum):
    # Client caused (400)
    MISSING_FIELDS = "missing_fields"
    INVALID_EMAIL = "invalid_email"
    SPAM = "spam"  # Same shape as a validation error so bots learn nothing
    INVALID_BODY = "invalid_body"
    PAYLOAD_TOO_LARGE = "payload_too_large"  # 413
    ORIGIN_NOT_ALLOWED = "origin_not_allowed"  # 403
    RATE_LIMITED = "rate_limited"  # 429

    # Server side (500), details only ever go to the log
    SERVER_MISCONFIGURED = "server_misconfigured"
    FAILED_TO_SEND = "failed_to_send"
    INTERNAL_ERROR = "internal_error"


class ContactAPIError(Exception):
    """Terminal request error, rendered as {"error": code} by the exception handler."""

    def __init__(self, code: ErrorCode, status_code: int, headers: Optional[Dict[str, str]] = None):
        super().__init__(code.value)
        self.code = code
        self.status_code = status_code
        self.headers = headers

    def to_response(self) -> Dict[str, str]:
        return {"error": self.code.value}


class MailConfigurationError(Exception):
    """SMTP settings are incomplete or invalid."""


class MailDispatchError(Exception):
    """The relay did not accept the message. The cause is chained, never shown to clients."""
