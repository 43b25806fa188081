from pydantic import BaseModel, Field

from contact_api.commonUtils.errorUtil import ErrorCode
from contact_api.commonUtils.sanitizeUtil import EMAIL_MAX_LENGTH, MESSAGE_MAX_LENGTH, NAME_MAX_LENGTH


class ContactSubmission(BaseModel):
    """Sanitized contact form submission. Lives for one request only."""
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Sender's name")
    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LENGTH, description="Sender's address, used as Reply-To")
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH, description="Message body")


class ContactOk(BaseModel):
    ok: bool = True


class ContactErrorResponse(BaseModel):
    error: ErrorCode
