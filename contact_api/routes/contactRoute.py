import html
import json
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError, validate_email

from contact_api.commonUtils.email_renderer import get_email_renderer
from contact_api.commonUtils.emailUtil import MailTransport
from contact_api.commonUtils.errorUtil import ContactAPIError, ErrorCode, MailDispatchError
from contact_api.commonUtils.sanitizeUtil import EMAIL_MAX_LENGTH, MESSAGE_MAX_LENGTH, NAME_MAX_LENGTH, sanitize
from contact_api.config.settings import Settings
from contact_api.dependencies.contactDependencies import get_app_settings, get_mail_transport
from contact_api.schemas.contactSchema import ContactErrorResponse, ContactOk, ContactSubmission
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REQUIRED_FIELDS = ("name", "email", "message")
HONEYPOT_FIELD = "_hp"


def _bad_request(code: ErrorCode) -> ContactAPIError:
    return ContactAPIError(code, status.HTTP_400_BAD_REQUEST)


async def read_contact_payload(request: Request, max_body_bytes: int) -> Dict[str, Any]:
    """
    Parse a JSON or urlencoded body into a dict. Other content types and
    non-object JSON documents yield an empty payload.
    """
    body = await request.body()
    if len(body) > max_body_bytes:
        raise ContactAPIError(ErrorCode.PAYLOAD_TOO_LARGE, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
    if not body:
        return {}

    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)

    if "json" in content_type:
        try:
            payload = json.loads(body)
        except ValueError:
            raise _bad_request(ErrorCode.INVALID_BODY)
        return payload if isinstance(payload, dict) else {}

    return {}


def check_email(value: Any) -> str:
    """
    Return the trimmed address to use as Reply-To, or reject it as invalid_email.

    The address must match EMAIL_PATTERN and also pass email-validator, which
    fastapi-mail applies to Reply-To when the message is built.
    """
    address = str(value).strip()
    if len(address) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(address):
        raise _bad_request(ErrorCode.INVALID_EMAIL)
    try:
        validate_email(address)
    except ValueError:
        raise _bad_request(ErrorCode.INVALID_EMAIL)
    return address


def build_submission(payload: Dict[str, Any]) -> ContactSubmission:
    """Sanitize and bound the three fields. A field that sanitizes to nothing counts as missing."""
    try:
        return ContactSubmission(
            name=sanitize(payload["name"], NAME_MAX_LENGTH),
            email=sanitize(payload["email"], EMAIL_MAX_LENGTH),
            message=sanitize(payload["message"], MESSAGE_MAX_LENGTH),
        )
    except ValidationError:
        raise _bad_request(ErrorCode.MISSING_FIELDS)


def build_subject(brand_name: str, name: str) -> str:
    # Plain text header: undo entity escaping, fold newlines
    return " ".join(f"{brand_name} contact from {html.unescape(name)}".split())


@router.post(
    "/contact",
    response_model=ContactOk,
    responses={
        400: {"model": ContactErrorResponse},
        413: {"model": ContactErrorResponse},
        429: {"model": ContactErrorResponse},
        500: {"model": ContactErrorResponse},
    },
)
async def submit_contact(
        request: Request,
        app_settings: Settings = Depends(get_app_settings),
        transport: Optional[MailTransport] = Depends(get_mail_transport),
):
    """
    Validate a contact form submission and relay it to the site owner by email.
    """
    payload = await read_contact_payload(request, app_settings.MAX_BODY_BYTES)

    # Honeypot spam trap, checked before anything else
    if payload.get(HONEYPOT_FIELD):
        logger.info("Honeypot field filled, dropping submission")
        raise _bad_request(ErrorCode.SPAM)

    if any(not payload.get(field) for field in REQUIRED_FIELDS):
        raise _bad_request(ErrorCode.MISSING_FIELDS)

    reply_to = check_email(payload["email"])

    submission = build_submission(payload)

    if transport is None:
        logger.error("Transporter not ready, check SMTP settings")
        raise ContactAPIError(ErrorCode.SERVER_MISCONFIGURED, status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        html_body = get_email_renderer(app_settings.BRAND_NAME).contact_submission_email(
            name=submission.name,
            email=submission.email,
            message=submission.message,
        )
        await transport.dispatch(
            from_address=app_settings.sender_email,
            to_address=app_settings.RECEIVER_EMAIL,
            reply_to=reply_to,
            subject=build_subject(app_settings.BRAND_NAME, submission.name),
            html_body=html_body,
        )
    except MailDispatchError as e:
        raise ContactAPIError(ErrorCode.FAILED_TO_SEND, status.HTTP_500_INTERNAL_SERVER_ERROR) from e
    except Exception as e:
        logger.error(f"Contact send failed: {str(e)}", exc_info=True)
        raise ContactAPIError(ErrorCode.FAILED_TO_SEND, status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    return ContactOk()
