from typing import Optional

from fastapi import Depends, Request, status

from contact_api.commonUtils.emailUtil import MailTransport
from contact_api.commonUtils.errorUtil import ContactAPIError, ErrorCode
from contact_api.commonUtils.rateLimiter import RateLimiter, RateLimitExceeded
from contact_api.config.settings import Settings
import logging

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_mail_transport(request: Request) -> Optional[MailTransport]:
    """The transport built at startup, or None when SMTP is not configured."""
    return request.app.state.mail_transport


def get_client_key(request: Request, app_settings: Settings = Depends(get_app_settings)) -> str:
    """Caller IP, with X-Forwarded-For as a best-effort fallback (or first choice behind a trusted proxy)."""
    forwarded_ip = None
    if x_forwarded_for := request.headers.get("X-Forwarded-For"):
        forwarded_ip = x_forwarded_for.split(",")[0].strip() or None

    client_ip = request.client.host if request.client else None

    if app_settings.TRUST_PROXY and forwarded_ip:
        return forwarded_ip
    return client_ip or forwarded_ip or UNKNOWN_CLIENT


async def enforce_rate_limit(
        client_key: str = Depends(get_client_key),
        limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    try:
        await limiter.consume(client_key)
    except RateLimitExceeded as e:
        logger.warning(f"⛔ Rate limited {client_key}, retry in {e.retry_after}s")
        raise ContactAPIError(
            ErrorCode.RATE_LIMITED,
            status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"Retry-After": str(e.retry_after)},
        ) from e
