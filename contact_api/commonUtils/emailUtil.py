# Outbound mail transport, built once at startup from the SMTP settings

from typing import Optional

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from pydantic import ValidationError

from contact_api.commonUtils.errorUtil import MailConfigurationError, MailDispatchError
from contact_api.config.settings import Settings
import logging

logger = logging.getLogger(__name__)


class MailTransport:
    """Wraps one FastMail client. Relay, network and auth failures all surface as MailDispatchError."""

    def __init__(self, config: ConnectionConfig):
        self.config = config
        self.mailer = FastMail(config)

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "MailTransport":
        try:
            config = app_settings.mail_config
        except ValidationError as e:
            raise MailConfigurationError(f"Invalid SMTP settings: {e.error_count()} error(s)") from e
        return cls(config)

    @property
    def default_sender(self) -> str:
        return str(self.config.MAIL_FROM)

    def _mailer_for(self, from_address: str) -> FastMail:
        if from_address == self.default_sender:
            return self.mailer
        return FastMail(self.config.model_copy(update={"MAIL_FROM": from_address}))

    async def dispatch(self, from_address: str, to_address: str, reply_to: str,
                       subject: str, html_body: str) -> None:
        """
        Send a single HTML message.
        """
        logger.info(f"📧 Sending email to {to_address} | Reply-To: {reply_to}")
        try:
            msg = MessageSchema(
                subject=subject,
                recipients=[to_address],
                reply_to=[reply_to],
                body=html_body,
                subtype=MessageType.html,
            )
            await self._mailer_for(from_address).send_message(msg)
        except Exception as e:
            logger.error(f"Failed to send email to {to_address}: {str(e)}", exc_info=True)
            raise MailDispatchError("Mail relay did not accept the message") from e
        logger.info(f"Email sent successfully to {to_address}")


def build_mail_transport(app_settings: Settings) -> Optional[MailTransport]:
    """
    Create the transport, or return None when SMTP is not configured.

    The service keeps running without a transport; every contact submission then
    answers server_misconfigured.
    """
    try:
        return MailTransport.from_settings(app_settings)
    except MailConfigurationError as e:
        logger.error(f"SMTP not configured yet: {str(e)}")
        return None
