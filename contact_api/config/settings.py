from typing import List, Optional

from fastapi_mail import ConnectionConfig
from pydantic_settings import BaseSettings

from contact_api.commonUtils.errorUtil import MailConfigurationError

SMTPS_PORT = 465


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma separated list of exact origins, e.g. "https://me.dev,http://localhost:5173"
    CORS_ORIGIN: str = ""
    TRUST_PROXY: bool = False
    MAX_BODY_BYTES: int = 6 * 1024

    RATE_LIMIT_POINTS: int = 6
    RATE_LIMIT_WINDOW: int = 60  # seconds
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    SMTP_HOST: Optional[str] = None
    SMTP_PORT: Optional[int] = None
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SENDER_EMAIL: Optional[str] = None
    RECEIVER_EMAIL: Optional[str] = None

    BRAND_NAME: str = "Portfolio"

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    @property
    def sender_email(self) -> Optional[str]:
        return self.SENDER_EMAIL or self.SMTP_USER

    @property
    def missing_smtp_settings(self) -> List[str]:
        required = {
            "SMTP_HOST": self.SMTP_HOST,
            "SMTP_PORT": self.SMTP_PORT,
            "SMTP_USER": self.SMTP_USER,
            "SMTP_PASS": self.SMTP_PASS,
            "RECEIVER_EMAIL": self.RECEIVER_EMAIL,
        }
        return [name for name, value in required.items() if not value]

    @property
    def smtp_configured(self) -> bool:
        return not self.missing_smtp_settings

    @property
    def mail_config(self) -> ConnectionConfig:
        missing = self.missing_smtp_settings
        if missing:
            raise MailConfigurationError(f"Missing SMTP env vars: {', '.join(missing)}")

        return ConnectionConfig(
            MAIL_USERNAME=self.SMTP_USER,
            MAIL_PASSWORD=self.SMTP_PASS,
            MAIL_FROM=self.sender_email,
            MAIL_PORT=self.SMTP_PORT,
            MAIL_SERVER=self.SMTP_HOST,
            MAIL_STARTTLS=self.SMTP_PORT != SMTPS_PORT,
            MAIL_SSL_TLS=self.SMTP_PORT == SMTPS_PORT,
            USE_CREDENTIALS=True
        )

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# create a singleton instance
settings = Settings()
