"""Application configuration from environment variables."""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./parish_ledger.db",
        description="SQLAlchemy connection string",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Subscription ledger
    subscription_start_month: str = Field(
        default="2025-07", description="First billable month (YYYY-MM)"
    )
    minimum_payment_amount: int = Field(
        default=25, description="Smallest accepted monthly payment in whole rupees"
    )

    # Listing
    default_page_size: int = Field(default=50, description="Default page size for lists")
    max_page_size: int = Field(default=200, description="Largest page size a client may request")

    # Locale
    locale: str = Field(default="en_IN", description="Babel locale for dates and amounts")
    currency: str = Field(default="INR", description="ISO 4217 currency code")

    # E-mail notifications
    smtp_host: str | None = Field(default=None, description="SMTP server host")
    smtp_port: int | None = Field(default=None, description="SMTP server port")
    smtp_user: str | None = Field(default=None, description="SMTP login, also the sender address")
    smtp_password: str | None = Field(default=None, description="SMTP password")
    smtp_from_name: str = Field(default="Holy Cross Church", description="Sender display name")
    smtp_timeout_seconds: int = Field(default=20, description="SMTP connection timeout")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Log file path")

    # API
    api_title: str = Field(default="Parish Ledger API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")

    @property
    def smtp_configured(self) -> bool:
        """True when every SMTP setting needed to send mail is present."""
        return all([self.smtp_host, self.smtp_port, self.smtp_user, self.smtp_password])
