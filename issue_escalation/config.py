"""Configuration management for the issue escalation worker."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # Application
    APP_NAME: str = "Issue Escalation Worker"
    VERSION: str = "0.1.0"
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    ENVIRONMENT: str = Field(default="development", description="Environment")

    # API Configuration
    API_V1_STR: str = "/api/v1"
    HOST: str = Field(default="0.0.0.0", description="Host to bind")
    PORT: int = Field(default=8000, description="Port to bind")

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./issue_escalation.db",
        description="Database connection URL"
    )

    # SMTP Configuration
    SMTP_HOST: str = Field(default="", description="SMTP server host")
    SMTP_PORT: int = Field(default=465, description="SMTP server port")
    SMTP_USE_SSL: bool = Field(
        default=True,
        description="Connect with implicit TLS (SMTPS) instead of STARTTLS"
    )
    SMTP_USER: str = Field(default="", description="SMTP username")
    SMTP_PASS: str = Field(default="", description="SMTP password")
    SMTP_FROM: str = Field(default="", description="From email address")
    SMTP_TIMEOUT_SECONDS: float = Field(default=30.0, description="SMTP socket timeout")

    # Escalation Configuration
    ESCALATION_FALLBACK_EMAIL: str = Field(
        default="checkcitedb@gmail.com.ng",
        description="Recipient used when neither the level nor the organization has one"
    )
    ESCALATION_FINAL_GRACE_DAYS: int = Field(
        default=3,
        description="Days added to today's date after the final escalation level"
    )
    ESCALATION_RETRY_OVERDUE: bool = Field(
        default=False,
        description="Treat every day after the due date as eligible, not only the first"
    )
    ESCALATION_TIMEZONE: str = Field(
        default="UTC",
        description="Timezone used to decide what 'today' is"
    )
    ESCALATION_PASS_CRON: str = Field(
        default="0 6 * * *",
        description="Crontab expression for the escalation pass"
    )
    ENABLE_ESCALATION: bool = Field(
        default=True,
        description="Enable the scheduled escalation pass"
    )

    # Calendar invites
    CALENDAR_PRODID: str = Field(
        default="-//YourOrg//Issue Escalation//EN",
        description="PRODID written into calendar invites"
    )
    CALENDAR_UID_DOMAIN: str = Field(
        default="yourdomain.com",
        description="Domain suffix of calendar event UIDs"
    )

    # Monitoring & Observability
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @field_validator("ESCALATION_PASS_CRON")
    @classmethod
    def validate_cron(cls, v: str) -> str:
        """Crontab expressions must have exactly five fields."""
        if len(v.split()) != 5:
            raise ValueError("ESCALATION_PASS_CRON must have five fields")
        return v.strip()

    @field_validator("ESCALATION_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("ESCALATION_FINAL_GRACE_DAYS")
    @classmethod
    def validate_grace_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError("ESCALATION_FINAL_GRACE_DAYS must not be negative")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
