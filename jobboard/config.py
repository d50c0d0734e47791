"""
JobBoard - Application configuration.

Centralized configuration using Pydantic Settings for environment variable management.

Environment Variables:
    All settings can be overridden via environment variables with JOBBOARD_ prefix.

    Notification Settings:
        JOBBOARD_STATUS_EMAIL_SUPPRESSION_MINUTES=30   - Window after a status email during
                                                         which lower-priority updates are withheld
        JOBBOARD_BASE_URL=https://...                   - Public site URL used in email links
        JOBBOARD_FROM_EMAIL=...                         - Sender address for notifications
        JOBBOARD_UNSUBSCRIBE_SECRET_KEY=...             - Signing key for unsubscribe links
                                                         (required in production)

    Email Rate Limits (soft, logged only):
        JOBBOARD_MAX_EMAILS_PER_HOUR=20
        JOBBOARD_MAX_STATUS_EMAILS_PER_HOUR=5
"""
from pydantic_settings import BaseSettings


class NotificationSettings(BaseSettings):
    """
    Status-change notification settings.

    The suppression window only holds back updates whose status is not
    more important than the one already emailed; an offer always goes out.
    """
    status_email_suppression_minutes: int = 30
    base_url: str = "http://localhost:3000"
    from_email: str = "notifications@jobboard.local"
    from_name: str = "JobBoard"

    # Signed unsubscribe links appended to non-critical emails
    unsubscribe_secret_key: str = "development-secret-key-change-in-production"
    unsubscribe_algorithm: str = "HS256"
    unsubscribe_token_expire_days: int = 90

    class Config:
        env_prefix = "JOBBOARD_"
        env_file = ".env"
        extra = "ignore"


class EmailRateLimitSettings(BaseSettings):
    """Per-user email limits. Exceeding one is logged, never blocked."""
    max_emails_per_hour: int = 20
    max_emails_per_day: int = 100
    max_status_emails_per_hour: int = 5
    max_job_alerts_per_hour: int = 1
    max_job_alerts_per_day: int = 3

    class Config:
        env_prefix = "JOBBOARD_"
        env_file = ".env"
        extra = "ignore"


class Settings(BaseSettings):
    """Combined application settings."""
    notifications: NotificationSettings = NotificationSettings()
    email_limits: EmailRateLimitSettings = EmailRateLimitSettings()

    # CORS allowed origins (comma-separated, e.g. "http://localhost:3000,https://myapp.com")
    allowed_origins: str = "*"

    # Database
    database_url: str = "sqlite:///./data/jobboard.db"

    class Config:
        env_prefix = "JOBBOARD_"
        env_file = ".env"
        extra = "ignore"


# Global settings instance
settings = Settings()
