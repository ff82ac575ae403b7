import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class EmailSettings(BaseModel):
    resend_api_key: Optional[str] = Field(default=os.getenv("RESEND_API_KEY"))
    from_email: str = Field(default=os.getenv("RESEND_FROM_EMAIL", "onboarding@resend.dev"))
    api_url: str = "https://api.resend.com/emails"
    retry_attempts: int = int(os.getenv("EMAIL_RETRY_ATTEMPTS", "3"))
    timeout_seconds: int = 10

class LeaveSettings(BaseModel):
    # Seeded total_days when an approval finds no allocation row for the year
    default_paid_days: float = float(os.getenv("LEAVE_DEFAULT_PAID", "20"))
    default_sick_days: float = float(os.getenv("LEAVE_DEFAULT_SICK", "12"))
    default_casual_days: float = float(os.getenv("LEAVE_DEFAULT_CASUAL", "10"))

class Config(BaseModel):
    app_name: str = "Dayflow HRMS"
    environment: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_prefix: str = "/api"
    app_url: str = os.getenv("APP_URL", "http://localhost:3000")

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./dayflow.db")

    # Identity is resolved upstream; the gateway forwards the subject in this header
    user_id_header: str = "X-User-ID"

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    encryption_key: str = os.getenv("ENCRYPTION_KEY", "dev-only-key-c6F8qQpqoH8wnn76vVbnBYtcpwwnKA=")

    email: EmailSettings = EmailSettings()
    leave: LeaveSettings = LeaveSettings()

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.encryption_key:
        raise RuntimeError(
            "FATAL: ENCRYPTION_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
else:
    if "dev-only" in settings.encryption_key:
        _logger.warning("Using insecure default ENCRYPTION_KEY, only acceptable in development.")
