import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class LeaveSettings(BaseModel):
    # Python weekday numbers (0=Mon ... 6=Sun)
    weekend_days: List[int] = Field(
        default_factory=lambda: [int(d) for d in _env_list("WEEKEND_DAYS", "5,6")]
    )
    default_annual_entitlement: float = float(os.getenv("DEFAULT_ANNUAL_ENTITLEMENT", "28"))
    exclude_public_holidays: bool = os.getenv("EXCLUDE_PUBLIC_HOLIDAYS", "false").lower() == "true"
    default_region: str = os.getenv("DEFAULT_REGION", "GB")
    financial_year_start: str = os.getenv("FINANCIAL_YEAR_START", "01-01")  # MM-DD
    allow_carry_over: bool = os.getenv("ALLOW_CARRY_OVER", "true").lower() == "true"
    max_carry_over_days: float = float(os.getenv("MAX_CARRY_OVER_DAYS", "5"))


class ConflictSettings(BaseModel):
    enabled: bool = os.getenv("CONFLICT_DETECTION", "true").lower() == "true"
    warning_percent: float = float(os.getenv("CONFLICT_WARNING_PERCENT", "25"))
    critical_percent: float = float(os.getenv("CONFLICT_CRITICAL_PERCENT", "50"))


class Config(BaseModel):
    app_name: str = "Leave Management API"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./leave.db")

    # Auth (tokens are issued by the identity provider, we only verify them)
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    cors_origins: List[str] = Field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5173,"
            "http://127.0.0.1:3000,http://127.0.0.1:5173",
        )
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

    # Domain defaults; admins can override most of these at runtime (app_settings table)
    leave: LeaveSettings = LeaveSettings()
    conflict: ConflictSettings = ConflictSettings()

    system_approver_id: str = "system"
    system_approver_name: Optional[str] = "System"


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key or "change-it" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
