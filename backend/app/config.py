"""
Application settings.

Built once at startup by load_settings() and handed to the app factory, which
stores them on app.state.settings. Nothing else reads the environment at
request time.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

ENVIRONMENTS = ("production", "development", "test")

DEFAULT_SESSION_MAX_AGE = 30 * 24 * 60 * 60  # 30 days
DEFAULT_SESSION_UPDATE_AGE = 24 * 60 * 60  # 24 hours
DEV_AUTH_SECRET = "dev-only-insecure-secret"

CORS_ALLOWED_METHODS = ["GET", "DELETE", "PATCH", "POST", "PUT", "OPTIONS"]
CORS_ALLOWED_HEADERS = [
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
    "Authorization",
]


@dataclass(frozen=True)
class Settings:
    environment: str = "production"
    auth_secret: str = ""
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    session_update_age: int = DEFAULT_SESSION_UPDATE_AGE
    auth_cookie_name: str = "session_token"
    server_ip: str = "localhost"
    frontend_port: int = 80
    frontend_url: Optional[str] = None
    log_level: str = "INFO"
    extra_origins: List[str] = field(default_factory=list)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def same_user_bypass(self) -> bool:
        """True only for explicit test/development runs."""
        return self.environment in ("test", "development")

    def allowed_origins(self) -> List[str]:
        """CORS origins for the configured host, with and without the frontend port."""
        host = strip_protocol(self.server_ip) or "localhost"
        candidates = [
            "http://localhost",
            f"http://localhost:{self.frontend_port}",
            f"http://{host}",
            f"http://{host}:{self.frontend_port}",
        ]
        if self.frontend_url:
            candidates.append(self.frontend_url.rstrip("/"))
        candidates.extend(self.extra_origins)

        origins: List[str] = []
        for origin in candidates:
            if origin and origin not in origins:
                origins.append(origin)
        return origins


def strip_protocol(value: str) -> str:
    value = (value or "").strip()
    for prefix in ("http://", "https://"):
        if value.startswith(prefix):
            return value[len(prefix) :]
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def load_settings() -> Settings:
    """Read settings from the process environment (and .env, if present)."""
    environment = os.getenv("APP_ENV", "production").strip().lower()
    if environment not in ENVIRONMENTS:
        raise ValueError(f"APP_ENV must be one of {', '.join(ENVIRONMENTS)}, got {environment!r}")

    secret = os.getenv("AUTH_SECRET", "")
    if not secret:
        if environment == "production":
            raise ValueError("AUTH_SECRET is required in production")
        secret = DEV_AUTH_SECRET

    extra = os.getenv("CORS_ORIGINS", "")

    return Settings(
        environment=environment,
        auth_secret=secret,
        session_max_age=_int_env("SESSION_MAX_AGE_SECONDS", DEFAULT_SESSION_MAX_AGE),
        session_update_age=_int_env("SESSION_UPDATE_AGE_SECONDS", DEFAULT_SESSION_UPDATE_AGE),
        auth_cookie_name=os.getenv("AUTH_COOKIE_NAME", "session_token") or "session_token",
        server_ip=strip_protocol(os.getenv("SERVER_IP", "localhost")),
        frontend_port=_int_env("FRONTEND_PORT", 80),
        frontend_url=os.getenv("FRONTEND_URL") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        extra_origins=[o.strip() for o in extra.split(",") if o.strip()],
    )
