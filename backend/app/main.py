import logging
import os
import subprocess
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.auth.deps import AuthorizationGuard
from app.auth.session import SessionCodec
from app.config import CORS_ALLOWED_HEADERS, CORS_ALLOWED_METHODS, Settings, load_settings
from app.database import init_db
from app.errors import register_exception_handlers
from app.logging_config import configure_logging
from app.routes import auth, contacts, users

APP_NAME = "ClutchPay API"

logger = logging.getLogger(__name__)


# Get build info
def get_build_info():
    """Get git commit hash or build timestamp"""
    try:
        # Try to get git commit hash
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=os.path.dirname(os.path.dirname(__file__)),
            capture_output=True,
            text=True,
            timeout=2,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    # Fallback to build timestamp
    return datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = get_build_info()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API with its auth configuration fixed at construction time."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=APP_NAME)

    codec = SessionCodec(
        secret=settings.auth_secret,
        max_age=settings.session_max_age,
        update_age=settings.session_update_age,
    )
    app.state.settings = settings
    app.state.guard = AuthorizationGuard(
        codec,
        cookie_name=settings.auth_cookie_name,
        same_user_bypass=settings.same_user_bypass,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(contacts.router, prefix="/api", tags=["contacts"])

    @app.on_event("startup")
    def on_startup():
        init_db()  # Use centralized init_db() which imports models and creates tables
        logger.info(
            "%s started (env=%s, build=%s, same-user check %s)",
            APP_NAME,
            settings.environment,
            BUILD_HASH,
            "bypassed" if settings.same_user_bypass else "enforced",
        )

    @app.get("/api/health")
    def health_check():
        """Diagnostic endpoint to verify which code is running"""
        return {"app_name": APP_NAME, "build_hash": BUILD_HASH, "status": "healthy"}

    return app


app = create_app()
