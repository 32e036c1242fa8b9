"""BadgeForge FastAPI application."""

import json
import logging
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from badgeforge.api import auth, badges, user
from badgeforge.config import settings as app_settings
from badgeforge.data import BADGE_CATALOG
from badgeforge.db import db_session, init_db
from badgeforge.dependencies import AuthenticationRequired
from badgeforge.repositories import BadgeRepository
from badgeforge.services.badges import BadgeClaimRejected, FoundingWindow
from badgeforge.utils.rate_limit import limiter

# Configure logging
logging.basicConfig(
    level=getattr(logging, app_settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


async def seed_badge_catalog() -> int:
    """Upsert the static badge catalog, stamping the OG window from LAUNCH_DATE."""
    window = FoundingWindow.from_launch(app_settings.launch_date, app_settings.og_window_hours)
    async with db_session() as db:
        count = await BadgeRepository(db).seed_catalog(
            BADGE_CATALOG, window_start=window.start, window_end=window.end
        )
    if window.configured:
        logger.info(f"OG window: {window.start.isoformat()} -> {window.end.isoformat()}")
    else:
        logger.warning("LAUNCH_DATE is not set - the OG badge cannot be earned")
    return count


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting BadgeForge...")
    await init_db()

    count = await seed_badge_catalog()
    logger.info(f"Badge catalog seeded ({count} badges)")

    if not app_settings.oauth_configured:
        logger.warning(
            "X login is not configured (X_CLIENT_ID, X_REDIRECT_URI, JWT_SECRET) - "
            "login requests will redirect with config_error"
        )

    yield

    # Shutdown
    logger.info("Shutting down BadgeForge...")


# Read version from installed package metadata
try:
    _APP_VERSION = pkg_version("badgeforge")
except Exception:
    _APP_VERSION = "0.0.0"

# Create FastAPI app
app = FastAPI(
    title="BadgeForge",
    description="X login with stateless sessions and campaign badge awards",
    version=_APP_VERSION,
    lifespan=lifespan,
)

# Rate limiter setup
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]


@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    return JSONResponse(status_code=401, content={"error": exc.message})


@app.exception_handler(BadgeClaimRejected)
async def badge_claim_rejected_handler(request: Request, exc: BadgeClaimRejected):
    logger.info(f"Badge claim rejected ({exc.reason.name}): {exc.badge_id}")
    return JSONResponse(status_code=exc.reason.status_code, content={"error": exc.reason.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Error locations only; the rejected input is never echoed or logged
    locations = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    logger.info(f"Invalid request on {request.url.path}: {locations}")
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# CORS middleware - load allowed origins from settings
cors_origins_default = ["http://localhost:3000"]
try:
    cors_origins = json.loads(app_settings.cors_origins)
except json.JSONDecodeError:
    cors_origins = cors_origins_default

logger.info(f"CORS allowed origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    max_age=600,  # Cache preflight requests for 10 minutes
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": app_settings.app_name}


# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(badges.router, prefix="/api")
app.include_router(user.router, prefix="/api")
