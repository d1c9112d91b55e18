import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import DBAPIError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings
from app.database import close_db, init_db
from app.exceptions import ConflictError, TransientStoreError
from app.moderation.router import router as moderation_router
from app.notifications.internal_router import router as internal_router
from app.notifications.router import router as notifications_router
from app.profile.router import router as profile_router
from app.rate_limit import limiter
from app.runtime import SocialRuntime
from app.social_graph.admin_router import router as social_admin_router
from app.social_graph.router import router as social_router
from app.verification.router import router as verification_router
from shared.middleware.error_handler import (
    error_envelope,
    error_envelope_middleware,
    http_exception_handler,
)
from shared.middleware.request_id import request_id_middleware

logger = logging.getLogger(__name__)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Social Graph Service

Owns who-can-see-whom and who-hears-about-what:

* **Social graph** — directed follows with approval for private accounts
  (pending → accepted / declined / cancelled), blocks that sever follow edges in
  both directions, user/content reports.
* **Visibility** — a single resolver decides whether a viewer may see an
  account's profile fields, lists and content.  Denials look like a missing user.
* **Notifications** — follow requests, acceptances, new followers, comments,
  likes (collapsed per actor), mentions and report outcomes; persisted and pushed
  live to connected clients over an NDJSON stream.
* **Moderation** — bans and verification review, with a short-lived status cache
  evicted on every decision.

### Authentication
All user endpoints require:
```
Authorization: Bearer <access_token>
```
Admin endpoints additionally require the `moderator`, `admin` or `super_admin` role.
`/internal/*` routes are for service-to-service calls and are not exposed publicly.

### Error shape
```json
{ "error": { "code": "conflict", "message": "Human-readable message" }, "request_id": "…" }
```
"""

_TAGS_METADATA = [
    {
        "name": "social-graph",
        "description": (
            "Follow, follow requests, blocks and reports. Following a private account "
            "creates a pending request the owner approves or declines."
        ),
    },
    {
        "name": "profile",
        "description": (
            "Profiles gated by visibility. Private accounts you do not follow return "
            "the public summary with `is_restricted=true`."
        ),
    },
    {
        "name": "Notifications",
        "description": "Notification feed, unread counts and the live stream.",
    },
    {
        "name": "verification",
        "description": "Verification requests and cached verification / ban status.",
    },
    {
        "name": "admin-moderation",
        "description": "**Staff only.** Bans and verification review.",
    },
    {
        "name": "admin-social-graph",
        "description": "**Staff only.** Review user/content reports.",
    },
    {
        "name": "Internal",
        "description": "Service-to-service event intake and visibility checks.",
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── Exception handlers ────────────────────────────────────────────────────────

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", ()))
    message = f"{loc}: {first.get('msg', 'invalid input')}" if loc else "Invalid request."
    return error_envelope(request, status.HTTP_422_UNPROCESSABLE_ENTITY, "validation", message)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    return error_envelope(
        request, ConflictError.status_code_default, ConflictError.kind, ConflictError.detail_default
    )


async def store_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    logger.warning("store unavailable: %s", exc)
    return error_envelope(
        request,
        TransientStoreError.status_code_default,
        TransientStoreError.kind,
        TransientStoreError.detail_default,
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # slowapi renders the 429 and its X-RateLimit-* / Retry-After headers;
    # only the body is swapped for the envelope.
    limited = _rate_limit_exceeded_handler(request, exc)
    response = error_envelope(
        request, limited.status_code, "rate_limited", f"Rate limit exceeded: {exc.detail}"
    )
    for name, value in limited.headers.items():
        if name not in ("content-length", "content-type"):
            response.headers[name] = value
    return response


# ── App factory ───────────────────────────────────────────────────────────────

def get_settings() -> Settings:
    return Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(), format="%(levelname)s:%(name)s: %(message)s"
    )
    init_db(settings.social_database_url)
    app.state.runtime = SocialRuntime.from_settings(settings)
    yield
    # Shutdown: end open streams first, then release the pool.
    await app.state.runtime.aclose()
    await close_db()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Social Graph Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Attach rate limiter state before middleware
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(DBAPIError, store_error_handler)

    # Middleware is applied in reverse-registration order (last added = outermost).
    # CORS must be outermost so ALL responses (including 429s) carry CORS headers.
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    # /users/me/... routes live in several routers; each registers them before
    # its own /users/{user_id}/... routes.
    app.include_router(social_router, prefix="/api/v1")
    app.include_router(social_admin_router, prefix="/api/v1")
    app.include_router(profile_router, prefix="/api/v1")
    app.include_router(verification_router, prefix="/api/v1")
    app.include_router(moderation_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")
    app.include_router(internal_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"], include_in_schema=True)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="social")

    return app


app = create_app()
