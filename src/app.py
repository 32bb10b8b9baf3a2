"""Storefront Ratings FastAPI application.

Serves the review and rating endpoints. Each request under /reviews runs
inside the Ratings domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the domain.toml overlay (e.g. "production").
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ratings.domain import ratings
from ratings.utils.logging import bind_request_context, clear_request_context

ratings.init()

_DOMAIN_PREFIXES = ("/reviews",)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Ratings API",
    description="Product reviews and rating aggregates",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Ratings domain context and bind a request id for logging."""
    clear_request_context()
    bind_request_context(request_id=request.headers.get("x-request-id") or uuid4().hex)

    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with ratings.domain_context():
            return await call_next(request)
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ratings.api import register_error_handlers, review_router  # noqa: E402

app.include_router(review_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": ratings.name})
