"""Order Tracking FastAPI application.

Backend collaborator for the admin console: order lookup, listing and the
tracking-ledger endpoints. Commands are processed synchronously per request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied.
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from tracking.domain import tracking
from tracking.utils.logging import add_context, clear_context, get_logger

tracking.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Order Tracking API",
    description="Order lookup and tracking ledger for the admin console",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the tracking domain context and bind request context for logging."""
    clear_context()
    add_context(
        request_id=request.headers.get("x-request-id") or uuid4().hex,
        method=request.method,
        path=request.url.path,
    )
    with tracking.domain_context():
        response = await call_next(request)
    logger.debug("Request handled", status_code=response.status_code)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from tracking.api import admin_router, order_router  # noqa: E402

app.include_router(order_router)
app.include_router(admin_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"tracking": {"name": tracking.name}},
        }
    )
