"""Furnishop FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.
The live chat Socket.IO server is mounted around the FastAPI app.

Usage:
    uvicorn app:application --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
import socketio
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from identity.domain import identity
from shared.settings import get_settings
from storefront.domain import storefront
from support.domain import support

identity.init()
storefront.init()
support.init()

settings = get_settings()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/auth": identity,
    "/products": storefront,
    "/categories": storefront,
    "/cart": storefront,
    "/orders": storefront,
    "/momo": storefront,
    "/admin": storefront,
    "/chat": support,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


# ---------------------------------------------------------------------------
# Scheduler lifecycle
# ---------------------------------------------------------------------------
from scheduler import MaintenanceScheduler  # noqa: E402

maintenance = MaintenanceScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    maintenance.start()
    yield
    maintenance.stop()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Furnishop API",
    description="Furniture storefront — catalog, cart, orders, MoMo payments, accounts and live chat",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match — pass through (health check, docs, etc.)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from identity.api import router as identity_router  # noqa: E402
from storefront.api import (  # noqa: E402
    admin_router,
    cart_router,
    category_router,
    momo_router,
    order_router,
    product_router,
)
from support.api import router as chat_router  # noqa: E402

app.include_router(identity_router)
app.include_router(product_router)
app.include_router(category_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(momo_router)
app.include_router(admin_router)
app.include_router(chat_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "identity": {"name": identity.name},
                "storefront": {"name": storefront.name},
                "support": {"name": support.name},
            },
            "scheduler": {"running": maintenance.running},
        }
    )


# ---------------------------------------------------------------------------
# Live chat
# ---------------------------------------------------------------------------
from support.gateway.chat_gateway import create_socket_server  # noqa: E402

sio, chat_gateway = create_socket_server(settings.cors_origins)

application = socketio.ASGIApp(sio, other_asgi_app=app)
