"""StyleHub storefront FastAPI application.

Web server that processes storefront commands synchronously via HTTP. Each
request is wrapped in the storefront domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, configure_logging

logger = structlog.get_logger(__name__)


def create_app(configure_logs: bool = True) -> FastAPI:
    """Build the storefront application.

    The domain is initialized here so uvicorn workers share it. PROTEAN_ENV
    selects the config overlay from ``domain.toml``.
    """
    if configure_logs:
        configure_logging()

    storefront.init()

    app = FastAPI(
        title="StyleHub Storefront API",
        description="Catalogue inventory, shopping cart, orders and wishlist",
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
        """Push the storefront domain context and bind request log context."""
        clear_context()
        add_context(
            request_id=request.headers.get("X-Request-Id") or str(uuid.uuid4()),
            customer_id=request.headers.get("X-Customer-Id"),
            path=request.url.path,
        )
        with storefront.domain_context():
            response = await call_next(request)
        return response

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    from storefront.api import (
        cart_router,
        maintenance_router,
        order_router,
        product_router,
        register_storefront_handlers,
        wishlist_router,
    )

    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(wishlist_router)
    app.include_router(maintenance_router)
    register_storefront_handlers(app)

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domains": {
                    "storefront": {"name": storefront.name},
                },
            }
        )

    logger.info("Storefront application ready")
    return app


app = create_app()
