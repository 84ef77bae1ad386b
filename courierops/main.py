"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courierops.api.errors import register_exception_handlers
from courierops.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from courierops.api.routes import (
    corporate_applications,
    courier_applications,
    metrics,
    support_tickets,
)
from courierops.core.config import get_settings
from courierops.core.structured_logging import configure_logging

settings = get_settings()
configure_logging()

docs_enabled = settings.api_docs_enabled
if docs_enabled is None:
    docs_enabled = settings.environment != "production"

app = FastAPI(
    title="CourierOps API",
    description="Onboarding and support ticket lifecycle API for CourierOps",
    version="1.0.0",
    docs_url="/api/docs" if docs_enabled else None,
    redoc_url="/api/redoc" if docs_enabled else None,
    openapi_url="/api/openapi.json" if docs_enabled else None,
)

# Middleware configuration (order matters - applied in reverse order)
# 1. Request logging (outermost - logs all requests)
app.add_middleware(RequestLoggingMiddleware)

# 2. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 3. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

register_exception_handlers(app)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(
    corporate_applications.router,
    prefix="/api/v1/corporate-applications",
    tags=["corporate-onboarding"],
)
app.include_router(
    courier_applications.router,
    prefix="/api/v1/courier-applications",
    tags=["courier-onboarding"],
)
app.include_router(
    support_tickets.router,
    prefix="/api/v1/support-tickets",
    tags=["support-tickets"],
)
app.include_router(metrics.router, prefix="/api", tags=["metrics"])
