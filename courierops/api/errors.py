"""Exception handlers rendering domain errors as ``ErrorResponse`` JSON."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from courierops.core.exceptions import LifecycleError
from courierops.core.structured_logging import log_json
from courierops.schemas.errors import ErrorResponse

logger = logging.getLogger(__name__)


async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    """Render a lifecycle error with its own error code and HTTP status."""
    log_json(
        logger,
        logging.INFO,
        "domain_error",
        method=request.method,
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.error,
        message=exc.message,
    )
    body = ErrorResponse(error=exc.error, message=exc.message, details=exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LifecycleError, lifecycle_error_handler)
