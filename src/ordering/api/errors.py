"""Exception-to-response mapping for the CraveKart API.

Every error body carries a ``message``. Business errors add their ``code``;
field validation errors add the per-field ``errors`` mapping.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import CheckoutError, error_message
from ordering.utils.logging import current_environment

logger = structlog.get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    # Protean's defaults cover the remaining framework errors
    register_exception_handlers(app)

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "code": exc.code},
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"message": error_message(exc), "errors": exc.messages},
        )

    @app.exception_handler(ObjectNotFoundError)
    async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"message": error_message(exc), "code": "not_found"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
        content = {"message": "Internal Server Error"}
        if current_environment() == "development":
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)
