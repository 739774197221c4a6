import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.main import api_router
from app.core.config import settings
from app.schemas import ErrorItem, InvalidDataResponse

_logger = logging.getLogger(__name__)


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/api/docs",
    redoc_url=None,
)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """An unparseable request body is INVALID_DATA, same as a non-object `data`."""
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []) if part != "body")
        msg = err.get("msg", "Invalid value")
        errors.append(ErrorItem(message=f"{loc}: {msg}" if loc else msg))
    content = InvalidDataResponse(errors=errors)
    return JSONResponse(status_code=400, content=content.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Log with traceback; the body never carries script or engine internals outside local."""
    _logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail = "Internal server error"
    if settings.ENVIRONMENT == "local":
        detail = f"Internal server error: {exc}"
    return JSONResponse(status_code=500, content={"detail": detail})


app.include_router(api_router, prefix=settings.API_V1_STR)
