"""clubdocs application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import DEFAULT_CORS_ORIGIN, get_settings
from .middleware import RequestIdMiddleware, SecurityHeadersMiddleware
from .models import COLLECTIONS
from .observability import RequestMetricsMiddleware
from .paths import collection_dir
from .routers import api_router
from .utils.errors import DocumentServiceError

settings = get_settings()
logger = logging.getLogger("uvicorn.error")

cors_allow_origins = list(settings.cors_allow_origins) or [DEFAULT_CORS_ORIGIN]
if "*" in cors_allow_origins:
    cors_allow_origins = ["*"]

CORS_ALLOW_METHODS = ["GET", "POST", "OPTIONS"]


def _ensure_storage_dirs() -> None:
    """Create every managed collection directory under the storage root."""

    storage_root = get_settings().storage_root
    for definition in COLLECTIONS:
        collection_dir(storage_root, definition.name).mkdir(parents=True, exist_ok=True)
    logger.info("Serving collections from %s", storage_root)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_storage_dirs()
    yield


app = FastAPI(title="clubdocs", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(RequestMetricsMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

app.include_router(api_router)


def _error_body(message: str, **extra: object) -> dict[str, object]:
    return {"success": False, "detail": message, **extra}


@app.exception_handler(DocumentServiceError)
async def handle_document_error(
    request: Request, exc: DocumentServiceError
) -> JSONResponse:
    """Translate service errors into ``{success: false, detail}`` responses."""

    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message
        )
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(exc.message, **exc.extra)
    )


@app.exception_handler(RequestValidationError)
async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=_error_body("Invalid request", errors=jsonable_encoder(exc.errors())),
    )


@app.exception_handler(Exception)
async def handle_unexpected_exception(
    request: Request, exc: Exception
) -> JSONResponse:
    """Ensure unexpected exceptions return a JSON payload."""

    logger.exception(
        "Unhandled exception while processing %s %s", request.method, request.url.path
    )
    # Raised past CORSMiddleware, so the allow-origin header is added here.
    origin = request.headers.get("origin")
    headers: dict[str, str] = {}
    if origin:
        if cors_allow_origins == ["*"]:
            headers["Access-Control-Allow-Origin"] = "*"
        elif origin in cors_allow_origins:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Vary"] = "Origin"

    return JSONResponse(
        status_code=500,
        content=_error_body("Internal Server Error"),
        headers=headers or None,
    )


@app.options("/{full_path:path}", include_in_schema=False)
async def answer_options(full_path: str) -> Response:
    """Answer bare OPTIONS requests on any path with an empty 204."""

    return Response(
        status_code=204,
        headers={
            "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
            "Access-Control-Allow-Headers": "*",
        },
    )


__all__ = ["app"]
