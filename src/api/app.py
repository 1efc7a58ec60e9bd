"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080

    # Or, binding HOST / PORT from settings
    python -m api.app
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes.search import SEARCH_PREFIX
from config.settings import get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware
from search.models import SearchErrorResponse
from search.product_store import StoreQueryError


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup; clients are created lazily on first use."""
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting discovery search API",
        environment=settings.environment,
        port=settings.port,
        extractor=settings.extractor_mode,
    )

    yield

    logger.info("Shutting down discovery search API")


async def store_query_error_handler(request: Request, exc: StoreQueryError) -> JSONResponse:
    """Render a failed product query as a "search unavailable" body."""
    logger.error("Search unavailable", error=str(exc), path=request.url.path)
    body = SearchErrorResponse(
        error="Search is temporarily unavailable",
        details=str(exc),
    )
    return JSONResponse(status_code=503, content=body.model_dump())


def _describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        field = ".".join(str(p) for p in error.get("loc", ())[1:]) or "body"
        parts.append(f"{field}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def _is_query_error(error: Dict[str, Any]) -> bool:
    loc = tuple(error.get("loc", ()))
    return loc == ("body",) or loc[:2] == ("body", "query")


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render invalid search requests as 400 ``{success: false, error, details}``.

    Routes outside /api/search keep FastAPI's default 422 body.
    """
    if not request.url.path.startswith(SEARCH_PREFIX):
        return await request_validation_exception_handler(request, exc)

    errors = exc.errors()
    error = "Query is required" if any(_is_query_error(e) for e in errors) else "Invalid search request"
    logger.info("Rejected search request", path=request.url.path, error=error)
    body = SearchErrorResponse(error=error, details=_describe_validation_errors(errors))
    return JSONResponse(status_code=400, content=body.model_dump())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Discovery Search API",
        description="""
        Natural-language product search for a Pakistani fashion catalog.

        ## Main Endpoints

        - `POST /api/search/nlp` - Free-text search ("red silk kurta for women under 5000")
        - `GET /api/search/popular` - Most searched queries
        - `GET /api/search/suggestions` - Search-bar suggestions

        ## Health Checks

        - `/health`, `/health/detailed`, `/ready`, `/live`
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestTracingMiddleware)

    app.add_exception_handler(StoreQueryError, store_query_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router, tags=["Health"])

    from api.routes.search import router as search_router
    app.include_router(search_router)

    return app


# Default app instance for uvicorn: `uvicorn api.app:app`
app = create_app()


# Run with: python -m api.app (binds HOST / PORT from settings)
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
