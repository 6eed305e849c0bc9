"""
HTTP API for searchrelay.

Routes:
    GET  /                          Service banner
    GET  /api/v1/search?q=...       Search via query string
    POST /api/v1/search             Search via JSON body ``{"query": "..."}``
    GET  /api/v1/search/history     Paginated query history (``page``, ``pageSize``)

Errors are rendered as ``{"statusCode": <int>, "message": <str>}``; internal
details stay in the logs.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, Field, ValidationError

from ..core.api import SearchService
from ..core.config import RelayConfig
from ..utils.error_handling import ApiError, to_api_error
from ..utils.logging_config import get_logger


class SearchParams(BaseModel):
    q: str = Field(min_length=1)


class SearchBody(BaseModel):
    query: str = Field(min_length=1)


class HistoryParams(BaseModel):
    page: int = Field(ge=1)
    pageSize: int = Field(ge=1)


def _describe(error: ValidationError) -> str:
    """Flatten pydantic errors to ``[field] message, ...``."""
    return ", ".join(
        f"[{'.'.join(str(part) for part in err['loc'])}] {err['msg']}" for err in error.errors()
    )


def _get_service(request: Request) -> SearchService:
    return request.app.state.service  # type: ignore[no-any-return]


router = APIRouter(prefix="/api/v1/search", tags=["search"])


@router.get("")
async def get_search(request: Request) -> list[dict[str, str]]:
    try:
        params = SearchParams.model_validate(dict(request.query_params))
    except ValidationError as e:
        raise ApiError.bad_request("Bad request: Malformed params", _describe(e)) from e

    results = await _get_service(request).search(params.q)
    return [item.to_dict() for item in results]


@router.post("")
async def post_search(request: Request) -> list[dict[str, str]]:
    try:
        body = SearchBody.model_validate(await request.json())
    except ValidationError as e:
        raise ApiError.bad_request("Bad request: Malformed body", _describe(e)) from e
    except ValueError as e:
        raise ApiError.bad_request("Bad request: Malformed body", f"invalid JSON: {e}") from e

    results = await _get_service(request).search(body.query)
    return [item.to_dict() for item in results]


@router.get("/history")
async def get_history(request: Request) -> dict[str, Any]:
    try:
        params = HistoryParams.model_validate(dict(request.query_params))
    except ValidationError as e:
        raise ApiError.bad_request("Bad request: Malformed params", _describe(e)) from e

    history = await _get_service(request).get_history(params.page, params.pageSize)
    return history.to_dict()


def _error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"statusCode": error.status_code, "message": error.response_message},
    )


def create_app(config: RelayConfig | None = None, service: SearchService | None = None) -> FastAPI:
    """Build the FastAPI application.

    ``service`` is injectable for tests; by default one is built from ``config``
    and its provider client is closed on shutdown.
    """
    cfg = config or RelayConfig.from_env()
    search_service = service or SearchService.from_config(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        get_logger().info(
            f"Starting API proxy server on http://{cfg.host}:{cfg.port} ({cfg.env})",
            operation="startup",
        )
        yield
        await search_service.aclose()

    app = FastAPI(title="searchrelay", lifespan=lifespan)
    app.state.config = cfg
    app.state.service = search_service

    @app.middleware("http")
    async def log_timing(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            get_logger().log_request_complete(
                request.method, request.url.path, elapsed_ms, ok=False
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        get_logger().log_request_complete(
            request.method,
            request.url.path,
            elapsed_ms,
            ok=response.status_code < 400,
            status_code=response.status_code,
        )
        return response

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        get_logger().error(
            f"{exc.response_message}: {exc.log_message}",
            operation="api_error",
            status_code=exc.status_code,
        )
        return _error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        error = to_api_error(exc)
        get_logger().error(
            f"{error.response_message}: {error.log_message}",
            operation="api_error",
            status_code=error.status_code,
        )
        return _error_response(error)

    @app.get("/", response_class=PlainTextResponse)
    async def hello() -> str:
        return f"Hello, this is the API proxy server running on port {cfg.port} in {cfg.env} mode"

    app.include_router(router)
    return app
