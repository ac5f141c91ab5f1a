"""Map engine exceptions to ``{error, details}`` JSON responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cgt_engine.exceptions import CGTEngineError, InputValidationError, UpstreamFailure
from cgt_engine.models.schemas import ErrorResponse
from cgt_engine.observability.logger import get_logger

logger = get_logger("api_errors")


def _error(status: int, error: str, details) -> JSONResponse:
    body = ErrorResponse(error=error, details=details).model_dump()
    return JSONResponse(status_code=status, content=jsonable_encoder(body))


async def handle_input_error(request: Request, exc: InputValidationError) -> JSONResponse:
    return _error(400, "Invalid request", str(exc))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, "Invalid request", exc.errors())


async def handle_engine_error(request: Request, exc: CGTEngineError) -> JSONResponse:
    stage = exc.stage if isinstance(exc, UpstreamFailure) else None
    logger.error("request_engine_error", path=request.url.path, stage=stage, error=str(exc))
    error = f"{stage} failed" if stage else "Internal error"
    return _error(500, error, str(exc))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_unhandled_error", path=request.url.path)
    return _error(500, "Internal error", type(exc).__name__)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InputValidationError, handle_input_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(CGTEngineError, handle_engine_error)
    app.add_exception_handler(Exception, handle_unexpected)
