from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException


class AppError(Exception):
    """Typed failure carrying an HTTP-style status and a stable machine code."""

    def __init__(self, message: str, status: int, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def __repr__(self) -> str:
        return f"AppError(status={self.status}, code={self.code!r}, message={self.message!r})"


# Upstream / pipeline failures
def missing_api_key() -> AppError:
    return AppError("Missing OPENAI_API_KEY. Set it in your environment or .env file.", 401, "MISSING_API_KEY")


def invalid_api_key() -> AppError:
    return AppError("Invalid API key", 401, "INVALID_API_KEY")


def forbidden() -> AppError:
    return AppError("API access forbidden", 403, "FORBIDDEN")


def upstream_bad_request() -> AppError:
    return AppError("Request rejected by model/API (input may be too large)", 400, "OPENAI_BAD_REQUEST")


def empty_model_response() -> AppError:
    return AppError("Empty response from AI service", 502, "EMPTY_MODEL_RESPONSE")


def invalid_model_response(detail: Optional[str] = None) -> AppError:
    msg = "Model returned an unexpected format"
    if detail:
        msg = f"{msg}: {detail}"
    return AppError(msg, 502, "INVALID_MODEL_RESPONSE")


def upstream_failure(attempts: int, last_message: Optional[str]) -> AppError:
    return AppError(
        f"Failed after {attempts} attempt(s): {last_message or 'Unknown error'}",
        502,
        "UPSTREAM_FAILURE",
    )


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    code: Optional[str] = None


def error_json(status: int, message: str, code: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=message, code=code).model_dump(),
    )


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _handle_app_error(request: Request, exc: AppError):  # type: ignore[unused-variable]
        request.state.error_code = exc.code
        return error_json(exc.status, exc.message, exc.code)

    @app.exception_handler(HTTPException)
    async def _handle_http_exception(request: Request, exc: HTTPException):  # type: ignore[unused-variable]
        if exc.status_code == 404:
            return error_json(404, "Endpoint not found", "NOT_FOUND")
        return error_json(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _handle_validation(request: Request, exc: RequestValidationError):  # type: ignore[unused-variable]
        return error_json(400, "Request body must be a JSON object", "INVALID_REQUEST")

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception):  # type: ignore[unused-variable]
        logging.getLogger("app").exception("unhandled error on %s", request.url.path)
        return error_json(500, "internal error", "INTERNAL_ERROR")
