from typing import Iterable, List

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from .logging import REQUEST_ID_HEADER

logger = logging.getLogger("exchangerates.errors")


class CurrenciesNotFound(Exception):
    """One or more requested currency codes are not available."""

    def __init__(self, currencies: Iterable[str]):
        self.currencies: List[str] = list(currencies)
        super().__init__(f"currencies not found: {', '.join(self.currencies)}")


class NoRatesAvailable(Exception):
    """The dataset is not loaded or holds no days."""

    def __init__(self, detail: str = "No rates available"):
        self.detail = detail
        super().__init__(detail)


def currencies_not_found_handler(request: Request, exc: CurrenciesNotFound):  # type: ignore
    content = {"currencies_not_found": exc.currencies} if exc.currencies else {}
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=content)


def no_rates_handler(request: Request, exc: NoRatesAvailable):  # type: ignore
    logger.error("request failed: %s", exc.detail)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "no_rates", "detail": exc.detail},
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    rid = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
        headers={REQUEST_ID_HEADER: rid} if rid else None,
    )
