import json
import logging
import re
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        rid = request_id_ctx.get()
        record.request_id = rid or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "request_id": getattr(record, "request_id", "-"),
        }
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


PLAIN_FORMAT = "%(asctime)s %(levelname)-5s %(name)s [%(request_id)s] %(message)s"


def resolve_level(log_level: str, debug: bool = False) -> int:
    if debug:
        return logging.DEBUG
    level = logging.getLevelName(log_level.upper())
    # getLevelName returns a string for unknown names
    return level if isinstance(level, int) else logging.INFO


def init_logging(log_level: str = "info", debug: bool = False, json_output: bool = True) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    level = resolve_level(log_level, debug)
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)


def resolve_request_id(supplied: str | None) -> str:
    """Echo a client id only when it is short and header-safe."""
    if supplied and _SAFE_REQUEST_ID.fullmatch(supplied):
        return supplied
    return str(uuid.uuid4())


async def request_context_middleware(request, call_next):  # type: ignore
    rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
    token = request_id_ctx.set(rid)
    # read by the 500 handler, which runs outside this middleware
    request.state.request_id = rid
    logger = logging.getLogger("exchangerates.request")
    started = time.perf_counter()
    logger.debug("request start %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
    finally:
        request_id_ctx.reset(token)
