import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Mapping

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
# Domain fields (base_currency, currency, route) merged into every JSON line
log_fields_ctx: ContextVar[Mapping[str, Any]] = ContextVar("log_fields", default={})

REQUEST_ID_HEADER = "X-Request-ID"

# LogRecord attributes that bound fields may not shadow
_RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach fields to every record logged inside the block (nesting merges)."""
    merged = {**log_fields_ctx.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = log_fields_ctx.set(merged)
    try:
        yield
    finally:
        log_fields_ctx.reset(token)


class RequestContextFilter(logging.Filter):
    """Copies the request id and any bound domain fields onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        fields = {k: v for k, v in log_fields_ctx.get().items() if k not in _RESERVED}
        # fields passed via extra={"context": ...} win over bound ones
        record.context = {**fields, **(getattr(record, "context", None) or {})}
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }
        line.update(getattr(record, "context", None) or {})
        if record.exc_info:
            exc_type = record.exc_info[0]
            line["error_type"] = exc_type.__name__ if exc_type else None
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def init_logging(debug: bool = False) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    # httpx logs every request at INFO, including the provider access_key query param
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def request_context_middleware(request, call_next):  # type: ignore
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    token = request_id_ctx.set(rid)
    logger = logging.getLogger("fxdash.request")
    started = time.perf_counter()
    status_code = 500
    try:
        with log_context(method=request.method, path=request.url.path):
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = rid
            return response
    finally:
        logger.info(
            "%s %s -> %d",
            request.method,
            request.url.path,
            status_code,
            extra={"context": {
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            }},
        )
        request_id_ctx.reset(token)
