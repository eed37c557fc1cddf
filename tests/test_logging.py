import io
import json
import logging

import pytest
from fastapi.testclient import TestClient

from fxdash.core.errors import UpstreamError
from fxdash.core.logging import (
    JsonFormatter,
    RequestContextFilter,
    log_context,
    log_fields_ctx,
    request_id_ctx,
)
from fxdash.main import create_app
from fxdash.services.rates.sync_service import RateSyncService

from conftest import FakeProvider


@pytest.fixture()
def captured():
    """JSON lines written by the `fxdash` logger tree while the test runs."""
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger("fxdash")
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

    def lines():
        return [json.loads(line) for line in stream.getvalue().splitlines()]

    yield lines
    logger.removeHandler(handler)
    logger.setLevel(previous)


def test_bound_fields_are_emitted_and_reset(captured):
    log = logging.getLogger("fxdash.test")
    token = request_id_ctx.set("req-1")
    try:
        with log_context(base_currency="USD"):
            log.info("inside")
        log.info("outside")
    finally:
        request_id_ctx.reset(token)

    inside, outside = captured()
    assert inside["msg"] == "inside"
    assert inside["base_currency"] == "USD"
    assert inside["request_id"] == "req-1"
    assert "base_currency" not in outside
    assert log_fields_ctx.get() == {}


def test_nested_context_merges_and_skips_none(captured):
    log = logging.getLogger("fxdash.test")
    with log_context(base_currency="EUR", currency=None):
        with log_context(currency="JPY"):
            log.info("nested")
        log.info("outer")

    nested, outer = captured()
    assert (nested["base_currency"], nested["currency"]) == ("EUR", "JPY")
    assert "currency" not in outer


def test_fields_cannot_shadow_record_attributes(captured):
    with log_context(levelname="NOPE", msg="spoofed", base_currency="GBP"):
        logging.getLogger("fxdash.test").warning("real")

    (line,) = captured()
    assert line["level"] == "WARNING"
    assert line["msg"] == "real"
    assert line["base_currency"] == "GBP"


def test_exception_lines_carry_error_type(captured):
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logging.getLogger("fxdash.test").exception("failed")

    (line,) = captured()
    assert line["error_type"] == "RuntimeError"
    assert "boom" in line["exc_info"]


async def test_refresh_logs_are_tagged_with_base_currency(store, clock, captured):
    svc = RateSyncService(store, FakeProvider(), clock=clock)

    await svc.force_refresh("gbp")

    lines = [l for l in captured() if l["logger"] == "fxdash.rates.sync"]
    assert lines
    assert all(l["base_currency"] == "GBP" and l["forced"] is True for l in lines)
    assert log_fields_ctx.get() == {}


async def test_history_failure_log_names_currency(store, clock, captured):
    failing = clock.now.date()
    svc = RateSyncService(store, FakeProvider(failing_days=[failing]), clock=clock)

    with pytest.raises(UpstreamError):
        await svc.get_history("jpy", days=2)

    (line,) = [l for l in captured() if l["level"] == "ERROR"]
    assert line["currency"] == "JPY"
    assert line["base_currency"] == "EUR"
    assert line["error_type"] == "UpstreamError"


def test_access_line_has_route_status_and_request_id(settings, captured):
    with TestClient(create_app(settings_override=settings)) as client:
        client.get("/health", headers={"X-Request-ID": "abc-123"})

    (line,) = [l for l in captured() if l["logger"] == "fxdash.request"]
    assert line["request_id"] == "abc-123"
    assert (line["method"], line["path"], line["status"]) == ("GET", "/health", 200)
    assert line["duration_ms"] >= 0
