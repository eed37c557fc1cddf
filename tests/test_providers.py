"""exchangeratesapi.io provider tests."""

from datetime import date

import httpx
import pytest

from fxdash.core.config import Settings
from fxdash.core.errors import ConfigurationError, UpstreamError
from fxdash.services.rates.providers import ExchangeRatesApiProvider, make_rate_provider

BASE_URL = "http://rates.test/v1"


def _provider(handler, api_key="secret") -> tuple[ExchangeRatesApiProvider, list]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(record))
    return ExchangeRatesApiProvider(api_key, BASE_URL, client=client), seen


async def test_latest_sends_key_and_base():
    provider, seen = _provider(
        lambda r: httpx.Response(
            200, json={"success": True, "base": "USD", "rates": {"EUR": 0.93, "gbp": 0.79}}
        )
    )

    rates = await provider.latest("USD")

    assert rates == {"EUR": 0.93, "GBP": 0.79}
    assert seen[0].url.path == "/v1/latest"
    assert seen[0].url.params["access_key"] == "secret"
    assert seen[0].url.params["base"] == "USD"


async def test_historical_uses_date_path_and_symbols():
    provider, seen = _provider(
        lambda r: httpx.Response(200, json={"success": True, "rates": {"USD": 1.08}})
    )

    rates = await provider.historical(date(2024, 5, 3), "EUR", ["USD"])

    assert rates == {"USD": 1.08}
    assert seen[0].url.path == "/v1/2024-05-03"
    assert seen[0].url.params["symbols"] == "USD"
    assert seen[0].url.params["base"] == "EUR"


async def test_non_success_status_is_upstream_error():
    provider, _ = _provider(lambda r: httpx.Response(503))

    with pytest.raises(UpstreamError) as exc_info:
        await provider.latest("JPY")

    assert "Service Unavailable" in exc_info.value.message
    assert exc_info.value.upstream_status == 503


async def test_error_envelope_keeps_provider_message():
    provider, _ = _provider(
        lambda r: httpx.Response(
            200,
            json={
                "success": False,
                "error": {"code": 105, "info": "Access Restricted - Your current Subscription Plan does not support Source Currency Switching."},
            },
        )
    )

    with pytest.raises(UpstreamError, match="API Error: Access Restricted"):
        await provider.latest("USD")


async def test_payload_without_success_flag_is_rejected():
    provider, _ = _provider(lambda r: httpx.Response(200, json={"rates": {"USD": 1.0}}))

    with pytest.raises(UpstreamError, match="Unknown error"):
        await provider.latest("EUR")


async def test_transport_error_is_upstream_error():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider, _ = _provider(boom)

    with pytest.raises(UpstreamError, match="ConnectError"):
        await provider.latest("EUR")


async def test_missing_key_raises_before_request():
    provider, seen = _provider(lambda r: httpx.Response(200, json={}), api_key=None)

    assert provider.is_configured is False
    with pytest.raises(ConfigurationError):
        await provider.latest("EUR")
    assert seen == []


def test_factory_reads_settings(tmp_path):
    settings = Settings(
        db_path=tmp_path / "x.sqlite3",
        exchange_rates_api_key="abc",
        exchange_rates_api_url="https://example.test/v1/",
    )
    provider = make_rate_provider(settings)

    assert isinstance(provider, ExchangeRatesApiProvider)
    assert provider.is_configured
    assert provider._base_url == "https://example.test/v1"
