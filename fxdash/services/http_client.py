from __future__ import annotations

"""Lightweight async HTTP helpers built on httpx.

Focus: GET/POST JSON with a single attempt. Callers translate HttpError into
their own domain errors; no retries happen here.
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Mapping, Optional

import httpx


class HttpError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


@asynccontextmanager
async def client_scope(
    client: Optional[httpx.AsyncClient], timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout) as owned:
        yield owned


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _check(response: httpx.Response) -> Any:
    payload = _decode(response)
    if response.is_error:
        reason = response.reason_phrase or f"HTTP {response.status_code}"
        raise HttpError(reason, status_code=response.status_code, payload=payload)
    if payload is None and response.content:
        raise HttpError(
            "response body is not valid JSON", status_code=response.status_code
        )
    return payload


async def get_json(
    client: Optional[httpx.AsyncClient],
    url: str,
    *,
    params: Optional[Mapping[str, Any]] = None,
    timeout: float = 10.0,
) -> Any:
    async with client_scope(client, timeout) as c:
        try:
            response = await c.get(url, params=params, timeout=timeout)
        except httpx.HTTPError as e:
            raise HttpError(f"{type(e).__name__}: {e}") from e
    return _check(response)


async def post_json(
    client: Optional[httpx.AsyncClient],
    url: str,
    *,
    body: Mapping[str, Any],
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 10.0,
) -> Any:
    async with client_scope(client, timeout) as c:
        try:
            response = await c.post(url, json=dict(body), headers=headers, timeout=timeout)
        except httpx.HTTPError as e:
            raise HttpError(f"{type(e).__name__}: {e}") from e
    return _check(response)
