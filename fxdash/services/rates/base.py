from __future__ import annotations

"""Rate provider abstraction.

The sync service depends only on this interface, so tests can swap in fakes
and another upstream API can be plugged in without touching the service.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Iterable


class RateProvider(ABC):
    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """False when the provider credential is missing."""
        raise NotImplementedError

    @abstractmethod
    async def latest(self, base_currency: str) -> Dict[str, float]:
        """Return {target_currency: rate} for 1 unit of base_currency."""
        raise NotImplementedError

    @abstractmethod
    async def historical(
        self, day: date, base_currency: str, symbols: Iterable[str]
    ) -> Dict[str, float]:
        """Return the rates published for `day`, restricted to `symbols`."""
        raise NotImplementedError
