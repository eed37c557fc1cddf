"""In-process change feed.

Stand-in for the hosted backend's realtime push: interested consumers
subscribe to a table and re-fetch when a change is published. Delivery is
synchronous and in subscription order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping

ChangeCallback = Callable[[str, Mapping[str, Any]], None]
Unsubscribe = Callable[[], None]

logger = logging.getLogger("fxdash.realtime")


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[ChangeCallback]] = defaultdict(list)

    def subscribe(self, table: str, callback: ChangeCallback) -> Unsubscribe:
        self._subscribers[table].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(table, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def subscriber_count(self, table: str) -> int:
        return len(self._subscribers.get(table, []))

    def publish(self, table: str, payload: Mapping[str, Any]) -> None:
        # copy: callbacks may unsubscribe while being notified
        for callback in list(self._subscribers.get(table, [])):
            try:
                callback(table, payload)
            except Exception:
                logger.exception("change subscriber failed for table %s", table)
