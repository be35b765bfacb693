# app/services/change_feed.py
"""
In-process change notifications, by table name.

Routers publish after writing a row; the geofence monitor subscribes to
re-sweep on position changes and to refresh its alert list on alert
changes. Callbacks are coroutines run as background tasks, so publishing
never waits on (or fails because of) a subscriber.
"""

import asyncio
from collections import defaultdict
from typing import Awaitable, Callable

from app.utils.logger import get_logger

logger = get_logger(__name__)

ALL_TABLES = "*"

ChangeCallback = Callable[[str], Awaitable[None]]


class ChangeFeed:
    def __init__(self):
        self._subscribers: dict[str, list[ChangeCallback]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, table: str, callback: ChangeCallback) -> Callable[[], None]:
        """Register `callback` for changes on `table` ("*" for all). Returns an unsubscribe function."""
        self._subscribers[table].append(callback)

        def unsubscribe():
            if callback in self._subscribers[table]:
                self._subscribers[table].remove(callback)

        return unsubscribe

    def publish(self, table: str) -> list[asyncio.Task]:
        """Schedule every subscriber of `table`. Returns the scheduled tasks."""
        callbacks = list(self._subscribers.get(table, [])) + list(self._subscribers.get(ALL_TABLES, []))
        if not callbacks:
            return []

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"[FEED] No running loop, change on {table} not delivered")
            return []

        tasks = []
        for callback in callbacks:
            task = loop.create_task(self._deliver(table, callback))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        logger.debug(f"[FEED] {table} changed → {len(tasks)} subscriber(s)")
        return tasks

    async def _deliver(self, table: str, callback: ChangeCallback):
        try:
            await callback(table)
        except Exception as e:
            logger.error(f"[FEED] Subscriber failed for {table}: {e}", exc_info=True)

    def subscriber_count(self, table: str) -> int:
        return len(self._subscribers.get(table, []))


change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    """FastAPI dependency."""
    return change_feed
