# src/store/storefront/carousel.py
"""
State behind the homepage banner carousel.

The carousel fetches the public banner list once when mounted, shows a
loading placeholder while that list is empty and rotates through it on a
fixed timer. Prev/next and indicator clicks move the cursor immediately but
leave the timer alone, so the next automatic step lands on its usual beat.
Timer ticks and clicks run on the same event loop and both just overwrite
the index.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from src.store.config import settings

logger = logging.getLogger(__name__)

Banner = Dict[str, Any]


class TimerHandle(Protocol):
    def stop(self) -> None: ...


class Scheduler(Protocol):
    def every(self, period_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class CarouselCursor:
    """Circular index over a fixed-length sequence."""

    def __init__(self, size: int = 0, index: int = 0):
        self.size = size
        self.index = index % size if size else 0

    def resize(self, size: int) -> None:
        self.size = size
        self.index = self.index % size if size else 0

    def advance(self) -> int:
        if self.size:
            self.index = (self.index + 1) % self.size
        return self.index

    next = advance

    def previous(self) -> int:
        if self.size:
            self.index = (self.index - 1 + self.size) % self.size
        return self.index

    def select(self, index: int) -> int:
        if self.size:
            if not 0 <= index < self.size:
                raise IndexError(f"slide {index} out of range 0..{self.size - 1}")
            self.index = index
        return self.index


class Carousel:
    def __init__(
        self,
        fetch: Callable[[], Sequence[Banner]],
        scheduler: Scheduler,
        interval_ms: Optional[int] = None,
    ):
        self.fetch = fetch
        self.scheduler = scheduler
        self.interval_ms = interval_ms or settings.CAROUSEL_INTERVAL_MS
        self.banners: List[Banner] = []
        self.cursor = CarouselCursor()
        self._timer: Optional[TimerHandle] = None
        self._listeners: List[Callable[["Carousel"], None]] = []
        self.mounted = False

    # ------------------------------------------------------------------
    @property
    def is_loading(self) -> bool:
        return not self.banners

    @property
    def index(self) -> int:
        return self.cursor.index

    @property
    def current(self) -> Optional[Banner]:
        return self.banners[self.cursor.index] if self.banners else None

    @property
    def timer_running(self) -> bool:
        return self._timer is not None

    def on_change(self, listener: Callable[["Carousel"], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _load(self) -> List[Banner]:
        try:
            return list(self.fetch() or [])
        except Exception as e:
            # stays on the loading placeholder; no retry
            logger.error("Banner fetch error: %s", e)
            return []

    def mount(self) -> None:
        self.mounted = True
        self.set_banners(self._load())

    async def mount_async(self) -> None:
        """
        Same as `mount` but the blocking fetch runs in a worker thread so the
        event loop keeps serving other sessions. The list is applied back on
        the loop, and dropped if the view was unmounted meanwhile.
        """
        self.mounted = True
        banners = await asyncio.to_thread(self._load)
        if self.mounted:
            self.set_banners(banners)

    def unmount(self) -> None:
        self.mounted = False
        self._stop_timer()

    def set_banners(self, banners: Sequence[Banner]) -> None:
        self.banners = list(banners)
        self.cursor.resize(len(self.banners))
        # the timer is tied to the list: restarted on every new list,
        # dropped when the list is empty
        self._stop_timer()
        if self.banners and self.mounted:
            self._timer = self.scheduler.every(self.interval_ms, self.tick)
        self._notify()

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def tick(self) -> None:
        self.cursor.advance()
        self._notify()

    def next(self) -> None:
        self.cursor.next()
        self._notify()

    def previous(self) -> None:
        self.cursor.previous()
        self._notify()

    def select(self, index: int) -> None:
        self.cursor.select(index)
        self._notify()
