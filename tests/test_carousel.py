import logging
import threading

import pytest

from src.store.storefront.carousel import Carousel, CarouselCursor

BANNERS = [{"id": i, "title": f"Slide {i}"} for i in range(3)]


class FakeTimer:
    def __init__(self, period_ms, callback):
        self.period_ms = period_ms
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True

    def fire(self):
        assert not self.stopped
        self.callback()


class FakeScheduler:
    def __init__(self):
        self.timers = []

    def every(self, period_ms, callback):
        timer = FakeTimer(period_ms, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if not t.stopped]


def _carousel(banners=BANNERS, interval_ms=6000):
    scheduler = FakeScheduler()
    return Carousel(lambda: list(banners), scheduler, interval_ms=interval_ms), scheduler


# ---------------------------------------------------------------- cursor
def test_three_advances_wrap_to_start():
    cursor = CarouselCursor(3)
    assert [cursor.advance() for _ in range(3)] == [1, 2, 0]


def test_previous_from_first_goes_to_last():
    cursor = CarouselCursor(3)
    assert cursor.previous() == 2


def test_select_and_bounds():
    cursor = CarouselCursor(3)
    assert cursor.select(2) == 2
    with pytest.raises(IndexError):
        cursor.select(3)
    with pytest.raises(IndexError):
        cursor.select(-1)


def test_empty_cursor_is_inert():
    cursor = CarouselCursor(0)
    assert cursor.advance() == 0
    assert cursor.previous() == 0
    assert cursor.select(5) == 0


def test_resize_keeps_index_in_range():
    cursor = CarouselCursor(5, index=4)
    cursor.resize(2)
    assert cursor.index == 0
    cursor.resize(0)
    assert cursor.index == 0


# -------------------------------------------------------------- carousel
def test_loading_until_banners_arrive():
    carousel, scheduler = _carousel()
    assert carousel.is_loading
    assert carousel.current is None

    carousel.mount()

    assert not carousel.is_loading
    assert carousel.current == BANNERS[0]
    assert len(scheduler.active) == 1
    assert scheduler.active[0].period_ms == 6000


def test_timer_advances_and_wraps():
    carousel, scheduler = _carousel()
    carousel.mount()
    timer = scheduler.active[0]

    for _ in range(3):
        timer.fire()
    assert carousel.index == 0
    timer.fire()
    assert carousel.current == BANNERS[1]


def test_manual_navigation_does_not_reset_the_timer():
    carousel, scheduler = _carousel()
    carousel.mount()

    carousel.previous()
    assert carousel.index == 2
    carousel.next()
    carousel.next()
    assert carousel.index == 1
    carousel.select(2)
    assert carousel.index == 2

    assert len(scheduler.timers) == 1
    assert carousel.timer_running


def test_fetch_failure_stays_loading_without_timer(caplog):
    def boom():
        raise ConnectionError("api down")

    scheduler = FakeScheduler()
    carousel = Carousel(boom, scheduler, interval_ms=1000)

    with caplog.at_level(logging.ERROR):
        carousel.mount()

    assert carousel.is_loading
    assert scheduler.timers == []
    assert "Banner fetch error" in caplog.text


def test_timer_stops_when_list_becomes_empty():
    carousel, scheduler = _carousel()
    carousel.mount()
    first = scheduler.timers[0]

    carousel.set_banners([])

    assert first.stopped
    assert not carousel.timer_running
    assert carousel.is_loading

    carousel.set_banners(BANNERS[:2])
    assert carousel.timer_running
    assert len(scheduler.active) == 1


def test_unmount_cancels_timer():
    carousel, scheduler = _carousel()
    carousel.mount()
    carousel.unmount()

    assert scheduler.active == []
    assert not carousel.timer_running


def test_empty_fetch_never_starts_timer():
    carousel, scheduler = _carousel(banners=[])
    carousel.mount()
    assert scheduler.timers == []
    carousel.next()
    assert carousel.index == 0


def test_listeners_see_every_change():
    carousel, _ = _carousel()
    seen = []
    carousel.on_change(lambda c: seen.append(c.index))

    carousel.mount()
    carousel.tick()
    carousel.previous()
    carousel.select(2)

    assert seen == [0, 1, 0, 2]


def test_default_interval_from_settings():
    carousel = Carousel(lambda: [], FakeScheduler())
    assert carousel.interval_ms == 6000


async def test_async_mount_fetches_in_a_worker_thread():
    loop_thread = threading.get_ident()
    fetch_threads = []

    def fetch():
        fetch_threads.append(threading.get_ident())
        return BANNERS

    scheduler = FakeScheduler()
    carousel = Carousel(fetch, scheduler, interval_ms=1000)

    await carousel.mount_async()

    assert fetch_threads and fetch_threads[0] != loop_thread
    assert carousel.current == BANNERS[0]
    assert len(scheduler.active) == 1


async def test_async_mount_drops_result_after_unmount():
    scheduler = FakeScheduler()
    carousel = Carousel(lambda: carousel.unmount() or BANNERS, scheduler, interval_ms=1000)

    await carousel.mount_async()

    assert carousel.is_loading
    assert scheduler.timers == []


async def test_async_mount_logs_fetch_failure(caplog):
    def boom():
        raise ConnectionError("api down")

    scheduler = FakeScheduler()
    carousel = Carousel(boom, scheduler, interval_ms=1000)

    with caplog.at_level(logging.ERROR):
        await carousel.mount_async()

    assert carousel.is_loading
    assert "Banner fetch error" in caplog.text
