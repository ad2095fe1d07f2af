# frontend/carousel_view.py
from __future__ import annotations

import html
from typing import Any, Callable, Dict, List, Optional

import panel as pn

from src.store.storefront.carousel import Banner, Carousel, Scheduler, TimerHandle

LOADING_HTML = '<div class="carousel-loading">Loading banners…</div>'


class PanelScheduler:
    """Carousel timer on the Bokeh server event loop of the current session."""

    def every(self, period_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return pn.state.add_periodic_callback(callback, period=period_ms)


def _esc(value: Any) -> str:
    return html.escape(str(value)) if value else ""


def slide_html(banner: Banner) -> str:
    """One slide; the API hands out camelCase keys."""
    parts: List[str] = [f'<div class="slide" style="background-image:url(\'{_esc(banner.get("image"))}\')">']
    parts.append('<div class="slide-body">')
    if banner.get("badge"):
        parts.append(f'<span class="badge">{_esc(banner["badge"])}</span>')
    parts.append(f'<h2>{_esc(banner.get("title"))}</h2>')
    if banner.get("subtitle"):
        parts.append(f'<p class="subtitle">{_esc(banner["subtitle"])}</p>')
    features = banner.get("features") or []
    if features:
        parts.append("<ul>" + "".join(f"<li>{_esc(f)}</li>" for f in features) + "</ul>")
    if banner.get("description"):
        parts.append(f'<p>{_esc(banner["description"])}</p>')
    if banner.get("link"):
        label = _esc(banner.get("buttonText") or "Shop now")
        parts.append(f'<a class="cta" href="{_esc(banner["link"])}">{label}</a>')
    parts.append("</div></div>")
    return "".join(parts)


class CarouselView:
    def __init__(self, carousel: Carousel):
        self.carousel = carousel
        self.slide = pn.pane.HTML(LOADING_HTML, sizing_mode="stretch_width", min_height=320)
        self.prev_button = pn.widgets.Button(name="‹", width=40)
        self.next_button = pn.widgets.Button(name="›", width=40)
        self.indicators = pn.Row()
        self.prev_button.on_click(lambda event: self.carousel.previous())
        self.next_button.on_click(lambda event: self.carousel.next())
        self.layout = pn.Column(
            pn.Row(self.prev_button, self.slide, self.next_button, sizing_mode="stretch_width"),
            self.indicators,
            sizing_mode="stretch_width",
        )
        carousel.on_change(self.render)
        self._indicator_count = -1

    def _indicator(self, i: int) -> pn.widgets.Button:
        button = pn.widgets.Button(name="●", width=28, button_type="light")
        button.on_click(lambda event, i=i: self.carousel.select(i))
        return button

    def render(self, carousel: Optional[Carousel] = None) -> None:
        c = carousel or self.carousel
        current = c.current
        if current is None:
            self.slide.object = LOADING_HTML
        else:
            self.slide.object = slide_html(current)

        size = len(c.banners)
        if size != self._indicator_count:
            self.indicators.objects = [self._indicator(i) for i in range(size)]
            self._indicator_count = size
        for i, button in enumerate(self.indicators.objects):
            button.button_type = "primary" if i == c.index else "light"
        disabled = size < 2
        self.prev_button.disabled = disabled
        self.next_button.disabled = disabled

    def __panel__(self):
        return self.layout


def build_carousel(
    fetch: Callable[[], List[Dict[str, Any]]],
    scheduler: Optional[Scheduler] = None,
    interval_ms: Optional[int] = None,
) -> CarouselView:
    carousel = Carousel(fetch, scheduler or PanelScheduler(), interval_ms=interval_ms)
    return CarouselView(carousel)
