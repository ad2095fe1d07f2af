from frontend.carousel_view import LOADING_HTML, build_carousel, slide_html

BANNERS = [
    {
        "id": 1,
        "title": "Wedding Catering",
        "subtitle": "From 50 guests",
        "badge": "NEW",
        "features": ["Halal", "Live stations"],
        "link": "/catering",
        "buttonText": "Get a quote",
        "image": "https://cdn/wedding.jpg",
    },
    {"id": 2, "title": "Iftar <Boxes>", "image": "https://cdn/iftar.jpg"},
]


class FakeTimer:
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeScheduler:
    def __init__(self):
        self.timers = []

    def every(self, period_ms, callback):
        self.timers.append(FakeTimer())
        return self.timers[-1]


def test_slide_html_renders_and_escapes():
    out = slide_html(BANNERS[0])
    assert "Wedding Catering" in out
    assert "<li>Halal</li>" in out
    assert 'href="/catering"' in out
    assert "Get a quote" in out

    escaped = slide_html(BANNERS[1])
    assert "Iftar &lt;Boxes&gt;" in escaped
    assert "Shop now" not in escaped


def test_view_shows_placeholder_then_slides():
    scheduler = FakeScheduler()
    view = build_carousel(lambda: BANNERS, scheduler=scheduler, interval_ms=5000)
    view.render()
    assert view.slide.object == LOADING_HTML
    assert view.prev_button.disabled

    view.carousel.mount()

    assert "Wedding Catering" in view.slide.object
    assert len(view.indicators.objects) == 2
    assert view.indicators.objects[0].button_type == "primary"
    assert not view.next_button.disabled


def test_buttons_drive_the_carousel():
    view = build_carousel(lambda: BANNERS, scheduler=FakeScheduler())
    view.carousel.mount()

    view.next_button.clicks += 1
    assert view.carousel.index == 1
    assert "Iftar" in view.slide.object

    view.prev_button.clicks += 1
    assert view.carousel.index == 0

    view.indicators.objects[1].clicks += 1
    assert view.carousel.index == 1
    assert view.indicators.objects[1].button_type == "primary"
    assert view.indicators.objects[0].button_type == "light"
