# frontend/storefront.py
"""
Storefront home page.

    panel serve frontend/storefront.py --port 5006
"""
import panel as pn

from frontend.carousel_view import build_carousel
from src.store.services.banner_client import BannerApiClient
from src.store.utils.logging_setup import configure_logging

configure_logging()

pn.extension()


def storefront() -> pn.Column:
    client = BannerApiClient()
    view = build_carousel(client.list_public)

    # fetch off the Bokeh loop; a slow API must not stall other sessions
    pn.state.onload(view.carousel.mount_async)
    pn.state.on_session_destroyed(lambda session_context: view.carousel.unmount())

    return pn.Column(
        view,
        pn.pane.Markdown("## Fresh from our kitchen"),
        sizing_mode="stretch_width",
    )


storefront().servable(title="Ave Store")
