import logging

from fasthtml.common import *
from monsterui.all import Theme, ThemeRadii
from powerclock import datastar_script, get_config
from powerclock.adapters.fasthtml import configure_app
from entities import PowerClock
from pages.clock import rt as clock_rt

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Build the FastHTML app with the clock routes and the page."""
    config = config or get_config()
    app, rt = fast_app(
        live=config.web.live_reload,
        debug=config.web.debug,
        secret_key=config.web.secret_key,
        pico=False,
        htmx=False,
        hdrs=(
            Theme.zinc.headers(radii=ThemeRadii.md),
            datastar_script,
        ),
        htmlkw=dict(cls="bg-background font-sans antialiased"),
    )
    configure_app(app, rt, [PowerClock], config)
    clock_rt.to_app(app)
    return app


app = create_app()


if __name__ == "__main__":
    web = get_config().web
    logger.info("PowerClock starting on http://%s:%s", web.host, web.port)
    serve(host=web.host, port=web.port, reload=web.debug)
