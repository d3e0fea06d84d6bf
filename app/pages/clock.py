from fasthtml.common import *
from fasthtml.core import APIRouter
from monsterui.all import *
from powerclock import get_config
from entities import PowerClock
from pages.templates import app_template

rt = APIRouter()

SOURCE_URL = "https://github.com/StappsWorld/yew_test"


@rt('/')
@app_template("Powers of two")
def index(req: Request):
    """
    The doubling clock: FPS, current power, the value and its controls.
    """
    clock = PowerClock.get(req).refresh()
    max_modulus = get_config().clock.max_modulus

    return Main(
        clock,
        Div(
            P(data_text=f"'FPS: ' + String({PowerClock.Sfps}).padStart(3, '0')", cls="text-2xl"),
            P(data_text=f"'2^' + {PowerClock.Spower}", cls="text-2xl"),
            clock.value_view(),
            Button(
                data_text=f"{PowerClock.Spaused} ? 'Resume' : 'Pause'",
                data_on_click=PowerClock.toggle_pause(),
                cls=ButtonT.secondary + " mt-4",
            ),
            Div(
                P("Displaying on current modulus (lower is smoother, but less performant). Currently: ",
                  Span(data_text=PowerClock.Smodulus), cls="mb-2"),
                Input(
                    type="range", min="1", max=str(max_modulus), value=str(clock.modulus),
                    # Unbound: the stream keeps resending the server modulus
                    data_on_change=f"@get('{PowerClock.set_modulus.path}?new_modulus=' + evt.target.value)",
                ),
                Div(id="message", cls=TextPresets.muted_sm),
                cls="mt-10",
            ),
            A("Source", href=SOURCE_URL, target="_blank", cls=AT.muted + " mt-6"),
            data_on_load=PowerClock.live(),
            cls="flex flex-col items-center space-y-2",
        ),
        cls="container mx-auto p-8 max-w-3xl",
    )
