import logging

from streamlit_js_eval import streamlit_js_eval

logger = logging.getLogger(__name__)

GEOLOCATION_TIMEOUT_MS = 5000
LOCATION_STATE_KEY = "device_location"


class GeolocationError(Exception):
    """The device position is not available."""


def request_browser_location(key="get_location"):
    """
    Ask the browser for the current position.

    Returns (latitude, longitude) once the browser answers, otherwise None.
    The first script run after the request usually returns None; the value
    arrives on the next rerun.
    """
    loc = streamlit_js_eval(
        js_expressions=f"""
        new Promise((resolve) => {{
            navigator.geolocation.getCurrentPosition(
                (pos) => resolve({{coords:{{latitude:pos.coords.latitude, longitude:pos.coords.longitude}}}}),
                (err) => resolve({{error: err.message}}),
                {{ timeout: {GEOLOCATION_TIMEOUT_MS} }}
            );
        }})
        """,
        key=key,
    )
    if not loc:
        return None
    if "error" in loc:
        logger.warning("Geolocation error: %s", loc["error"])
        return None
    return loc["coords"]["latitude"], loc["coords"]["longitude"]


def make_session_locator(session_state):
    """Return a callable giving the device location stored in the session."""
    def locate():
        location = session_state.get(LOCATION_STATE_KEY)
        if not location:
            raise GeolocationError("AI found no GPS data and location access was denied.")
        return location
    return locate
