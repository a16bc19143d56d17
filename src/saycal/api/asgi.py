"""ASGI entrypoint for the SayCal API."""

from saycal.api.app import create_app
from saycal.containers import build_container

app = create_app(build_container())
