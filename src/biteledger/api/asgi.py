"""ASGI entrypoint for the food diary API."""

from biteledger.api.app import create_app
from biteledger.containers import build_container

app = create_app(build_container())
