"""ASGI entrypoint for the beer counter API."""

from beer_counter.api.app import create_app
from beer_counter.containers import build_container

app = create_app(build_container())
