"""ASGI entrypoint for the ingredient resolver API."""

from ingredient_resolver.api.app import create_app
from ingredient_resolver.containers import build_container

app = create_app(build_container())
