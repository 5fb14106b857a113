"""ASGI entrypoint: uvicorn hostal.api.app:app"""

from hostal.api.factory import create_app

app = create_app()
