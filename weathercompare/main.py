"""ASGI entry point: ``uvicorn weathercompare.main:app``."""

from weathercompare import create_app

app = create_app()
