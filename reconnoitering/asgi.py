"""ASGI entry point: ``uvicorn reconnoitering.asgi:app``.

Importing this module opens the configured store.
"""
from __future__ import annotations

from .app import create_app

app = create_app()
