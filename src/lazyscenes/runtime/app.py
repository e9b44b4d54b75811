from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from ..api import create_api_app
from ..core.registry import LazyRegistry


def create_app(registry: LazyRegistry[Any] | None = None) -> FastAPI:
    """Create the full host app.

    For uvicorn: `uvicorn --factory lazyscenes.runtime.app:create_app`
    """

    return create_api_app(registry)
