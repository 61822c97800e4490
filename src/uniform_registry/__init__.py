"""Uniform Registry service package.

Exposes `create_app` for ASGI servers and tests.
"""

from .api import create_app

__all__: list[str] = ["create_app"]
