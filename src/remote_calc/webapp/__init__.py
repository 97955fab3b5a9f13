"""
Web front-end for remote-calc.

Serves the calculator page and proxies calculations to the computation service.
"""

from .server import app

__all__ = ["app"]
