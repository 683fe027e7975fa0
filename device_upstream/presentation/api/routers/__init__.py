"""
API routers.
"""

from . import health, upstream

__all__ = [
    "health",
    "upstream",
]
