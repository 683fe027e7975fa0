"""
Device directory implementations.
"""

from .memory import InMemoryDeviceDirectory
from .cached import CachedDeviceDirectory

__all__ = [
    "InMemoryDeviceDirectory",
    "CachedDeviceDirectory",
]
