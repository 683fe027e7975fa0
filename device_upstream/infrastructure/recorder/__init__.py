"""
Side-effect sink implementations.
"""

from .memory import InMemoryPluginMappingStore, InMemoryReportTimeStore

__all__ = [
    "InMemoryPluginMappingStore",
    "InMemoryReportTimeStore",
]
