"""
Downstream broker publishers.
"""

from .memory import InMemoryBroker
from .mqtt import MqttBroker

__all__ = [
    "InMemoryBroker",
    "MqttBroker",
]
