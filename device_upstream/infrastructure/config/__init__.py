"""
Configuration models and loading.
"""

from .models import ApplicationConfig, LoggingConfig, MqttConfig
from .loader import ConfigLoader

__all__ = [
    "ApplicationConfig",
    "LoggingConfig",
    "MqttConfig",
    "ConfigLoader",
]
