"""
Upstream pipeline services.

This module contains the handlers behind the inbound entry points and the
shared publisher and side-effect recorder they end in.
"""

from .side_effects import SideEffectRecorder
from .publisher import MessagePublisher, build_message, generate_request_id
from .state_sync import StateSynchronizer
from .reporters import PropertyReporter, EventReporter
from .registrar import DeviceRegistrar
from .dispatcher import UpstreamDispatcher
from .upstream import DeviceUpstreamService

__all__ = [
    "SideEffectRecorder",
    "MessagePublisher",
    "build_message",
    "generate_request_id",
    "StateSynchronizer",
    "PropertyReporter",
    "EventReporter",
    "DeviceRegistrar",
    "UpstreamDispatcher",
    "DeviceUpstreamService",
]
