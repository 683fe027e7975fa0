"""
Core interfaces defining the contracts between the upstream pipeline and its
collaborators.
"""

from .lifecycle import IStartable, IStoppable, IHealthCheckable, IComponent
from .directory import IDeviceDirectory
from .sinks import IPluginMappingSink, IReportTimeSink
from .messaging import IBrokerPublisher, ISubscribableBroker
from .upstream import IDeviceUpstreamService

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IComponent",
    "IDeviceDirectory",
    "IPluginMappingSink",
    "IReportTimeSink",
    "IBrokerPublisher",
    "ISubscribableBroker",
    "IDeviceUpstreamService",
]
