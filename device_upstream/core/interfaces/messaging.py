"""
Messaging interfaces for handing outbound device messages to a broker.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from ..domain.messages import OutboundMessage


class IBrokerPublisher(ABC):
    """Interface for downstream message broker publishers."""

    @abstractmethod
    async def publish(self, message: OutboundMessage) -> None:
        """
        Hand a completed message to the broker.

        Args:
            message: Message with identity, request id and report time set

        Raises:
            TransportError: If the broker does not accept the message
        """
        pass

    @abstractmethod
    async def get_metrics(self) -> Dict[str, Any]:
        """Get publisher metrics."""
        pass


class ISubscribableBroker(IBrokerPublisher):
    """Broker that can also deliver messages to in-process consumers."""

    @abstractmethod
    async def subscribe(self, topic: str, handler: Callable[[OutboundMessage], Any]) -> str:
        """
        Subscribe to messages by topic pattern (supports wildcards).

        Returns:
            Subscription ID for unsubscribing
        """
        pass

    @abstractmethod
    async def unsubscribe(self, subscription_id: str) -> bool:
        pass
