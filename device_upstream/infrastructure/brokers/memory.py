"""
In-process message broker.

Delivers outbound device messages to local subscribers by topic pattern
(``state.*``, ``register.register_sub``) and keeps a bounded history for
inspection. Used as the default broker and by downstream consumers that run
in the same process.
"""

import asyncio
import fnmatch
import logging
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List

from ...core.domain.messages import OutboundMessage
from ...core.exceptions import TransportError
from ...core.interfaces.lifecycle import IComponent
from ...core.interfaces.messaging import ISubscribableBroker

logger = logging.getLogger(__name__)

MessageHandler = Callable[[OutboundMessage], Any]


@dataclass
class MessageSubscription:
    subscription_id: str
    topic_pattern: str
    handler: MessageHandler
    delivered: int = 0
    failed: int = 0

    def matches(self, topic: str) -> bool:
        return fnmatch.fnmatchcase(topic, self.topic_pattern)


class InMemoryBroker(IComponent, ISubscribableBroker):
    """
    Topic-routed in-process broker.

    Subscriber failures are counted and logged; they do not fail the publish.
    Publishing while stopped raises TransportError.
    """

    def __init__(self, history_size: int = 1000) -> None:
        self._subscriptions: Dict[str, MessageSubscription] = {}
        self._history: Deque[OutboundMessage] = deque(maxlen=history_size)
        self._running = False
        self._metrics = {
            'messages_published': 0,
            'messages_delivered': 0,
            'delivery_failures': 0
        }

    @property
    def name(self) -> str:
        return "InMemoryBroker"

    @property
    def history(self) -> List[OutboundMessage]:
        return list(self._history)

    async def start(self) -> None:
        if not self._running:
            self._running = True
            logger.info("In-memory broker started")

    async def stop(self) -> None:
        if self._running:
            self._running = False
            self._subscriptions.clear()
            logger.info("In-memory broker stopped")

    async def check_health(self) -> Dict[str, Any]:
        return {
            'healthy': self._running,
            'status': 'running' if self._running else 'stopped',
            'details': {'history_size': len(self._history), **await self.get_metrics()}
        }

    async def publish(self, message: OutboundMessage) -> None:
        if not self._running:
            raise TransportError("In-memory broker is not running")

        self._history.append(message)
        self._metrics['messages_published'] += 1

        topic = message.topic
        for subscription in [s for s in self._subscriptions.values() if s.matches(topic)]:
            await self._deliver(subscription, message)

    async def subscribe(self, topic: str, handler: MessageHandler) -> str:
        subscription = MessageSubscription(uuid.uuid4().hex, topic, handler)
        self._subscriptions[subscription.subscription_id] = subscription
        logger.debug(f"Subscribed {subscription.subscription_id} to '{topic}'")
        return subscription.subscription_id

    async def unsubscribe(self, subscription_id: str) -> bool:
        return self._subscriptions.pop(subscription_id, None) is not None

    async def get_metrics(self) -> Dict[str, Any]:
        return {**self._metrics, 'subscriptions_count': len(self._subscriptions)}

    def clear_history(self) -> None:
        self._history.clear()

    async def _deliver(self, subscription: MessageSubscription, message: OutboundMessage) -> None:
        try:
            result = subscription.handler(message)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            subscription.failed += 1
            self._metrics['delivery_failures'] += 1
            logger.error(f"Subscriber {subscription.subscription_id} failed on {message.topic}: {e}")
            return

        subscription.delivered += 1
        self._metrics['messages_delivered'] += 1
