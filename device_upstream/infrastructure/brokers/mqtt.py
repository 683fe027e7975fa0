"""
MQTT broker publisher.

Publishes outbound device messages as JSON on
``<prefix>/<tenant_id>/<device_key>/<type>/<identifier>``. The paho network
loop runs on its own thread; publish only enqueues and checks the return
code, so a handler never waits on the network.
"""

import logging
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from ...core.domain.messages import OutboundMessage
from ...core.exceptions import TransportError
from ...core.interfaces.lifecycle import IComponent
from ...core.interfaces.messaging import IBrokerPublisher
from ..config.models import MqttConfig

logger = logging.getLogger(__name__)


class MqttBroker(IComponent, IBrokerPublisher):
    """paho-mqtt backed broker publisher."""

    def __init__(self, config: MqttConfig, client: Optional[mqtt.Client] = None) -> None:
        self._config = config
        self._client = client or mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=config.client_id or ""
        )
        self._connected = False
        self._running = False

        self._metrics = {
            'messages_published': 0,
            'publish_failures': 0,
            'disconnects': 0
        }

        if config.username:
            self._client.username_pw_set(config.username, config.password)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect

    @property
    def name(self) -> str:
        return "MqttBroker"

    async def start(self) -> None:
        if self._running:
            return

        logger.info(f"Connecting to MQTT broker {self._config.host}:{self._config.port}")
        try:
            self._client.connect_async(self._config.host, self._config.port, self._config.keepalive)
        except (OSError, ValueError) as e:
            raise TransportError(f"Cannot connect to MQTT broker: {e}") from e
        self._client.loop_start()
        self._running = True

    async def stop(self) -> None:
        if not self._running:
            return

        self._client.disconnect()
        self._client.loop_stop()
        self._running = False
        self._connected = False
        logger.info("MQTT broker publisher stopped")

    async def check_health(self) -> Dict[str, Any]:
        return {
            'healthy': self._connected,
            'status': 'connected' if self._connected else ('connecting' if self._running else 'stopped'),
            'details': {
                'host': self._config.host,
                'port': self._config.port,
                **self._metrics
            }
        }

    def topic_for(self, message: OutboundMessage) -> str:
        return "/".join([
            self._config.topic_prefix.rstrip("/"),
            str(message.tenant_id),
            str(message.device_key),
            message.type.value,
            message.identifier,
        ])

    async def publish(self, message: OutboundMessage) -> None:
        if not self._running:
            raise TransportError("MQTT broker publisher is not running")

        topic = self.topic_for(message)
        info = self._client.publish(topic, message.to_json(), qos=self._config.qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._metrics['publish_failures'] += 1
            raise TransportError(f"MQTT publish to {topic} failed: {mqtt.error_string(info.rc)}")

        self._metrics['messages_published'] += 1

    async def get_metrics(self) -> Dict[str, Any]:
        return self._metrics.copy()

    def _on_connect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any) -> None:
        if reason_code.is_failure:
            logger.error(f"MQTT connection refused: {reason_code}")
            return
        self._connected = True
        logger.info("Connected to MQTT broker")

    def _on_disconnect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any) -> None:
        self._connected = False
        self._metrics['disconnects'] += 1
        logger.warning(f"Disconnected from MQTT broker: {reason_code}")
