"""
Configuration models and data structures.

This module defines the configuration models used throughout the application,
providing type safety and validation for configuration values.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

BROKER_KINDS = ("memory", "mqtt")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ApiConfig:
    """HTTP API configuration."""
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class MqttConfig:
    """MQTT broker publisher configuration."""
    host: str = "localhost"
    port: int = 1883
    client_id: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    keepalive: int = 60
    qos: int = 1
    topic_prefix: str = "iot/upstream"


@dataclass
class BrokerConfig:
    """Downstream broker selection."""
    kind: str = "memory"
    history_size: int = 1000
    mqtt: MqttConfig = field(default_factory=MqttConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BrokerConfig':
        data = dict(data)
        mqtt = MqttConfig(**data.pop('mqtt', {}))
        return cls(mqtt=mqtt, **data)


@dataclass
class DirectoryConfig:
    """Device directory cache configuration."""
    cache_enabled: bool = True
    cache_size: int = 10000
    cache_ttl: float = 60.0


@dataclass
class SideEffectConfig:
    """Side-effect worker pool configuration."""
    workers: int = 4
    queue_size: int = 10000


@dataclass
class RegistrationConfig:
    """Device registration policy."""
    abort_on_sub_device_error: bool = False


@dataclass
class StateConfig:
    """State synchronization policy."""
    serialize_per_device: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False


@dataclass
class ProductConfig:
    """Product catalog entry seeded into the in-memory directory."""
    product_key: str
    tenant_id: int
    device_type: str = "standalone"


@dataclass
class DeviceSeedConfig:
    """Device seeded into the in-memory directory at startup."""
    product_key: str
    device_name: str
    state: str = "INACTIVE"


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    # Basic application settings
    name: str = "Device Upstream"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    # Component configurations
    api: ApiConfig = field(default_factory=ApiConfig)
    broker: BrokerConfig = field(default_factory=BrokerConfig)
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    side_effects: SideEffectConfig = field(default_factory=SideEffectConfig)
    registration: RegistrationConfig = field(default_factory=RegistrationConfig)
    state: StateConfig = field(default_factory=StateConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Directory seed data
    products: List[ProductConfig] = field(default_factory=list)
    devices: List[DeviceSeedConfig] = field(default_factory=list)

    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_ports()
        self._validate_pools()
        self._validate_choices()

    def _validate_ports(self) -> None:
        ports = [
            ("API port", self.api.port),
            ("MQTT port", self.broker.mqtt.port),
        ]

        for name, port in ports:
            if not (1 <= port <= 65535):
                raise ValueError(f"{name} must be between 1 and 65535, got {port}")

    def _validate_pools(self) -> None:
        if self.side_effects.workers < 1:
            raise ValueError(f"Side-effect workers must be at least 1, got {self.side_effects.workers}")
        if self.side_effects.queue_size < 1:
            raise ValueError(f"Side-effect queue size must be at least 1, got {self.side_effects.queue_size}")
        if self.directory.cache_ttl <= 0:
            raise ValueError(f"Directory cache TTL must be positive, got {self.directory.cache_ttl}")

    def _validate_choices(self) -> None:
        if self.broker.kind not in BROKER_KINDS:
            raise ValueError(f"Broker kind must be one of {BROKER_KINDS}, got {self.broker.kind!r}")
        if self.broker.mqtt.qos not in (0, 1, 2):
            raise ValueError(f"MQTT QoS must be 0, 1 or 2, got {self.broker.mqtt.qos}")
        if self.logging.level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.logging.level}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        return cls(
            name=data.get('name', 'Device Upstream'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            api=ApiConfig(**data.get('api', {})),
            broker=BrokerConfig.from_dict(data.get('broker', {})),
            directory=DirectoryConfig(**data.get('directory', {})),
            side_effects=SideEffectConfig(**data.get('side_effects', {})),
            registration=RegistrationConfig(**data.get('registration', {})),
            state=StateConfig(**data.get('state', {})),
            logging=LoggingConfig(**data.get('logging', {})),
            products=[ProductConfig(**item) for item in data.get('products', [])],
            devices=[DeviceSeedConfig(**item) for item in data.get('devices', [])],
            config_file_path=data.get('config_file_path')
        )
