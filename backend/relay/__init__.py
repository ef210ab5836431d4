"""Topic-ensuring Kafka relay: provision a topic, publish a batch, drain the replies."""
from .config import RelaySettings, load_settings
from .context import RelayContext
from .driver import RelayDriver, RelayState
from .exceptions import (
    ConfigurationError,
    DeserializationError,
    ProvisioningError,
    RelayError,
    SendError,
)
from .gateway import KafkaGateway
from .messages import Message
from .provisioner import TopicProvisioner, ensure_topic
from .publisher import Publisher
from .subscriber import Subscriber

__all__ = [
    'RelaySettings',
    'load_settings',
    'RelayContext',
    'RelayDriver',
    'RelayState',
    'ConfigurationError',
    'DeserializationError',
    'ProvisioningError',
    'RelayError',
    'SendError',
    'KafkaGateway',
    'Message',
    'TopicProvisioner',
    'ensure_topic',
    'Publisher',
    'Subscriber'
]
