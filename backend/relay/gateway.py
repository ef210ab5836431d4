"""Request/reply facade: one call publishes to the configured topic, the other waits for the next reply."""
from typing import Optional

from .messages import Message
from .publisher import Publisher
from .subscriber import Subscriber


class KafkaGateway:
    def __init__(
        self,
        publisher: Publisher,
        subscriber: Subscriber,
        topic: str,
        message_key: Optional[str],
        reply_timeout_ms: int = 10000,
    ):
        self._publisher = publisher
        self._subscriber = subscriber
        self.topic = topic
        self.message_key = message_key
        self.reply_timeout_ms = reply_timeout_ms

    def send_to_kafka(self, payload: str):
        return self._publisher.send(self.topic, self.message_key, payload)

    def receive_from_kafka(self) -> Optional[Message]:
        """Returns None once no message arrived within the reply timeout."""
        return self._subscriber.receive(timeout=self.reply_timeout_ms / 1000)
