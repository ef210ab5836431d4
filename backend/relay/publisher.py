"""Fire-and-forget string publisher on top of KafkaProducer."""
import sys
from typing import List, Optional, Union

from kafka import KafkaProducer
from kafka.errors import KafkaError

from utils.logging import log_failed_kafka_message

from .exceptions import SendError
from .messages import Message, serialize_string

DEFAULT_SEND_TIMEOUT = 10


class Publisher:
    def __init__(self, bootstrap_servers: Union[str, List[str]], **producer_configs):
        self._producer = KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            key_serializer=serialize_string,
            value_serializer=serialize_string,
            **producer_configs
        )
        self._closed = False

    def send(self, topic: str, key: Optional[str], payload: str):
        """
        Hand one message to the producer and return its future without waiting
        for the broker. An empty key is sent as no key, so the partitioner
        picks the partition.
        """
        if not topic:
            raise SendError("topic is required")
        if not isinstance(payload, str):
            raise SendError(f"payload must be a string, got {type(payload).__name__}")

        message = Message(payload=payload, topic=topic, key=key or None)
        try:
            future = self._producer.send(topic, key=message.key, value=message.payload)
        except (KafkaError, TypeError, ValueError) as e:
            print(f"[KAFKA] Publish to {topic} failed: {e}", file=sys.stderr)
            log_failed_kafka_message(message.to_dict(), str(e))
            raise SendError(f"could not send to '{topic}': {e}") from e

        # Delivery failures surface later, on the producer's I/O thread
        future.add_errback(self._on_delivery_failure, message)
        return future

    def send_and_wait(self, topic: str, key: Optional[str], payload: str, timeout: float = DEFAULT_SEND_TIMEOUT):
        """Send and block until the broker acknowledges; returns the RecordMetadata."""
        future = self.send(topic, key, payload)
        try:
            return future.get(timeout=timeout)
        except KafkaError as e:
            raise SendError(f"'{payload}' was not acknowledged by '{topic}': {e}") from e

    def _on_delivery_failure(self, message: Message, exc: Exception) -> None:
        print(f"[KAFKA] Delivery to {message.topic} failed: {exc}", file=sys.stderr)
        log_failed_kafka_message(message.to_dict(), str(exc))

    def flush(self, timeout: Optional[float] = None) -> None:
        self._producer.flush(timeout=timeout)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # close() flushes pending records first
        self._producer.close()
        print("[KAFKA] Producer closed", file=sys.stderr)
