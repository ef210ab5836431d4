"""
Relay driver: provision the topic, publish a fixed batch, then drain replies
until the holding queue stays empty for a full reply timeout.
"""
import sys
from enum import Enum
from typing import List

from .config import RelaySettings
from .context import RelayContext
from .messages import Message


class RelayState(Enum):
    IDLE = 1
    PROVISIONING = 2
    PUBLISHING = 3
    DRAINING = 4
    CLOSED = 5


class RelayDriver:
    def __init__(self, context: RelayContext, count: int = 10, prefix: str = "foo"):
        self.context = context
        self.count = count
        self.prefix = prefix
        self.state = RelayState.IDLE
        self.sent: List[str] = []
        self.received: List[Message] = []

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> "RelayDriver":
        return cls(RelayContext(settings), count=settings.message_count, prefix=settings.payload_prefix)

    def _transition(self, state: RelayState) -> None:
        print(f"[RELAY] {self.state.name} -> {state.name}", file=sys.stderr)
        self.state = state

    def run(self) -> int:
        """Run every phase once. Resources are released on all exit paths; returns the exit code."""
        try:
            self._transition(RelayState.PROVISIONING)
            self.context.provision()
            self.context.open_clients()

            self._transition(RelayState.PUBLISHING)
            self.publish()

            self._transition(RelayState.DRAINING)
            self.drain()
        finally:
            self.context.close()
            self._transition(RelayState.CLOSED)
        return 0

    def publish(self) -> None:
        gateway = self.context.gateway
        for i in range(self.count):
            message = f"{self.prefix}{i}"
            print("Send to Kafka: " + message)
            gateway.send_to_kafka(message)
            self.sent.append(message)

    def drain(self) -> None:
        gateway = self.context.gateway
        received = gateway.receive_from_kafka()
        while received is not None:
            print(received)
            self.received.append(received)
            received = gateway.receive_from_kafka()
