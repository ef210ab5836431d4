"""Builds the relay components from settings, starts them in order and releases them in reverse."""
from typing import Optional

from .config import RelaySettings
from .gateway import KafkaGateway
from .provisioner import TopicProvisioner
from .publisher import Publisher
from .subscriber import Subscriber


class RelayContext:
    """
    Usage:
        with RelayContext(settings) as context:
            context.gateway.send_to_kafka("foo")
            reply = context.gateway.receive_from_kafka()
    """

    def __init__(self, settings: RelaySettings):
        self.settings = settings
        self.provisioner = TopicProvisioner(
            settings.topic,
            bootstrap_servers=settings.admin_servers,
            request_timeout_ms=settings.admin_timeout_ms,
        )
        self.publisher: Optional[Publisher] = None
        self.subscriber: Optional[Subscriber] = None
        self.gateway: Optional[KafkaGateway] = None

    def provision(self) -> None:
        """Blocks until the topic exists. ProvisioningError propagates."""
        self.provisioner.start()

    def open_clients(self) -> KafkaGateway:
        s = self.settings
        self.publisher = Publisher(s.bootstrap_servers)
        self.subscriber = Subscriber(
            s.topic,
            bootstrap_servers=s.bootstrap_servers,
            group_id=s.group_id,
            initial_offset=s.initial_offset,
            queue_capacity=s.queue_capacity,
        )
        self.subscriber.start()
        self.gateway = KafkaGateway(
            self.publisher,
            self.subscriber,
            topic=s.topic,
            message_key=s.message_key,
            reply_timeout_ms=s.reply_timeout_ms,
        )
        return self.gateway

    def start(self) -> KafkaGateway:
        self.provision()
        return self.open_clients()

    def close(self) -> None:
        try:
            if self.subscriber is not None:
                self.subscriber.stop()
        finally:
            try:
                if self.publisher is not None:
                    self.publisher.close()
            finally:
                self.provisioner.stop()
                self.gateway = None

    def __enter__(self) -> "RelayContext":
        try:
            self.start()
        except BaseException:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
