"""Topic provisioning. Runs before any client touches the topic so the producer
and consumer never race against a topic that does not exist yet."""
import sys
from typing import List, Union

from kafka import KafkaAdminClient
from kafka.admin import NewTopic
from kafka.errors import KafkaError, TopicAlreadyExistsError

from .exceptions import ProvisioningError

DEFAULT_ADMIN_TIMEOUT_MS = 6000


def ensure_topic(
    name: str,
    partitions: int = 1,
    replicas: int = 1,
    bootstrap_servers: Union[str, List[str]] = "localhost:9092",
    request_timeout_ms: int = DEFAULT_ADMIN_TIMEOUT_MS,
) -> bool:
    """
    Create the topic if it is absent.

    Returns True when the topic was created and False when it already existed.
    Any other failure raises ProvisioningError.
    """
    if not name:
        raise ProvisioningError("topic name is required")

    admin = None
    try:
        admin = KafkaAdminClient(
            bootstrap_servers=bootstrap_servers,
            request_timeout_ms=request_timeout_ms,
        )
        admin.create_topics(
            new_topics=[NewTopic(name=name, num_partitions=partitions, replication_factor=replicas)],
            validate_only=False,
        )
        print(
            f"[KAFKA] Created topic '{name}' ({partitions} partition(s), replication {replicas})",
            file=sys.stderr,
        )
        return True
    except TopicAlreadyExistsError:
        print(f"[KAFKA] Topic '{name}' already exists", file=sys.stderr)
        return False
    except (KafkaError, OSError) as e:
        raise ProvisioningError(f"could not create topic '{name}': {e}") from e
    finally:
        if admin is not None:
            admin.close()


class TopicProvisioner:
    """
    Startup component that makes sure the topic exists. It is started before
    the publisher and subscriber and has nothing to release on stop.
    """

    def __init__(
        self,
        topic: str,
        bootstrap_servers: Union[str, List[str]],
        partitions: int = 1,
        replicas: int = 1,
        request_timeout_ms: int = DEFAULT_ADMIN_TIMEOUT_MS,
    ):
        self.topic = topic
        self.bootstrap_servers = bootstrap_servers
        self.partitions = partitions
        self.replicas = replicas
        self.request_timeout_ms = request_timeout_ms
        self._running = False

    def start(self) -> None:
        ensure_topic(
            self.topic,
            partitions=self.partitions,
            replicas=self.replicas,
            bootstrap_servers=self.bootstrap_servers,
            request_timeout_ms=self.request_timeout_ms,
        )
        self._running = True

    def stop(self) -> None:
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running
