"""
Pytest configuration file
This file is automatically loaded by pytest and sets up the Python path
so tests can import from the backend module. It also provides an in-memory
stand-in for the Kafka clients so no broker is needed.
"""
import sys
import threading
import time
from collections import namedtuple
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add backend directory to Python path
# This allows: from relay import X, from utils import Y
backend_path = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_path))

from relay import config as relay_config  # noqa: E402
from relay.config import ENV_VARS, RelaySettings  # noqa: E402

ALL_ENV_VARS = list(ENV_VARS.values()) + ["KAFKA_ADMIN_CONNECT", "KAFKA_ZOOKEEPER_CONNECT"]

Record = namedtuple("Record", "topic partition offset timestamp key value")


class FakeBroker:
    """Single-partition log per topic."""

    def __init__(self):
        self.topics = {}
        self._lock = threading.Lock()

    def append(self, topic, key, value):
        with self._lock:
            log = self.topics.setdefault(topic, [])
            record = Record(topic, 0, len(log), int(time.time() * 1000), key, value)
            log.append(record)
            return record

    def read(self, topic, offset):
        with self._lock:
            return list(self.topics.get(topic, [])[offset:])


class FakeProducer:
    def __init__(self, broker, key_serializer, value_serializer, **_):
        self.broker = broker
        self.key_serializer = key_serializer
        self.value_serializer = value_serializer
        self.sent = []
        self.closed = False

    def send(self, topic, key=None, value=None):
        record = self.broker.append(topic, self.key_serializer(key), self.value_serializer(value))
        self.sent.append((topic, key, value))
        future = MagicMock()
        future.get.return_value = record
        return future

    def flush(self, timeout=None):
        pass

    def close(self):
        self.closed = True


class FakeConsumer:
    def __init__(self, broker, **configs):
        self.broker = broker
        self.configs = configs
        self.positions = {}
        self.closed = False

    def assign(self, partitions):
        for tp in partitions:
            self.positions.setdefault(tp, 0)

    def seek(self, tp, offset):
        self.positions[tp] = offset

    def poll(self, timeout_ms=0, max_records=None):
        batches = {}
        for tp, position in list(self.positions.items()):
            records = self.broker.read(tp.topic, position)
            if records:
                batches[tp] = records
                self.positions[tp] = position + len(records)
        if not batches:
            time.sleep(0.01)
        return batches

    def close(self, autocommit=True):
        self.closed = True


class FakeKafka:
    def __init__(self):
        self.broker = FakeBroker()
        self.producers = []
        self.consumers = []
        self.admin = MagicMock()

    def make_producer(self, **configs):
        producer = FakeProducer(self.broker, **configs)
        self.producers.append(producer)
        return producer

    def make_consumer(self, **configs):
        consumer = FakeConsumer(self.broker, **configs)
        self.consumers.append(consumer)
        return consumer


@pytest.fixture(autouse=True)
def relay_env(monkeypatch, tmp_path):
    """Keep failure logs out of the working tree and consumer logs quiet."""
    monkeypatch.setenv("RELAY_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("VERBOSE_CONSUMER_LOGS", raising=False)
    return tmp_path / "logs"


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Drop relay settings from the environment and hide the project .env file."""
    for name in ALL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    missing = tmp_path / "missing.env"
    monkeypatch.setattr(relay_config, "ENV_PATH", missing)
    return missing


@pytest.fixture
def fake_kafka():
    kafka = FakeKafka()
    with patch("relay.provisioner.KafkaAdminClient", return_value=kafka.admin), \
            patch("relay.publisher.KafkaProducer", side_effect=kafka.make_producer), \
            patch("relay.subscriber.KafkaConsumer", side_effect=kafka.make_consumer):
        yield kafka


@pytest.fixture
def settings():
    return RelaySettings(topic="test-topic", reply_timeout_ms=300)
