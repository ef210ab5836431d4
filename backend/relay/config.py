"""Relay settings. Values come from the environment, optionally loaded from a .env
file in the project root, and are validated before any client is created."""
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

DEFAULT_GROUP_ID = "siTestGroup"

# Project root is two levels above backend/relay
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_PATH = PROJECT_ROOT / ".env"

# Settings field -> environment variable
ENV_VARS = {
    "topic": "KAFKA_TOPIC",
    "message_key": "KAFKA_MESSAGE_KEY",
    "bootstrap_servers": "KAFKA_BOOTSTRAP_SERVERS",
    "admin_timeout_ms": "KAFKA_ADMIN_TIMEOUT_MS",
    "group_id": "KAFKA_CONSUMER_GROUP",
    "initial_offset": "KAFKA_INITIAL_OFFSET",
    "message_count": "RELAY_MESSAGE_COUNT",
    "payload_prefix": "RELAY_PAYLOAD_PREFIX",
    "reply_timeout_ms": "RELAY_REPLY_TIMEOUT_MS",
    "queue_capacity": "RELAY_QUEUE_CAPACITY",
}


def _split_servers(value):
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    servers = [s.strip() for s in value if s and s.strip()]
    for server in servers:
        host, sep, port = server.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"'{server}' is not a host:port address")
    return servers


class RelaySettings(BaseModel):
    topic: str = Field("test-topic", description="Topic the relay publishes to and reads from")
    message_key: Optional[str] = Field("si.key", description="Key attached to every published message")
    bootstrap_servers: List[str] = Field(default_factory=lambda: ["localhost:9092"])
    admin_connect: Optional[List[str]] = Field(
        None, description="Metadata service used only for topic creation; defaults to the brokers"
    )
    admin_timeout_ms: int = Field(6000, ge=0)
    group_id: str = DEFAULT_GROUP_ID
    initial_offset: Optional[int] = Field(None, ge=0)
    message_count: int = Field(10, ge=0)
    payload_prefix: str = "foo"
    reply_timeout_ms: int = Field(10000, ge=0)
    queue_capacity: int = Field(1000, ge=0, description="Holding queue size, 0 for unbounded")

    @field_validator("topic", "group_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("bootstrap_servers", mode="before")
    @classmethod
    def _parse_bootstrap(cls, value):
        servers = _split_servers(value)
        if not servers:
            raise ValueError("at least one broker address is required")
        return servers

    @field_validator("admin_connect", mode="before")
    @classmethod
    def _parse_admin(cls, value):
        return _split_servers(value) or None

    @property
    def admin_servers(self) -> List[str]:
        return self.admin_connect or self.bootstrap_servers

    @property
    def reply_timeout(self) -> float:
        """Reply timeout in seconds, as queue.get expects it."""
        return self.reply_timeout_ms / 1000


def _read_environment() -> dict:
    values = {}
    for field_name, env_var in ENV_VARS.items():
        raw = os.getenv(env_var)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw

    admin = os.getenv("KAFKA_ADMIN_CONNECT")
    if not admin and os.getenv("KAFKA_ZOOKEEPER_CONNECT"):
        # ZooKeeper-era deployments still export the old variable name
        admin = os.getenv("KAFKA_ZOOKEEPER_CONNECT")
        print(
            f"[KAFKA] Using KAFKA_ZOOKEEPER_CONNECT ({admin}) for topic creation; "
            "it must point at a broker listener, not ZooKeeper. Set KAFKA_ADMIN_CONNECT instead.",
            file=sys.stderr,
        )
    if admin:
        values["admin_connect"] = admin
    return values


def load_settings(overrides: Optional[dict] = None, env_file: Optional[Path] = None) -> RelaySettings:
    """
    Build RelaySettings from the environment, then apply overrides (e.g. CLI flags).
    env_file defaults to the project .env. Overrides set to None are ignored.
    Raises ConfigurationError on invalid input.
    """
    load_dotenv(dotenv_path=env_file if env_file is not None else ENV_PATH)

    values = _read_environment()
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RelaySettings(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
