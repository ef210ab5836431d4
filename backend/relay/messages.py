"""Message model shared by the publisher and the subscriber."""
from dataclasses import asdict, dataclass
from typing import Optional

from .exceptions import DeserializationError

ENCODING = "utf-8"


@dataclass(frozen=True)
class Message:
    payload: str
    topic: str
    key: Optional[str] = None
    # Broker metadata, only set on received messages
    partition: Optional[int] = None
    offset: Optional[int] = None
    timestamp: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


def serialize_string(value: Optional[str]) -> Optional[bytes]:
    """String serializer for keys and values; None passes through as no key."""
    if value is None:
        return None
    return value.encode(ENCODING)


def decode_record(record) -> Message:
    """
    Turn a raw consumer record into a Message.

    Raises DeserializationError for tombstones (no value) and for bytes
    that are not valid UTF-8.
    """
    if record.value is None:
        raise DeserializationError(
            f"record {record.topic}-{record.partition}@{record.offset} has no value"
        )
    try:
        payload = record.value.decode(ENCODING)
        key = record.key.decode(ENCODING) if record.key is not None else None
    except (UnicodeDecodeError, AttributeError) as e:
        raise DeserializationError(
            f"record {record.topic}-{record.partition}@{record.offset} is not a {ENCODING} string: {e}"
        ) from e

    return Message(
        payload=payload,
        topic=record.topic,
        key=key,
        partition=record.partition,
        offset=record.offset,
        timestamp=record.timestamp,
    )
