"""
Background subscriber.

One daemon thread polls a KafkaConsumer assigned to a single partition and
pushes decoded messages onto a holding queue. The driver thread pops from
that queue with a timeout. The queue is the only state shared between the
two threads.
"""
import queue
import sys
import threading
from typing import List, Optional, Union

from kafka import KafkaConsumer, TopicPartition
from kafka.errors import KafkaError

from utils.logging import log_dropped_record, verbose_polling_log

from .config import DEFAULT_GROUP_ID
from .exceptions import DeserializationError
from .messages import Message, decode_record

POLL_TIMEOUT_MS = 1000
POLL_ERROR_BACKOFF = 1.0  # seconds
QUEUE_PUT_TIMEOUT = 0.5  # seconds; bounds how long stop() waits on a full queue


class Subscriber:
    def __init__(
        self,
        topic: str,
        bootstrap_servers: Union[str, List[str]],
        group_id: str = DEFAULT_GROUP_ID,
        partition: int = 0,
        initial_offset: Optional[int] = None,
        queue_capacity: int = 1000,
        poll_timeout_ms: int = POLL_TIMEOUT_MS,
    ):
        self.topic_partition = TopicPartition(topic, partition)
        self.initial_offset = initial_offset
        self.poll_timeout_ms = poll_timeout_ms
        self.holding_queue: "queue.Queue[Message]" = queue.Queue(maxsize=queue_capacity)

        # Values stay as bytes; decoding happens in the loop so bad records can be skipped
        self._consumer = KafkaConsumer(
            bootstrap_servers=bootstrap_servers,
            group_id=group_id,
            enable_auto_commit=True,
            auto_offset_reset="earliest",
        )
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        tp = self.topic_partition
        self._consumer.assign([tp])
        if self.initial_offset is not None:
            self._consumer.seek(tp, self.initial_offset)

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._receive_loop,
            name=f"subscriber-{tp.topic}-{tp.partition}",
            daemon=True,
        )
        self._thread.start()
        print(f"[CONSUMER] Subscribed to {tp.topic}[{tp.partition}]", file=sys.stderr)

    def _receive_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                batches = self._consumer.poll(timeout_ms=self.poll_timeout_ms)
            except KafkaError as e:
                # The client reconnects on its own; keep polling
                print(f"[CONSUMER] Poll failed, retrying: {type(e).__name__}: {e}", file=sys.stderr)
                self._stop_event.wait(POLL_ERROR_BACKOFF)
                continue

            for records in batches.values():
                for record in records:
                    self._deliver(record)

    def _deliver(self, record) -> None:
        try:
            message = decode_record(record)
        except DeserializationError as e:
            print(f"[CONSUMER] Dropping record: {e}", file=sys.stderr)
            log_dropped_record(
                {
                    "topic": record.topic,
                    "partition": record.partition,
                    "offset": record.offset,
                    "value": repr(record.value),
                },
                str(e),
            )
            return

        verbose_polling_log(f"[CONSUMER] {message.topic}[{message.partition}]@{message.offset}: {message.payload}")
        while not self._stop_event.is_set():
            try:
                self.holding_queue.put(message, timeout=QUEUE_PUT_TIMEOUT)
                return
            except queue.Full:
                continue

    def receive(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Pop the next message, or return None if nothing arrives within timeout seconds."""
        try:
            return self.holding_queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if not self._closed:
            self._closed = True
            # Commits consumed offsets before leaving the group
            self._consumer.close()
            print("[CONSUMER] Consumer closed", file=sys.stderr)
