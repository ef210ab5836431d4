"""Command line entry point for the relay."""
import argparse
import sys

from kafka.errors import KafkaError

from .config import load_settings
from .driver import RelayDriver
from .exceptions import ConfigurationError, RelayError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kafka-relay",
        description="Publish a batch of messages to a Kafka topic and print what comes back.",
    )
    parser.add_argument("--topic", help="topic name (KAFKA_TOPIC)")
    parser.add_argument("--key", dest="message_key", help="message key (KAFKA_MESSAGE_KEY)")
    parser.add_argument("--broker", dest="bootstrap_servers", help="host:port[,host:port] (KAFKA_BOOTSTRAP_SERVERS)")
    parser.add_argument("--count", dest="message_count", type=int, help="messages to send (RELAY_MESSAGE_COUNT)")
    parser.add_argument("--prefix", dest="payload_prefix", help="payload prefix (RELAY_PAYLOAD_PREFIX)")
    parser.add_argument("--timeout-ms", dest="reply_timeout_ms", type=int, help="drain timeout (RELAY_REPLY_TIMEOUT_MS)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(overrides=vars(args))
    except ConfigurationError as e:
        print(f"[RELAY] Invalid configuration: {e}", file=sys.stderr)
        return 1

    driver = RelayDriver.from_settings(settings)
    try:
        return driver.run()
    except (RelayError, KafkaError) as e:
        print(f"[RELAY] Startup aborted: {type(e).__name__}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
