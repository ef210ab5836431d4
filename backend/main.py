"""
Main entry point for the Kafka relay.

The relay:
- Creates the configured topic if it does not exist yet
- Publishes a batch of messages (foo0..foo9 by default)
- Prints every message read back until the reply timeout passes with nothing new

Settings come from environment variables or the .env file in the project root;
see relay/config.py for the full list.
"""
import sys

from relay.cli import main

if __name__ == "__main__":
    sys.exit(main())
