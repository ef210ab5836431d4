"""Logging functions for failed sends, dropped records and verbose consumer output."""
import os
import sys
import json
import threading
from datetime import datetime

# Logging configuration
FAILED_KAFKA_LOG = "failed_kafka_messages.json"
DROPPED_RECORDS_LOG = "dropped_records.json"

# The producer I/O thread and the caller both append to the same files
_log_lock = threading.Lock()


def _log_path(filename: str) -> str:
    # Create logs directory if it doesn't exist
    log_dir = os.getenv("RELAY_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, filename)


def verbose_enabled() -> bool:
    return os.getenv("VERBOSE_CONSUMER_LOGS", "false").lower() in {"1", "true", "yes", "on"}


def verbose_polling_log(message: str) -> None:
    """Emit noisy per-record consumer logs only when explicitly enabled."""
    if verbose_enabled():
        print(message, file=sys.stderr)


def _append_entry(filename: str, log_entry: dict) -> bool:
    try:
        path = _log_path(filename)
        with _log_lock:
            # Load existing logs
            if os.path.exists(path):
                with open(path, 'r') as f:
                    logs = json.load(f)
            else:
                logs = []

            logs.append(log_entry)

            with open(path, 'w') as f:
                json.dump(logs, f, indent=2)
        return True
    except Exception as e:
        print(f"Error writing {filename}: {e}", file=sys.stderr)
        return False


def log_failed_kafka_message(message: dict, error: str) -> bool:
    """Log messages the producer could not deliver"""
    log_entry = {
        "timestamp": datetime.now().isoformat(),
        "message": message,
        "error": str(error),
    }
    if _append_entry(FAILED_KAFKA_LOG, log_entry):
        print(f"[KAFKA] Logged failed message to {FAILED_KAFKA_LOG}", file=sys.stderr)
        return True
    return False


def log_dropped_record(record: dict, error: str) -> bool:
    """Log received records that were skipped because they could not be decoded"""
    log_entry = {
        "timestamp": datetime.now().isoformat(),
        "record": record,
        "error": str(error),
    }
    if _append_entry(DROPPED_RECORDS_LOG, log_entry):
        print(f"[CONSUMER] Logged dropped record to {DROPPED_RECORDS_LOG}", file=sys.stderr)
        return True
    return False
