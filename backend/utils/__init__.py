"""Utility functions for logging."""
from .logging import log_failed_kafka_message, log_dropped_record, verbose_polling_log

__all__ = [
    'log_failed_kafka_message',
    'log_dropped_record',
    'verbose_polling_log'
]
