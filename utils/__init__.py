# utils/__init__.py
# This file is part of Sightline - Live Console Views
#
# Utility module exports

from .record_reader import (
    read_records,
    validate_record_file,
    RecordFormatError,
)
from .config import ConsoleConfig, ConfigError, DEFAULT_BATCH_SIZE
from .signals import Signal, Subscription

__all__ = [
    "read_records",
    "validate_record_file",
    "RecordFormatError",
    "ConsoleConfig",
    "ConfigError",
    "DEFAULT_BATCH_SIZE",
    "Signal",
    "Subscription",
]
