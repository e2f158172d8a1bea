# store/__init__.py
# This file is part of Sightline - Live Console Views
#
# Record storage: in-memory store, live queries and network task recording

"""Record storage for the console view engine."""

from .memory import (
    StoreError,
    SortDescriptor,
    Section,
    ChangeSet,
    MemoryRecordStore,
    LiveResultHandle,
)
from .network_logger import NetworkLogger, RegistrationContext

__all__ = [
    "StoreError",
    "SortDescriptor",
    "Section",
    "ChangeSet",
    "MemoryRecordStore",
    "LiveResultHandle",
    "NetworkLogger",
    "RegistrationContext",
]
