"""Stored records and durable document stores."""

from src.storage.backends import (
    DocumentStore,
    JsonFileDocumentStore,
    MemoryDocumentStore,
    StorageError,
    create_store,
)
from src.storage.schema import DailyExtremes, MalformedRecordError, StoredDailyPrice

__all__ = [
    "DailyExtremes",
    "StoredDailyPrice",
    "MalformedRecordError",
    "DocumentStore",
    "MemoryDocumentStore",
    "JsonFileDocumentStore",
    "StorageError",
    "create_store",
]
