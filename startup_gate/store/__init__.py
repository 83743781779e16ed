"""
Persistence module.

Key-value stores and the data facade that names every persisted key the
startup sequence reads or writes.
"""
from .data_facade import AppMode, LocalDataFacade
from .kv_store import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore

__all__ = [
    "AppMode",
    "KeyValueStore",
    "LocalDataFacade",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
]
