"""Key-value persistence for values remembered across sessions."""

from hacker_stories.store.errors import StoreConnectionError, StoreError
from hacker_stories.store.kv import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqliteKeyValueStore,
)
from hacker_stories.store.persistent import PersistentValue


__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PersistentValue",
    "SqliteKeyValueStore",
    "StoreConnectionError",
    "StoreError",
]
