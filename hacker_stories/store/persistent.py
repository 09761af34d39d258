"""A single value remembered across sessions."""

import structlog

from hacker_stories.store.kv import KeyValueStore


logger = structlog.get_logger()


class PersistentValue:
    """String value read once from a store and written back on change.

    An absent or empty stored value falls back to the default. Setting the
    value it already holds does not write.
    """

    def __init__(self, store: KeyValueStore, key: str, default: str) -> None:
        """Read the initial value.

        Args:
            store: Backing key-value store.
            key: Key the value is stored under.
            default: Value used when nothing is stored.
        """
        self._store = store
        self._key = key
        self._value = store.get(key) or default

    @property
    def key(self) -> str:
        """Get the storage key."""
        return self._key

    @property
    def value(self) -> str:
        """Get the current value."""
        return self._value

    def set(self, value: str) -> bool:
        """Update the value and persist it if it changed.

        Args:
            value: New value.

        Returns:
            True if the value changed and was written.
        """
        if value == self._value:
            return False
        self._store.set(self._key, value)
        self._value = value
        logger.debug("value_persisted", component="store", key=self._key)
        return True
