import logging
import threading
from typing import Optional

from config import ConfigurationError
from database.store import TableStore

logger = logging.getLogger(__name__)


class DatabaseCore:
    """Validating data layer over a configured table store.

    The store is attached once at startup with ``configure()``. Every
    operation checks that a store is configured before doing anything else,
    so a missing backend configuration surfaces as ConfigurationError rather
    than as a failed request.
    """
    _instance: Optional["DatabaseCore"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "DatabaseCore":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._store: Optional[TableStore] = None
        return cls._instance

    def configure(self, store: TableStore) -> None:
        """Attach the table store used by all operations."""
        self._store = store
        logger.info(f"Data layer using {type(store).__name__}")

    def _require_store(self) -> TableStore:
        if self._store is None:
            raise ConfigurationError(
                "Backend is not properly configured. Please check your environment variables."
            )
        return self._store

    async def close(self) -> None:
        """Close the store's connection and detach it."""
        if self._store is not None:
            try:
                await self._store.close()
            finally:
                self._store = None
