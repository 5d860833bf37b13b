"""
Simple MongoDB client manager that creates and tracks clients.
"""

import atexit
import threading
from typing import Dict

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient

from ..config import config


class MongoManager:
    """
    Simple MongoDB client manager.

    Features:
    - Creates and tracks one MongoDB client per label
    - Resolves connection strings as MONGO_URL_<LABEL>, then MONGO_URL_DEFAULT / MONGO_URL
    - Closes all clients on process exit
    - Thread-safe singleton pattern
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return

        self._clients: Dict[str, AsyncIOMotorClient] = {}
        self._server_selection_timeout = config.get_positive_int("MONGO_SERVER_SELECTION_TIMEOUT", 30000)
        self._max_pool_size = config.get_positive_int("MONGO_MAX_POOL_SIZE", 5)
        self._lock = threading.Lock()

        atexit.register(self.close_all)

        self._initialized = True

    def _hide_password_in_connection_string(self, connection_string: str) -> str:
        """
        Hide password in MongoDB connection string for security logging.

        Args:
            connection_string: Original connection string

        Returns:
            Connection string with password hidden
        """
        if "://" not in connection_string:
            return connection_string

        protocol_part, rest = connection_string.split("://", 1)
        last_at_index = rest.rfind("@")
        if last_at_index == -1:
            return connection_string

        auth_part, host_part = rest[:last_at_index], rest[last_at_index + 1:]
        if ":" not in auth_part:
            return connection_string

        username, password = auth_part.split(":", 1)
        if not username or not password:
            return connection_string
        return f"{protocol_part}://{username}:***@{host_part}"

    def get_client(self, label: str | None = None) -> AsyncIOMotorClient:
        """
        Get MongoDB client by label, creating it on first use.

        Args:
            label: Client label (defaults to 'default')

        Returns:
            AsyncIOMotorClient instance
        """
        if label is None:
            label = "default"

        with self._lock:
            if label not in self._clients:
                connection_string = config.get_mongo_url(label)
                logger.info(
                    "Open MongoDB client for label '{}': {}",
                    label, self._hide_password_in_connection_string(connection_string)
                )
                self._clients[label] = AsyncIOMotorClient(
                    connection_string,
                    serverSelectionTimeoutMS=self._server_selection_timeout,
                    maxPoolSize=self._max_pool_size,
                    tz_aware=True,
                )

            return self._clients[label]

    def close_client(self, label: str):
        """Close specific client."""
        with self._lock:
            client = self._clients.pop(label, None)
        if client is None:
            return
        try:
            client.close()
            logger.info("Closed MongoDB client for label '{}'", label)
        except Exception as e:
            logger.error("Error closing MongoDB client for label '{}': {}", label, e)

    def close_all(self):
        """Close all clients."""
        with self._lock:
            client_labels = list(self._clients.keys())

        # Close clients without holding the lock
        for label in client_labels:
            self.close_client(label)


# Global instance
_mongo_manager = None


def get_mongo_manager() -> MongoManager:
    """Get the global MongoDB manager instance."""
    global _mongo_manager
    if _mongo_manager is None:
        _mongo_manager = MongoManager()
    return _mongo_manager


def get_mongo_client(label: str | None = None) -> AsyncIOMotorClient:
    """Get MongoDB client by label."""
    return get_mongo_manager().get_client(label)
