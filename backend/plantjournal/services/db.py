# async mongodb connection manager for the backend api
# uses motor for non-blocking operations, connects lazily on first use

import asyncio
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from plantjournal.config import settings
from plantjournal.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class Database:
    """lazy, memoized mongodb connection shared by every store operation.

    the first get_connection() call connects and pings the server; later calls
    return the cached database handle. a failed attempt caches nothing and is
    not retried, the next call simply tries again.
    """

    def __init__(self, connection_string: Optional[str] = None, database_name: Optional[str] = None):
        self.connection_string = connection_string or settings.mongo_connection
        self.database_name = database_name or settings.PLANT_DB_NAME
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None
        # created on first use so it belongs to the loop that serves requests.
        # one event loop per process is assumed, like the motor client itself.
        self._lock: Optional[asyncio.Lock] = None

    async def get_connection(self) -> AsyncIOMotorDatabase:
        """return the shared database handle, connecting on first call"""
        if self.db is not None:
            return self.db

        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            # another coroutine may have connected while we waited
            if self.db is not None:
                return self.db

            logger.info(f"Connecting to MongoDB: {self.connection_string}")
            client = None
            try:
                client = AsyncIOMotorClient(
                    self.connection_string,
                    serverSelectionTimeoutMS=settings.DB_SERVER_SELECTION_TIMEOUT_MS,
                )
                await client.admin.command("ping")
            except (PyMongoError, ValueError) as e:
                if client is not None:
                    client.close()
                logger.error(f"Connection to {self.connection_string} failed: {e}")
                raise DatabaseConnectionError(
                    f"Could not connect to {self.connection_string}",
                    details={"error": str(e)},
                ) from e

            self.client = client
            self.db = client[self.database_name]
            logger.info("MongoDB connection established")
            return self.db

    async def connect(self):
        """eagerly establish the connection (used at app startup)"""
        await self.get_connection()

    async def close(self):
        """close mongodb connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")
