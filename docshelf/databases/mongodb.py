from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ServerSelectionTimeoutError

from docshelf.configs.settings import MongoSettings
from docshelf.utils.logging import get_logger

logger = get_logger(__name__)


class MongoDB:
    """MongoDB connection manager owning one motor client"""

    def __init__(
        self,
        config: Optional[MongoSettings] = None,
        client: Optional[AsyncIOMotorClient] = None,
    ):
        self.config = config or MongoSettings()
        self.client: Optional[AsyncIOMotorClient] = client
        self.database: Optional[AsyncIOMotorDatabase] = None
        if client is not None:
            self.database = client[self.config.MONGO_DB]

    @property
    def is_connected(self) -> bool:
        return self.database is not None

    async def connect(self) -> bool:
        """Connect to MongoDB and select the configured database"""
        try:
            self.client = AsyncIOMotorClient(
                self.config.MONGO_URL, **self.config.client_options
            )

            # Test connection
            await self.client.admin.command('ping')

            self.database = self.client[self.config.MONGO_DB]
            logger.info(f"Connected to MongoDB database '{self.config.MONGO_DB}'")
            return True

        except ServerSelectionTimeoutError as e:
            logger.error(
                f"Failed to connect to MongoDB (timeout) at {self.config.MONGO_URL}: {e}")
            self._reset()
            raise ConnectionError("Cannot connect to MongoDB server") from e
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}")
            self._reset()
            raise

    async def disconnect(self):
        """Disconnect from MongoDB"""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.database = None

    def _reset(self):
        if self.client is not None:
            self.client.close()
        self.client = None
        self.database = None

    def collection(self, name: str) -> AsyncIOMotorCollection:
        if self.database is None:
            raise ConnectionError("MongoDB is not connected")
        return self.database[name]

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncIOMotorClientSession]:
        """Client session scoped to one repository operation"""
        if not self.is_connected:
            await self.connect()
        session = await self.client.start_session()
        try:
            yield session
        finally:
            await session.end_session()
