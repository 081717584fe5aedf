"""
Async MongoDB connection for the account store.

Opens a Motor client, registers the Beanie document models so their
declared indexes (unique username and email) exist before the first
request, and exposes the raw database handle that the stores query.

Example:
    from common.database import MongoDB
    from vidhub.user.models import User

    mongo = MongoDB()
    await mongo.connect(
        uri="mongodb://localhost:27017",
        database_name="vidhub",
        document_models=[User],
    )

    users = mongo.db["users"]
    healthy = await mongo.ping()
"""

import logging
from typing import List, Optional, Sequence, Type

from beanie import Document, init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

SERVER_SELECTION_TIMEOUT_MS = 5000


def mask_uri(uri: str) -> str:
    """Strip credentials from a connection string for logging."""
    return uri.split("@")[-1] if "@" in uri else uri


class MongoDB:
    """Owns the Motor client for one database."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None
        self._models: List[str] = []

    async def connect(
        self,
        uri: str,
        database_name: str,
        document_models: Sequence[Type[Document]],
    ) -> None:
        """
        Open the client and initialise Beanie.

        Args:
            uri: MongoDB connection string
            database_name: Database holding the account collections
            document_models: Beanie documents whose indexes must exist

        Raises:
            PyMongoError: The server is unreachable or index creation failed
        """
        logger.info(f"Connecting to MongoDB at {mask_uri(uri)} (database: {database_name})")

        client = AsyncIOMotorClient(
            uri,
            tz_aware=True,
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
        )
        database = client[database_name]

        try:
            await init_beanie(database=database, document_models=list(document_models))
        except PyMongoError as e:
            logger.error(f"MongoDB initialisation failed: {e}")
            client.close()
            raise

        self._client = client
        self._database = database
        self._models = [model.__name__ for model in document_models]
        logger.info(f"MongoDB ready, indexes ensured for: {', '.join(self._models)}")

    async def disconnect(self) -> None:
        """Close the client if one is open."""
        if self._client is None:
            return

        self._client.close()
        self._client = None
        self._database = None
        logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        """Round-trip to the server; False when unreachable or not connected."""
        if self._database is None:
            return False
        try:
            await self._database.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """The connected database handle."""
        if self._database is None:
            raise RuntimeError("Database not connected")
        return self._database
