"""
数据库配置和连接管理 - MongoDB client lifecycle
"""
from __future__ import annotations

from typing import Any, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from core.config import MongoSettings
from core.logging_config import get_logger


logger = get_logger(__name__)


class MongoDatabase:
    """Owns the single MongoDB client shared by all in-flight calls.

    The client is thread/task safe; callers never add locking around it.
    Bind `connect` to process start and `disconnect` to process stop.
    """

    def __init__(self, config: MongoSettings, *, client_factory: Any = AsyncMongoClient) -> None:
        self._config = config
        self._client_factory = client_factory
        self._client: Optional[AsyncMongoClient] = None
        self._collection: Optional[AsyncCollection] = None

    @property
    def collection(self) -> AsyncCollection:
        if self._collection is None:
            raise RuntimeError("MongoDatabase is not connected")
        return self._collection

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the client and verify the server is reachable with a ping."""
        if self._client is not None:
            return
        client = self._client_factory(
            self._config.url,
            serverSelectionTimeoutMS=self._config.server_selection_timeout_ms,
            appname=self._config.app_name,
        )
        try:
            await client.admin.command("ping")
        except PyMongoError as exc:
            logger.error("mongo_unreachable", database=self._config.database, error=str(exc))
            await client.close()
            raise
        self._client = client
        self._collection = client[self._config.database][self._config.collection]
        logger.info(
            "mongo_connected",
            database=self._config.database,
            collection=self._config.collection,
        )

    async def disconnect(self) -> None:
        if self._client is None:
            return
        client, self._client, self._collection = self._client, None, None
        await client.close()
        logger.info("mongo_disconnected", database=self._config.database)
