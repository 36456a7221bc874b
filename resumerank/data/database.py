"""
Database connection manager for ResumeRank.

Provides MongoDB connection management through the asynchronous
Motor client, plus access to the GridFS bucket holding resume files.
"""

from typing import Any, Optional
from urllib.parse import quote_plus

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorDatabase,
    AsyncIOMotorGridFSBucket,
)
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import CollectionInvalid, ConnectionFailure, ServerSelectionTimeoutError

from resumerank.utils.config import DatabaseSettings, get_settings
from resumerank.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages the MongoDB connection used by repositories and storage.

    The client is created lazily on first use and reused afterwards.
    """

    def __init__(self, db_settings: Optional[DatabaseSettings] = None) -> None:
        """Initialize database manager with settings."""
        self._settings = db_settings or get_settings().database
        self._db_name = self._settings.name
        self._uri = self._build_uri()
        self._client: Optional[AsyncIOMotorClient] = None

    def _build_uri(self) -> str:
        """
        Build MongoDB connection URI from settings.

        Security: URL-encodes credentials to prevent injection attacks.
        """
        db_settings = self._settings

        # Validate host to prevent injection
        host = db_settings.host.strip()
        if not host or any(c in host for c in [";", "&", "|", "$", "`"]):
            raise ValueError(f"Invalid database host: {host}")

        auth = ""
        if db_settings.username and db_settings.password:
            encoded_user = quote_plus(db_settings.username)
            encoded_pass = quote_plus(db_settings.password)
            auth = f"{encoded_user}:{encoded_pass}@"

        return f"mongodb://{auth}{host}:{db_settings.port}"

    # -------------------------------------------------------------------------
    # Client Access
    # -------------------------------------------------------------------------

    def get_client(self) -> AsyncIOMotorClient:
        """Get or create the asynchronous MongoDB client."""
        if self._client is None:
            logger.info("Creating asynchronous MongoDB client")
            self._client = AsyncIOMotorClient(
                self._uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                maxPoolSize=50,
                minPoolSize=5,
            )
        return self._client

    def get_database(self) -> AsyncIOMotorDatabase:
        """Get the application database."""
        return self.get_client()[self._db_name]

    def get_collection(self, collection_name: str) -> Any:
        """Get a collection by name."""
        return self.get_database()[collection_name]

    def get_gridfs_bucket(self, bucket_name: str) -> AsyncIOMotorGridFSBucket:
        """Get a GridFS bucket for binary file storage."""
        return AsyncIOMotorGridFSBucket(self.get_database(), bucket_name=bucket_name)

    async def check_connection(self) -> bool:
        """Check if the connection is healthy."""
        try:
            await self.get_client().admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Connection check failed: {e}")
            return False

    # -------------------------------------------------------------------------
    # Lifecycle Management
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the client connection."""
        if self._client:
            logger.info("Closing asynchronous MongoDB client")
            self._client.close()
            self._client = None

    # -------------------------------------------------------------------------
    # Index Management
    # -------------------------------------------------------------------------

    async def ensure_indexes(self) -> None:
        """Create indexes for all collections used by the pipeline."""
        logger.info("Ensuring database indexes")

        candidates = self.get_collection("candidates")
        await candidates.create_index("job_id")
        await candidates.create_index("user_id")
        await candidates.create_index("status")
        await candidates.create_index("created_at")

        jobs = self.get_collection("jobs")
        await jobs.create_index("user_id")
        await jobs.create_index("status")

        quotas = self.get_collection("user_quotas")
        await quotas.create_index("user_id", unique=True)

        activity = self.get_collection("activity_log")
        await activity.create_index("user_id")
        await activity.create_index("action")
        await activity.create_index([("resource_type", ASCENDING), ("resource_id", ASCENDING)])
        await activity.create_index([("created_at", DESCENDING)])

        rate_events = self.get_collection("rate_limit_events")
        await rate_events.create_index(
            [("client_key", ASCENDING), ("route_key", ASCENDING), ("created_at", ASCENDING)]
        )

        logger.info("Database indexes created successfully")

    async def ensure_capped_collection(self, name: str, size_bytes: int) -> None:
        """Create a capped collection if it does not exist yet."""
        try:
            await self.get_database().create_collection(name, capped=True, size=size_bytes)
            logger.info(f"Created capped collection '{name}' ({size_bytes} bytes)")
        except CollectionInvalid:
            logger.debug(f"Capped collection '{name}' already exists")


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
