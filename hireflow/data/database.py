"""
Database connection manager for hireflow.

Provides MongoDB connection management with a synchronous (PyMongo)
client for CLI health checks and an asynchronous (Motor) client for the
ingestion pipeline, plus the GridFS bucket used for resume storage.
"""

from typing import Any, Optional
from urllib.parse import quote_plus

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorDatabase,
    AsyncIOMotorGridFSBucket,
)
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from hireflow.utils.config import DatabaseSettings, get_settings
from hireflow.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages MongoDB connections for one set of database settings.

    Clients are created lazily and reused until closed.
    """

    def __init__(self, settings: Optional[DatabaseSettings] = None) -> None:
        self._settings = settings or get_settings().database
        self._db_name = self._settings.name
        self._uri = self._build_uri()
        self._sync_client: Optional[MongoClient] = None
        self._async_client: Optional[AsyncIOMotorClient] = None

    def _build_uri(self) -> str:
        """Build the MongoDB URI with URL-encoded credentials."""
        host = self._settings.host.strip()
        if not host or any(c in host for c in [";", "&", "|", "$", "`"]):
            raise ValueError(f"Invalid database host: {host}")

        auth = ""
        if self._settings.username and self._settings.password:
            auth = f"{quote_plus(self._settings.username)}:{quote_plus(self._settings.password)}@"

        return f"mongodb://{auth}{host}:{self._settings.port}"

    @property
    def resume_bucket_name(self) -> str:
        return self._settings.resume_bucket

    # -------------------------------------------------------------------------
    # Synchronous Client
    # -------------------------------------------------------------------------

    def get_sync_client(self) -> MongoClient:
        """Get or create synchronous MongoDB client."""
        if self._sync_client is None:
            logger.info("Creating synchronous MongoDB client")
            self._sync_client = MongoClient(
                self._uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
            )
        return self._sync_client

    def check_sync_connection(self) -> bool:
        """Check if the database answers a ping."""
        try:
            self.get_sync_client().admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Sync connection check failed: {e}")
            self.close_sync()
            return False

    # -------------------------------------------------------------------------
    # Asynchronous Client
    # -------------------------------------------------------------------------

    def get_async_client(self) -> AsyncIOMotorClient:
        """Get or create asynchronous MongoDB client."""
        if self._async_client is None:
            logger.info("Creating asynchronous MongoDB client")
            self._async_client = AsyncIOMotorClient(
                self._uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                maxPoolSize=50,
            )
        return self._async_client

    def get_async_database(self) -> AsyncIOMotorDatabase:
        return self.get_async_client()[self._db_name]

    def get_async_collection(self, collection_name: str) -> Any:
        return self.get_async_database()[collection_name]

    def get_resume_bucket(self) -> AsyncIOMotorGridFSBucket:
        """GridFS bucket where uploaded resume bytes are kept."""
        return AsyncIOMotorGridFSBucket(
            self.get_async_database(), bucket_name=self._settings.resume_bucket
        )

    async def check_async_connection(self) -> bool:
        try:
            await self.get_async_client().admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Async connection check failed: {e}")
            return False

    # -------------------------------------------------------------------------
    # Lifecycle Management
    # -------------------------------------------------------------------------

    def close_sync(self) -> None:
        if self._sync_client:
            logger.info("Closing synchronous MongoDB client")
            self._sync_client.close()
            self._sync_client = None

    def close_async(self) -> None:
        if self._async_client:
            logger.info("Closing asynchronous MongoDB client")
            self._async_client.close()
            self._async_client = None

    def close_all(self) -> None:
        self.close_sync()
        self.close_async()

    # -------------------------------------------------------------------------
    # Index Management
    # -------------------------------------------------------------------------

    async def ensure_indexes(self) -> None:
        """Create indexes for the jobs, candidates and resume file collections."""
        logger.info("Ensuring database indexes")

        jobs = self.get_async_collection("jobs")
        await jobs.create_index([("user_id", ASCENDING), ("status", ASCENDING)])
        await jobs.create_index("created_at")

        candidates = self.get_async_collection("candidates")
        await candidates.create_index([("job_id", ASCENDING), ("match_score", DESCENDING)])
        await candidates.create_index([("user_id", ASCENDING), ("status", ASCENDING)])
        await candidates.create_index("created_at")

        # Storage paths are unique so an upload never overwrites a resume
        files = self.get_async_collection(f"{self._settings.resume_bucket}.files")
        await files.create_index("filename", unique=True)

        logger.info("Database indexes created successfully")


_db_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the process-wide database manager used by the CLI and service."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
