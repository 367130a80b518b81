"""
Base repository class providing common async CRUD operations.

Repositories receive their collection explicitly so each component gets
only the store access it needs.
"""

from abc import ABC
from typing import Any, ClassVar, Generic, Optional, TypeVar

from bson import ObjectId
from bson.errors import InvalidId

from hireflow.data.database import DatabaseManager
from hireflow.data.models.base import BaseDocument, utc_now
from hireflow.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseDocument)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract async repository over one Mongo collection.

    Subclasses define the collection name and model class.
    """

    collection_name: ClassVar[str]
    model_class: ClassVar[type[BaseDocument]]

    def __init__(self, collection: Any) -> None:
        self._collection = collection

    @classmethod
    def from_manager(cls, db_manager: DatabaseManager):
        """Build the repository on the manager's async database."""
        return cls(db_manager.get_async_collection(cls.collection_name))

    # -------------------------------------------------------------------------
    # Document Conversion
    # -------------------------------------------------------------------------

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[T]:
        if document is None:
            return None
        return self.model_class.model_validate(document)

    def _to_models(self, documents: list[dict[str, Any]]) -> list[T]:
        return [self._to_model(doc) for doc in documents if doc is not None]

    @staticmethod
    def _to_object_id(id_value: str | ObjectId) -> ObjectId:
        """Convert string to ObjectId, raising ValueError on garbage."""
        if isinstance(id_value, ObjectId):
            return id_value
        try:
            return ObjectId(id_value)
        except (InvalidId, TypeError) as e:
            raise ValueError(f"Invalid ObjectId: {id_value}") from e

    # -------------------------------------------------------------------------
    # CRUD Operations
    # -------------------------------------------------------------------------

    async def create_async(self, model: T) -> T:
        """Insert a new document and set its id on the model."""
        document = model.model_dump_mongo()
        now = utc_now()
        document["created_at"] = now
        document["updated_at"] = now

        result = await self._collection.insert_one(document)
        model.id = result.inserted_id
        logger.debug(f"Created {self.collection_name} document: {result.inserted_id}")
        return model

    async def get_by_id_async(self, id_value: str | ObjectId) -> Optional[T]:
        document = await self._collection.find_one({"_id": self._to_object_id(id_value)})
        return self._to_model(document)

    async def find_async(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort_by: Optional[str] = None,
        sort_order: int = -1,
    ) -> list[T]:
        """Find documents matching a query, newest first by default."""
        cursor = self._collection.find(query)
        cursor = cursor.sort(sort_by or "created_at", sort_order)
        cursor = cursor.skip(skip).limit(limit)

        documents = await cursor.to_list(length=limit)
        return self._to_models(documents)

    async def update_async(
        self, id_value: str | ObjectId, update_data: dict[str, Any]
    ) -> Optional[T]:
        """Apply a ``$set`` update and return the fresh document."""
        update_data["updated_at"] = utc_now()

        result = await self._collection.update_one(
            {"_id": self._to_object_id(id_value)},
            {"$set": update_data},
        )

        if result.matched_count > 0:
            logger.debug(f"Updated {self.collection_name} document: {id_value}")
            return await self.get_by_id_async(id_value)
        return None

    async def delete_async(self, id_value: str | ObjectId) -> bool:
        result = await self._collection.delete_one({"_id": self._to_object_id(id_value)})
        if result.deleted_count > 0:
            logger.debug(f"Deleted {self.collection_name} document: {id_value}")
            return True
        return False

    async def count_async(self, query: Optional[dict[str, Any]] = None) -> int:
        return await self._collection.count_documents(query or {})
