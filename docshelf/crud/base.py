from typing import Any, Dict, List, Mapping, Type, TypeVar, Union
from beanie import PydanticObjectId
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from docshelf.core.exceptions import InvalidEntityError, NotFoundError
from docshelf.databases.mongodb import MongoDB
from docshelf.models.base import BaseDocument, DELETED_AT_PATH, UPDATED_AT_PATH
from docshelf.schemas.change_summary import ChangeSummary
from docshelf.utils.base import utc_now
from docshelf.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseDocument)
Selector = Union[Mapping[str, Any], BaseDocument, None]

LIVE_FILTER: Dict[str, Any] = {DELETED_AT_PATH: None}


def _to_filter(selector: Selector) -> Dict[str, Any]:
    if selector is None:
        return {}
    if isinstance(selector, BaseDocument):
        return selector.to_selector()
    if isinstance(selector, Mapping):
        return dict(selector)
    raise InvalidEntityError(
        f"Selector must be a mapping or a document, got {type(selector).__name__}"
    )


def _live(query: Dict[str, Any]) -> Dict[str, Any]:
    # $and keeps the store's natural order of the live subset
    if not query:
        return dict(LIVE_FILTER)
    return {"$and": [query, dict(LIVE_FILTER)]}


def _require_entity(entity: Any) -> BaseDocument:
    if not isinstance(entity, BaseDocument):
        raise InvalidEntityError(
            f"{type(entity).__name__} does not carry soft delete metadata"
        )
    return entity


def _require_model(model: Any) -> None:
    if not (isinstance(model, type) and issubclass(model, BaseDocument)):
        raise InvalidEntityError(f"{model!r} is not a BaseDocument subclass")


class SoftDeleteRepository:
    """Entity-agnostic CRUD over MongoDB with soft deletes.

    Writes stamp ``timestamps.updated_at``; ``remove`` and ``remove_all`` stamp
    ``timestamps.deleted_at`` instead of deleting, and every read skips
    documents where that field is set. ``remove_hard`` and ``remove_all_hard``
    bypass the convention and delete physically.

    Each call runs inside its own client session from the owned ``MongoDB``
    handle; there is no locking or transaction across calls.
    """

    def __init__(self, mongodb: MongoDB):
        self.mongodb = mongodb

    async def close(self) -> None:
        await self.mongodb.disconnect()

    async def __aenter__(self) -> "SoftDeleteRepository":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def insert(self, entity: ModelT, collection: str) -> ModelT:
        _require_entity(entity)
        entity.timestamps.updated_at = utc_now()

        async with self.mongodb.session() as session:
            result = await self.mongodb.collection(collection).insert_one(
                entity.to_document(), session=session
            )

        entity.id = PydanticObjectId(result.inserted_id)
        logger.debug(f"Inserted {entity.id} into '{collection}'")
        return entity

    async def find(
        self,
        selector: Selector,
        collection: str,
        model: Type[ModelT],
        *,
        include_deleted: bool = False,
    ) -> ModelT:
        """First live document matching ``selector``, in store order"""
        _require_model(model)
        query = _to_filter(selector)
        if not include_deleted:
            query = _live(query)

        async with self.mongodb.session() as session:
            doc = await self.mongodb.collection(collection).find_one(query, session=session)

        if doc is None:
            raise NotFoundError(
                f"No document found in '{collection}'",
                details={"collection": collection, "selector": query},
            )
        return model.model_validate(doc)

    async def find_all(
        self,
        selector: Selector,
        collection: str,
        model: Type[ModelT],
        *,
        include_deleted: bool = False,
        skip: int = 0,
        limit: int = 0,
    ) -> List[ModelT]:
        """Every live document matching ``selector``, in store order"""
        _require_model(model)
        query = _to_filter(selector)
        if not include_deleted:
            query = _live(query)

        async with self.mongodb.session() as session:
            cursor = self.mongodb.collection(collection).find(query, session=session)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            docs = await cursor.to_list(length=None)

        if not docs:
            raise NotFoundError(
                f"No documents found in '{collection}'",
                details={"collection": collection, "selector": query},
            )
        return [model.model_validate(doc) for doc in docs]

    async def find_by_id(
        self,
        id: Union[str, ObjectId],
        collection: str,
        model: Type[ModelT],
        *,
        include_deleted: bool = False,
    ) -> ModelT:
        if id is None:
            raise InvalidEntityError("Document id is required")
        try:
            oid = ObjectId(id)
        except (InvalidId, TypeError) as e:
            raise InvalidEntityError(f"{id!r} is not a valid document id") from e
        return await self.find(
            {"_id": oid}, collection, model, include_deleted=include_deleted
        )

    async def count(
        self,
        selector: Selector,
        collection: str,
        *,
        include_deleted: bool = False,
    ) -> int:
        query = _to_filter(selector)
        if not include_deleted:
            query = _live(query)

        async with self.mongodb.session() as session:
            return await self.mongodb.collection(collection).count_documents(
                query, session=session
            )

    async def update(self, entity: ModelT, collection: str) -> ModelT:
        """Patch the stored document with the fields set on ``entity``.

        Only fields explicitly set on the model are written, so fields the
        caller never loaded keep their stored values. ``deleted_at`` is never
        written here. Not compare-and-swap: concurrent updates race.
        """
        _require_entity(entity)
        if entity.id is None:
            raise InvalidEntityError(
                f"{type(entity).__name__} has no id, insert it first"
            )

        async with self.mongodb.session() as session:
            coll = self.mongodb.collection(collection)
            stored = await coll.find_one({"_id": entity.id}, session=session)
            if stored is None:
                raise NotFoundError(
                    f"Document {entity.id} not found in '{collection}'",
                    details={"collection": collection, "id": str(entity.id)},
                )

            entity.timestamps.updated_at = utc_now()
            patch = entity.to_patch()
            patch[UPDATED_AT_PATH] = entity.timestamps.updated_at
            await coll.update_one({"_id": entity.id}, {"$set": patch}, session=session)

        logger.debug(f"Updated {entity.id} in '{collection}'")
        return entity

    async def remove(self, selector: Selector, collection: str) -> None:
        """Soft-delete the first document matching ``selector``.

        Already deleted documents are matched too; their ``deleted_at`` is
        overwritten with the new time.
        """
        query = _to_filter(selector)

        async with self.mongodb.session() as session:
            result = await self.mongodb.collection(collection).update_one(
                query, {"$set": {DELETED_AT_PATH: utc_now()}}, session=session
            )

        if result.matched_count == 0:
            raise NotFoundError(
                f"No document to remove in '{collection}'",
                details={"collection": collection, "selector": query},
            )
        logger.debug(f"Soft-deleted one document in '{collection}'")

    async def remove_hard(self, selector: Selector, collection: str) -> None:
        """Physically delete the first document matching ``selector``"""
        query = _to_filter(selector)

        async with self.mongodb.session() as session:
            result = await self.mongodb.collection(collection).delete_one(query, session=session)

        if result.deleted_count == 0:
            raise NotFoundError(
                f"No document to remove in '{collection}'",
                details={"collection": collection, "selector": query},
            )
        logger.debug(f"Hard-deleted one document in '{collection}'")

    async def remove_all(self, selector: Selector, collection: str) -> ChangeSummary:
        """Soft-delete every live document matching ``selector``.

        ``matched`` counts all fetched documents, dead ones included;
        ``updated`` counts the ones soft-deleted by this call. A failed update
        is logged and skipped, only a failed fetch raises.
        """
        query = _to_filter(selector)
        matched = 0
        updated = 0

        async with self.mongodb.session() as session:
            coll = self.mongodb.collection(collection)
            docs = await coll.find(query, session=session).to_list(length=None)

            for doc in docs:
                matched += 1
                if (doc.get("timestamps") or {}).get("deleted_at") is not None:
                    continue
                try:
                    result = await coll.update_one(
                        {"_id": doc["_id"]},
                        {"$set": {DELETED_AT_PATH: utc_now()}},
                        session=session,
                    )
                except PyMongoError as e:
                    logger.warning(f"Soft delete of {doc['_id']} in '{collection}' failed: {e}")
                    continue
                if result.matched_count:
                    updated += 1

        summary = ChangeSummary(matched=matched, updated=updated)
        log_with_context(
            logger, "info", f"Soft-deleted documents in '{collection}'",
            collection=collection, matched=summary.matched, updated=summary.updated,
        )
        return summary

    async def remove_all_hard(self, selector: Selector, collection: str) -> ChangeSummary:
        """Physically delete every document matching ``selector``"""
        query = _to_filter(selector)

        async with self.mongodb.session() as session:
            result = await self.mongodb.collection(collection).delete_many(query, session=session)

        summary = ChangeSummary(matched=result.deleted_count, removed=result.deleted_count)
        log_with_context(
            logger, "info", f"Hard-deleted documents in '{collection}'",
            collection=collection, matched=summary.matched, removed=summary.removed,
        )
        return summary
