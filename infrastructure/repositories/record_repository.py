"""
记录仓储实现 - 使用 MongoDB (pymongo async API) 实现数据访问
"""
from __future__ import annotations

from typing import Any, AsyncIterator, Mapping

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from core.logging_config import get_logger
from domain.common.exceptions import (
    InvalidRecordIdException,
    RecordDecodeException,
    RecordNotFoundException,
    RecordStoreException,
)
from domain.record.entity import Record, RecordFields
from domain.record.repository import RecordRepository


logger = get_logger(__name__)

# Stored document keys; the entity's `id` lives under `_id` as an ObjectId.
ID_KEY = "_id"
FIELD_KEYS = ("author_id", "title", "content")


def parse_object_id(record_id: str) -> ObjectId:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError) as exc:
        raise InvalidRecordIdException(str(record_id)) from exc


def document_to_entity(doc: Mapping[str, Any]) -> Record:
    """将 Mongo 文档转换为领域实体

    Raises ValueError when the document does not have the record shape.
    """
    oid = doc.get(ID_KEY)
    if not isinstance(oid, ObjectId):
        raise ValueError(f"{ID_KEY} is not an ObjectId: {oid!r}")
    try:
        fields = RecordFields(**{key: doc[key] for key in FIELD_KEYS})
    except (KeyError, TypeError) as exc:
        raise ValueError(f"malformed record document {oid}: {exc}") from exc
    return Record(id=str(oid), fields=fields)


def fields_to_document(fields: RecordFields) -> dict:
    """将实体字段转换为 Mongo 文档（不含 _id，由数据库分配）"""
    return fields.as_dict()


class MongoRecordRepository(RecordRepository):
    """记录仓储的 MongoDB 实现

    `collection` is an `AsyncCollection` (or anything with the same
    coroutine API); it is shared across calls and never mutated here.
    """

    def __init__(self, collection: Any):
        self.collection = collection

    async def create(self, fields: RecordFields) -> Record:
        try:
            result = await self.collection.insert_one(fields_to_document(fields))
        except PyMongoError as exc:
            logger.error("record_create_failed", error=str(exc))
            raise RecordStoreException("Could not insert record", reason=str(exc)) from exc
        record = Record(id=str(result.inserted_id), fields=fields)
        logger.info("record_created", record_id=record.id)
        return record

    async def get_by_id(self, record_id: str) -> Record:
        oid = parse_object_id(record_id)
        try:
            doc = await self.collection.find_one({ID_KEY: oid})
        except PyMongoError as exc:
            raise RecordNotFoundException(record_id, reason=str(exc)) from exc
        if doc is None:
            raise RecordNotFoundException(record_id)
        try:
            return document_to_entity(doc)
        except ValueError as exc:
            raise RecordNotFoundException(record_id, reason=str(exc)) from exc

    async def update(self, record_id: str, fields: RecordFields) -> Record:
        oid = parse_object_id(record_id)
        try:
            doc = await self.collection.find_one_and_update(
                {ID_KEY: oid},
                {"$set": fields_to_document(fields)},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise RecordNotFoundException(record_id, reason=str(exc)) from exc
        if doc is None:
            raise RecordNotFoundException(record_id)
        try:
            record = document_to_entity(doc)
        except ValueError as exc:
            raise RecordNotFoundException(record_id, reason=str(exc)) from exc
        logger.info("record_updated", record_id=record.id)
        return record

    async def delete(self, record_id: str) -> None:
        oid = parse_object_id(record_id)
        try:
            result = await self.collection.delete_one({ID_KEY: oid})
        except PyMongoError as exc:
            raise RecordNotFoundException(record_id, reason=str(exc)) from exc
        if not result.deleted_count:
            raise RecordNotFoundException(record_id)
        logger.info("record_deleted", record_id=record_id)

    async def list_all(self) -> AsyncIterator[Record]:
        try:
            cursor = self.collection.find({})
        except PyMongoError as exc:
            raise RecordStoreException("Could not open record scan", reason=str(exc)) from exc

        try:
            while True:
                try:
                    doc = await cursor.next()
                except StopAsyncIteration:
                    break
                except PyMongoError as exc:
                    logger.error("record_cursor_failed", error=str(exc))
                    raise RecordStoreException("Record cursor failed", reason=str(exc)) from exc
                try:
                    record = document_to_entity(doc)
                except ValueError as exc:
                    logger.warning("record_decode_failed", error=str(exc))
                    raise RecordDecodeException(str(exc)) from exc
                yield record
        finally:
            await cursor.close()
