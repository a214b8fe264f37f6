"""Pytest bootstrap configuration.

Environment defaults are set before application modules (and therefore
`core.config.settings`) are imported.
"""
import os

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import copy
from typing import Any, Optional

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError, CursorNotFound
from pymongo.results import DeleteResult, InsertOneResult


class FakeCursor:
    """Async cursor over a snapshot of documents.

    `fail_at` makes `next()` raise a driver error once that many documents
    have been returned.
    """

    def __init__(self, docs: list[dict], fail_at: Optional[int] = None):
        self._docs = docs
        self._pos = 0
        self._fail_at = fail_at
        self.closed = False

    async def next(self) -> dict:
        if self._fail_at is not None and self._pos == self._fail_at:
            raise CursorNotFound("cursor id 42 not found")
        if self._pos >= len(self._docs):
            raise StopAsyncIteration
        doc = self._docs[self._pos]
        self._pos += 1
        return copy.deepcopy(doc)

    async def close(self) -> None:
        self.closed = True


class FakeCollection:
    """In-memory stand-in for `AsyncCollection`, keyed by `_id`.

    Put an operation name into `failing` to make it raise a driver error.
    """

    def __init__(self) -> None:
        self.docs: dict[Any, dict] = {}
        self.failing: set[str] = set()
        self.cursor_fail_at: Optional[int] = None
        self.cursors: list[FakeCursor] = []
        self.mutations = 0

    def _maybe_fail(self, op: str) -> None:
        if op in self.failing:
            raise ServerSelectionTimeoutError(f"{op}: no servers available")

    def seed(self, doc: dict) -> dict:
        doc = dict(doc)
        doc.setdefault("_id", ObjectId())
        self.docs[doc["_id"]] = doc
        return doc

    async def insert_one(self, document: dict) -> InsertOneResult:
        self._maybe_fail("insert_one")
        assert "_id" not in document
        doc = self.seed(document)
        self.mutations += 1
        return InsertOneResult(doc["_id"], True)

    async def find_one(self, filter: dict) -> Optional[dict]:
        self._maybe_fail("find_one")
        doc = self.docs.get(filter["_id"])
        return copy.deepcopy(doc) if doc is not None else None

    async def find_one_and_update(self, filter: dict, update: dict, return_document=ReturnDocument.BEFORE) -> Optional[dict]:
        self._maybe_fail("find_one_and_update")
        doc = self.docs.get(filter["_id"])
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        doc.update(update["$set"])
        self.mutations += 1
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, filter: dict) -> DeleteResult:
        self._maybe_fail("delete_one")
        removed = self.docs.pop(filter["_id"], None)
        if removed is not None:
            self.mutations += 1
        return DeleteResult({"n": 1 if removed is not None else 0}, True)

    def find(self, filter: dict) -> FakeCursor:
        self._maybe_fail("find")
        assert filter == {}
        cursor = FakeCursor(list(self.docs.values()), fail_at=self.cursor_fail_at)
        self.cursors.append(cursor)
        return cursor


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def repository(collection):
    from infrastructure.repositories.record_repository import MongoRecordRepository

    return MongoRecordRepository(collection)


@pytest.fixture
async def grpc_target(repository):
    """Start the real server stack (interceptors + RecordService) on an ephemeral port."""
    from core.config import GrpcSettings
    from grpc_app.server import create_server

    server, port = await create_server(repository, GrpcSettings(host="127.0.0.1", port=0))
    await server.start()
    try:
        yield f"127.0.0.1:{port}"
    finally:
        await server.stop(grace=None)


@pytest.fixture
async def record_stub(grpc_target):
    import grpc
    from grpc_app.stubs import record_pb2_grpc

    async with grpc.aio.insecure_channel(grpc_target) as channel:
        yield record_pb2_grpc.RecordServiceStub(channel)
