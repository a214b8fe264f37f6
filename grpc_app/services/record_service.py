from __future__ import annotations

from typing import AsyncIterator

import grpc

from domain.record.repository import RecordRepository
from grpc_app.mappers.record import proto_to_fields, record_to_proto
from grpc_app.stubs import record_pb2, record_pb2_grpc


class RecordService(record_pb2_grpc.RecordServiceServicer):
    """Thin adapter: one repository call per RPC.

    Failures are raised as business exceptions and turned into gRPC statuses
    by `ExceptionMappingInterceptor`.
    """

    def __init__(self, repository: RecordRepository) -> None:
        self._repo = repository

    async def CreateRecord(self, request: record_pb2.CreateRecordRequest, context: grpc.aio.ServicerContext) -> record_pb2.CreateRecordReply:  # type: ignore[override]
        record = await self._repo.create(proto_to_fields(request.record))
        return record_pb2.CreateRecordReply(record=record_to_proto(record))

    async def ReadRecord(self, request: record_pb2.ReadRecordRequest, context: grpc.aio.ServicerContext) -> record_pb2.ReadRecordReply:  # type: ignore[override]
        record = await self._repo.get_by_id(request.id)
        return record_pb2.ReadRecordReply(record=record_to_proto(record))

    async def UpdateRecord(self, request: record_pb2.UpdateRecordRequest, context: grpc.aio.ServicerContext) -> record_pb2.UpdateRecordReply:  # type: ignore[override]
        record = await self._repo.update(request.record.id, proto_to_fields(request.record))
        return record_pb2.UpdateRecordReply(record=record_to_proto(record))

    async def DeleteRecord(self, request: record_pb2.DeleteRecordRequest, context: grpc.aio.ServicerContext) -> record_pb2.DeleteRecordReply:  # type: ignore[override]
        await self._repo.delete(request.id)
        return record_pb2.DeleteRecordReply(success=True)

    async def ListRecords(self, request: record_pb2.ListRecordsRequest, context: grpc.aio.ServicerContext) -> AsyncIterator[record_pb2.ListRecordsReply]:  # type: ignore[override]
        # Replies already sent stay sent if the scan fails part way.
        async for record in self._repo.list_all():
            yield record_pb2.ListRecordsReply(record=record_to_proto(record))
