from __future__ import annotations

from domain.record.entity import Record, RecordFields
from grpc_app.stubs import record_pb2


def record_to_proto(record: Record) -> record_pb2.Record:
    return record_pb2.Record(
        id=record.id or "",
        author_id=record.author_id,
        title=record.title,
        content=record.content,
    )


def proto_to_fields(msg: record_pb2.Record) -> RecordFields:
    """Everything but the id; callers decide what the id means for the RPC."""
    return RecordFields(
        author_id=msg.author_id,
        title=msg.title,
        content=msg.content,
    )
