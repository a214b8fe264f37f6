"""Protobuf messages and service stubs for `records.v1`.

The .proto is compiled on first import through grpcio-tools
(`grpc.protos_and_services`), so no generated files are checked in. The
path is resolved against `sys.path`, i.e. the project root (or
site-packages when installed).
"""
import grpc


RECORD_PROTO = "grpc_app/protos/records/v1/record.proto"
SERVICE_NAME = "records.v1.RecordService"

record_pb2, record_pb2_grpc = grpc.protos_and_services(RECORD_PROTO)

__all__ = ["record_pb2", "record_pb2_grpc", "SERVICE_NAME"]
