"""gRPC transport layer for the record service.

This package hosts:
- Protocol buffers (in `protos/`), compiled at import time by `grpc_app.stubs`.
- Server bootstrap and interceptors.
- Thin service adapters that map gRPC requests to the record repository.
"""
