from __future__ import annotations

from typing import Optional, Sequence
import grpc
from grpc_health.v1 import health, health_pb2_grpc, health_pb2

from core.config import GrpcSettings, settings
from core.logging_config import get_logger
from domain.record.repository import RecordRepository
from grpc_app.interceptors.request_id import RequestIdInterceptor
from grpc_app.interceptors.logging import LoggingInterceptor
from grpc_app.interceptors.exceptions import ExceptionMappingInterceptor
from grpc_app.services.record_service import RecordService
from grpc_app.stubs import SERVICE_NAME, record_pb2_grpc


logger = get_logger(__name__)


def _server_credentials(config: GrpcSettings) -> grpc.ServerCredentials:
    tls = config.tls
    if not (tls.cert and tls.key):
        raise RuntimeError("GRPC TLS enabled but cert/key not provided")
    with open(tls.cert, "rb") as f:
        cert_chain = f.read()
    with open(tls.key, "rb") as f:
        private_key = f.read()
    root_certificates = None
    if tls.ca:
        with open(tls.ca, "rb") as f:
            root_certificates = f.read()
    return grpc.ssl_server_credentials(
        [(private_key, cert_chain)],
        root_certificates=root_certificates,
        require_client_auth=bool(root_certificates),
    )


async def create_server(
    repository: RecordRepository,
    config: Optional[GrpcSettings] = None,
) -> tuple[grpc.aio.Server, int]:
    """Build (but do not start) the gRPC server.

    Returns the server and the port actually bound, which differs from the
    configured one when the config asks for port 0.
    """
    config = config or settings.grpc
    interceptors: Sequence[grpc.aio.ServerInterceptor] = (
        RequestIdInterceptor(),
        LoggingInterceptor(),
        ExceptionMappingInterceptor(),  # maps business exceptions
    )

    options = [
        ("grpc.max_concurrent_streams", max(1, config.max_concurrent_streams)),
    ]
    server = grpc.aio.server(interceptors=interceptors, options=options)

    record_pb2_grpc.add_RecordServiceServicer_to_server(RecordService(repository), server)

    # Health service
    health_svc = health.aio.HealthServicer()
    health_pb2_grpc.add_HealthServicer_to_server(health_svc, server)
    await health_svc.set("", health_pb2.HealthCheckResponse.SERVING)
    await health_svc.set(SERVICE_NAME, health_pb2.HealthCheckResponse.SERVING)

    address = f"{config.host}:{config.port}"
    if config.tls.enabled:
        port = server.add_secure_port(address, _server_credentials(config))
    else:
        port = server.add_insecure_port(address)
    logger.debug("grpc_port_bound", address=address, port=port, tls=config.tls.enabled)

    return server, port
