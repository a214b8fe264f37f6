from __future__ import annotations

import time
from typing import Callable, Awaitable

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.request_id import get_request_id
from grpc_app.interceptors.exceptions import is_mapped_error


logger = get_logger(__name__)


def _log_unhandled(method: str, exc: BaseException) -> None:
    # AbortError / RpcError and exceptions already mapped by the exception
    # interceptor have been logged there
    if isinstance(exc, (grpc.RpcError, grpc.aio.AbortError)) or is_mapped_error():
        return
    logger.error(
        "grpc_unhandled_error",
        method=method,
        error=str(exc),
        exc_info=True,
        request_id=get_request_id(),
    )


class LoggingInterceptor(grpc.aio.ServerInterceptor):
    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        method = handler_call_details.method

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            start = time.perf_counter()
            try:
                logger.info("grpc_request", method=method, peer=context.peer(), request_id=get_request_id())
                return await handler.unary_unary(request, context)
            except Exception as exc:
                _log_unhandled(method, exc)
                raise
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.info("grpc_request_done", method=method, elapsed_ms=round(elapsed_ms, 2), request_id=get_request_id())

        async def _unary_stream(request, context: grpc.aio.ServicerContext):
            start = time.perf_counter()
            sent = 0
            try:
                logger.info("grpc_request", method=method, peer=context.peer(), request_id=get_request_id())
                async for response in handler.unary_stream(request, context):
                    sent += 1
                    yield response
            except Exception as exc:
                _log_unhandled(method, exc)
                raise
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.info(
                    "grpc_request_done",
                    method=method,
                    messages_sent=sent,
                    elapsed_ms=round(elapsed_ms, 2),
                    request_id=get_request_id(),
                )

        if handler.unary_unary:
            return grpc.unary_unary_rpc_method_handler(
                _unary_unary,
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        if handler.unary_stream:
            return grpc.unary_stream_rpc_method_handler(
                _unary_stream,
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        return handler
