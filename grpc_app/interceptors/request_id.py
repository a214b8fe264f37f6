from __future__ import annotations

import uuid
import contextvars
from typing import Callable, Awaitable

import grpc


REQUEST_ID_META_KEY = "x-request-id"
_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("grpc_request_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


def _resolve_request_id(handler_call_details: grpc.HandlerCallDetails) -> str:
    md = dict(handler_call_details.invocation_metadata or [])
    return md.get(REQUEST_ID_META_KEY) or str(uuid.uuid4())


def _attach(context: grpc.aio.ServicerContext, request_id: str) -> None:
    # Echo as trailing metadata so the client can correlate
    try:
        context.set_trailing_metadata(((REQUEST_ID_META_KEY, request_id),))
    except Exception:
        pass


class RequestIdInterceptor(grpc.aio.ServerInterceptor):
    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            request_id = _resolve_request_id(handler_call_details)
            _attach(context, request_id)
            token = _request_id_var.set(request_id)
            try:
                return await handler.unary_unary(request, context)
            finally:
                _request_id_var.reset(token)

        async def _unary_stream(request, context: grpc.aio.ServicerContext):
            request_id = _resolve_request_id(handler_call_details)
            _attach(context, request_id)
            # No reset: a cancelled stream is finalized from another Context,
            # and each RPC already runs in its own task context.
            _request_id_var.set(request_id)
            async for response in handler.unary_stream(request, context):
                yield response

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
