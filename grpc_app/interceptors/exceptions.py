from __future__ import annotations

from typing import Callable, Awaitable
import contextvars

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.request_id import REQUEST_ID_META_KEY, get_request_id
from domain.common.exceptions import BusinessException
from shared.codes import BusinessCode


logger = get_logger(__name__)

# Mark that the current request has been mapped to a gRPC status
_mapped_error: contextvars.ContextVar[bool] = contextvars.ContextVar("grpc_mapped_error", default=False)


def set_mapped_error() -> None:
    _mapped_error.set(True)


def is_mapped_error() -> bool:
    return bool(_mapped_error.get())


_STATUS_BY_CODE = {
    BusinessCode.PARAM_VALIDATION_ERROR: grpc.StatusCode.INVALID_ARGUMENT,

    BusinessCode.NOT_FOUND: grpc.StatusCode.NOT_FOUND,

    BusinessCode.SERVICE_UNAVAILABLE: grpc.StatusCode.UNAVAILABLE,
    BusinessCode.SYSTEM_ERROR: grpc.StatusCode.INTERNAL,
    BusinessCode.DATABASE_ERROR: grpc.StatusCode.INTERNAL,
}


def business_code_to_grpc_status(code: int) -> grpc.StatusCode:
    try:
        bc = BusinessCode(code)
    except ValueError:
        return grpc.StatusCode.FAILED_PRECONDITION
    return _STATUS_BY_CODE.get(bc, grpc.StatusCode.FAILED_PRECONDITION)


async def _abort(
    context: grpc.aio.ServicerContext,
    method: str,
    exc: Exception,
) -> None:
    """Translate `exc` into a terminal status on `context` (raises AbortError)."""
    if isinstance(exc, BusinessException):
        code = int(exc.code)
        error_type = exc.error_type or "BusinessError"
        status = business_code_to_grpc_status(code)
        message = exc.message
        log_message = exc.message
    else:
        code = int(BusinessCode.SYSTEM_ERROR)
        error_type = "SystemError"
        status = grpc.StatusCode.INTERNAL
        message = "Internal error"
        log_message = str(exc)

    trailers = [
        ("x-biz-code", str(code)),
        ("x-error-type", error_type),
    ]
    request_id = get_request_id()
    if request_id:
        # set_trailing_metadata replaces; keep the id RequestIdInterceptor attached
        trailers.append((REQUEST_ID_META_KEY, request_id))
    try:
        context.set_trailing_metadata(tuple(trailers))
    except Exception:
        pass
    set_mapped_error()
    # Concise log (no stack) for business errors; unknown errors keep the traceback
    logger.error(
        "grpc_mapped_error",
        method=method,
        code=str(code),
        status=str(status),
        message=log_message,
        request_id=get_request_id(),
        exc_info=not isinstance(exc, BusinessException),
    )
    await context.abort(status, message)


class ExceptionMappingInterceptor(grpc.aio.ServerInterceptor):
    """Maps exceptions escaping a handler to gRPC status codes.

    Covers unary-unary and unary-stream handlers. For streams, replies
    yielded before the failure have already been sent; only the final status
    changes.
    """

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
            try:
                return await handler.unary_unary(request, context)
            except grpc.aio.AbortError:
                raise
            except Exception as exc:
                await _abort(context, method, exc)

        async def _unary_stream(request, context: grpc.aio.ServicerContext):
            try:
                async for response in handler.unary_stream(request, context):
                    yield response
            except grpc.aio.AbortError:
                raise
            except Exception as exc:
                await _abort(context, method, exc)

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
