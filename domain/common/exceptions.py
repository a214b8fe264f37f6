"""Business exceptions raised by the domain and infrastructure layers.

The gRPC layer only maps them to status codes (see
`grpc_app.interceptors.exceptions`); lower layers never import grpc.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class InvalidRecordIdException(BusinessException):
    def __init__(self, record_id: str):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=f"Could not convert {record_id!r} to an ObjectId",
            error_type="InvalidRecordId",
            details={"record_id": record_id},
            field="id",
        )


class RecordNotFoundException(BusinessException):
    def __init__(self, record_id: Optional[str] = None, *, reason: Optional[str] = None):
        details = {}
        if record_id is not None:
            details["record_id"] = record_id
        if reason:
            details["reason"] = reason
        super().__init__(
            code=BusinessCode.NOT_FOUND,
            message=f"Could not find record with id {record_id}" if record_id else "Record not found",
            error_type="RecordNotFound",
            details=details or None,
        )


class RecordStoreException(BusinessException):
    """The store rejected an insert or a scan could not be completed."""

    def __init__(self, message: str, *, reason: Optional[str] = None):
        super().__init__(
            code=BusinessCode.DATABASE_ERROR,
            message=message,
            error_type="RecordStoreError",
            details={"reason": reason} if reason else None,
        )


class RecordDecodeException(BusinessException):
    """A stored document could not be turned into a Record while listing."""

    def __init__(self, reason: str):
        super().__init__(
            code=BusinessCode.SERVICE_UNAVAILABLE,
            message=f"Could not decode record: {reason}",
            error_type="RecordDecodeError",
            details={"reason": reason},
        )
