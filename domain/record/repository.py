"""
记录仓储接口 - 定义数据访问的抽象接口
"""
from abc import ABC, abstractmethod
from typing import AsyncIterator

from .entity import Record, RecordFields


class RecordRepository(ABC):
    """Record storage port.

    Every method maps to exactly one store call. Failures surface as
    `domain.common.exceptions.BusinessException` subclasses.
    """

    @abstractmethod
    async def create(self, fields: RecordFields) -> Record:
        """Insert a new record; the store assigns the id."""
        pass

    @abstractmethod
    async def get_by_id(self, record_id: str) -> Record:
        """Fetch one record by id."""
        pass

    @abstractmethod
    async def update(self, record_id: str, fields: RecordFields) -> Record:
        """Replace all fields of an existing record and return the new value."""
        pass

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """Delete a record by id."""
        pass

    @abstractmethod
    def list_all(self) -> AsyncIterator[Record]:
        """Lazily iterate every record in store order.

        The iterator is single-use; call again to start a new scan.
        """
        pass
