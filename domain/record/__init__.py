"""Record domain: entity and repository port."""
from .entity import Record, RecordFields
from .repository import RecordRepository

__all__ = ["Record", "RecordFields", "RecordRepository"]
