"""
记录领域实体 - the single document type managed by the service
"""
from dataclasses import dataclass, field, asdict
from typing import Optional


@dataclass(frozen=True)
class RecordFields:
    """Mutable part of a record: everything except the identifier."""

    author_id: str = ""
    title: str = ""
    content: str = ""

    def __post_init__(self):
        for name in ("author_id", "title", "content"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise TypeError(f"{name} must be a string, got {type(value).__name__}")

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Record:
    """记录实体

    `id` is assigned by the store on creation and never changes afterwards.
    """

    id: Optional[str]
    fields: RecordFields = field(default_factory=RecordFields)

    def __post_init__(self):
        if self.id is not None and not isinstance(self.id, str):
            raise TypeError(f"id must be a string, got {type(self.id).__name__}")

    @property
    def author_id(self) -> str:
        return self.fields.author_id

    @property
    def title(self) -> str:
        return self.fields.title

    @property
    def content(self) -> str:
        return self.fields.content
