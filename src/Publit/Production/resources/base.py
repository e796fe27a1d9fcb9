"""
Shared Building Blocks for Resource Modules

Every resource module declares endpoint templates keyed by ``Endpoint`` and
builds ``Resource`` values to address them. Index calls decode into a generic
``IndexResponse`` page.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, ClassVar, Generic, Mapping, Optional, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ResponseError

T = TypeVar("T")


class Endpoint(Enum):
    """Operations a resource endpoint may serve."""

    INDEX = auto()
    SHOW = auto()
    POST = auto()
    PUT = auto()
    DELETE = auto()


@dataclass(frozen=True)
class Resource:
    """An endpoint template bound to an optional record id."""

    template: str
    id: Optional[int] = None

    @property
    def endpoint(self) -> str:
        if "{id}" in self.template and self.id:
            return self.template.format(id=self.id)
        return self.template


class PublitModel(BaseModel):
    """Base for resource models: unknown attributes are ignored, values re-validated on assignment."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore", populate_by_name=True, validate_assignment=True
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for POST/PUT, dropping unset ids and empty optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IndexResponse(BaseModel, Generic[T]):
    """One page of an index call."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")

    count: int = 0
    next: Optional[str] = None
    prev: Optional[str] = None
    data: list[T] = Field(default_factory=list)


# ============================================================================
# Client capabilities
# ============================================================================


class ProductionAPIGetter(Protocol):
    def get(self, endpoint: Any, params: Optional[Mapping[str, Any]] = None) -> Any: ...


class ProductionAPIPoster(Protocol):
    def post(self, endpoint: Any, payload: Any) -> Any: ...


class ProductionAPIPutter(Protocol):
    def put(self, endpoint: Any, payload: Any) -> Any: ...


class ProductionAPIDeleter(Protocol):
    def delete(self, endpoint: Any) -> Any: ...


def first_record(body: Any) -> Any:
    """Return the record of a write response, which may be wrapped in a list."""
    if isinstance(body, list):
        if not body:
            raise ResponseError("Empty list in write response")
        return body[0]
    return body
