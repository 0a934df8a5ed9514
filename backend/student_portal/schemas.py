"""Pydantic request/response schemas used by the API.

Schemas keep the wire shapes stable and independent of the storage
models. Field names are camelCase on the wire (`studentClass`,
`flatNo`); snake_case names are accepted on input as well.

Every service result is wrapped in an envelope that carries either a
`response` or an `error`. The two envelope types are separate models so
a body with both, or with neither, cannot be built.
"""

from typing import Any, Generic, List, Optional, TypeVar, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class WireModel(BaseModel):
    """Base for camelCase wire models."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddressDTO(WireModel):
    """Address as seen by API clients (no identity, no owner)."""
    flat_no: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class StudentDTO(WireModel):
    """Student transfer shape used for register/update input and read output."""
    id: Optional[int] = None
    name: Optional[str] = None
    student_class: Optional[str] = None
    age: int = 0
    addresses: List[AddressDTO] = Field(default_factory=list)


class AddressRecord(AddressDTO):
    """Stored address including its assigned identity."""
    id: Optional[int] = None


class StudentRecord(WireModel):
    """Stored student as returned by registration."""
    id: Optional[int] = None
    name: Optional[str] = None
    student_class: Optional[str] = None
    age: int = 0
    addresses: List[AddressRecord] = Field(default_factory=list)


class ErrorResponse(WireModel):
    """Error body: human readable message plus a short machine code."""
    error_message: str
    error_code: str


class SuccessEnvelope(BaseModel, Generic[T]):
    model_config = ConfigDict(extra="forbid")

    response: T


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: ErrorResponse


PortalResponse = Union[SuccessEnvelope[Any], ErrorEnvelope]
