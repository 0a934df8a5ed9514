"""Field mapping between storage models and wire schemas.

All functions are pure: they build new objects and never touch a
session. Entity construction leaves `id` and `student_id` unset; the
database assigns both when the owning student is saved.
"""

from typing import Iterable, List, Optional
from . import models, schemas


def to_address_dto(address: models.Address) -> schemas.AddressDTO:
    return schemas.AddressDTO(flat_no=address.flat_no, city=address.city, state=address.state)


def to_student_dto(student: models.Student) -> schemas.StudentDTO:
    """Copy a stored student into its transfer shape."""
    return schemas.StudentDTO(
        id=student.id,
        name=student.name,
        student_class=student.student_class,
        age=student.age,
        addresses=[to_address_dto(a) for a in student.addresses or []],
    )


def to_student_record(student: models.Student) -> schemas.StudentRecord:
    """Copy a stored student including the identities of its addresses."""
    return schemas.StudentRecord(
        id=student.id,
        name=student.name,
        student_class=student.student_class,
        age=student.age,
        addresses=[
            schemas.AddressRecord(id=a.id, flat_no=a.flat_no, city=a.city, state=a.state)
            for a in student.addresses or []
        ],
    )


def to_address_entity(dto: schemas.AddressDTO) -> models.Address:
    return models.Address(flat_no=dto.flat_no, city=dto.city, state=dto.state)


def to_address_entities(dtos: Optional[Iterable[schemas.AddressDTO]]) -> List[models.Address]:
    """Build fresh address rows; `None` and `[]` both give an empty list."""
    return [to_address_entity(d) for d in dtos or []]


def to_student_entity(dto: schemas.StudentDTO) -> models.Student:
    """Build a new, unsaved student with freshly constructed addresses.

    The incoming `id` is ignored; identities are always system assigned.
    """
    student = models.Student(name=dto.name, student_class=dto.student_class, age=dto.age)
    student.addresses = to_address_entities(dto.addresses)
    return student
