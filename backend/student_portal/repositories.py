"""Repository classes encapsulating database operations.

Repositories are small and focused on a single table. They return
SQLModel objects and perform commits/refreshes where appropriate; the
session is rolled back when a write fails so it stays usable.
"""

from dataclasses import dataclass
from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func
from . import models

# SQLite INTEGER, OFFSET and LIMIT are signed 64-bit
MAX_SQL_INT = 2**63 - 1
MIN_SQL_INT = -(2**63)


def _storable(value: int) -> bool:
    return MIN_SQL_INT <= value <= MAX_SQL_INT


@dataclass
class Page:
    """One page of a filtered query.

    `page` is 0-based. `total` counts all matching rows, not only the
    ones in `items`; it is only filled in when asked for.
    """
    items: List[models.Student]
    page: int
    size: int
    total: Optional[int] = None


class StudentRepository:
    """CRUD operations for `Student` aggregates (student plus addresses)."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, student: models.Student) -> models.Student:
        """Insert or update a student and its addresses in one commit.

        Returns the managed instance with its id assigned.
        """
        self.session.add(student)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(student)
        return student

    def find_by_id(self, student_id: int) -> Optional[models.Student]:
        """Return a `Student` by primary key or `None` if not found.

        Ids the database cannot store have no row, so they give `None`.
        """
        if not _storable(student_id):
            return None
        return self.session.get(models.Student, student_id)

    def find_all(self) -> List[models.Student]:
        stmt = select(models.Student).order_by(models.Student.id)
        return list(self.session.exec(stmt).all())

    def find_by_class(self, student_class: str) -> List[models.Student]:
        """Return every student whose class label equals `student_class`."""
        stmt = select(models.Student).where(models.Student.student_class == student_class).order_by(models.Student.id)
        return list(self.session.exec(stmt).all())

    def find_by_class_paginated(self, student_class: str, page: int, size: int, with_total: bool = False) -> Page:
        """Return the 0-based `page` of students in `student_class`.

        A page past the end yields an empty `items` list, including pages
        whose offset is beyond what the database can address. The extra
        `COUNT(*)` for `total` only runs when `with_total` is set.
        """
        if page < 0:
            raise ValueError("page index must not be negative")
        if size < 1:
            raise ValueError("page size must be at least one")
        offset = page * size
        items = []
        if offset <= MAX_SQL_INT:
            stmt = (
                select(models.Student)
                .where(models.Student.student_class == student_class)
                .order_by(models.Student.id)
                .offset(offset)
                .limit(min(size, MAX_SQL_INT))
            )
            items = list(self.session.exec(stmt).all())
        total = None
        if with_total:
            count_stmt = select(func.count()).select_from(models.Student).where(models.Student.student_class == student_class)
            total = self.session.exec(count_stmt).one()
        return Page(items=items, page=page, size=size, total=total)

    def exists_by_id(self, student_id: int) -> bool:
        if not _storable(student_id):
            return False
        stmt = select(models.Student.id).where(models.Student.id == student_id)
        return self.session.exec(stmt).first() is not None

    def delete_by_id(self, student_id: int) -> None:
        """Delete a student and, through the cascade, its addresses.

        Callers check existence first; a missing id is a no-op here.
        """
        student = self.find_by_id(student_id)
        if student is None:
            return
        self.session.delete(student)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise


class AddressRepository:
    """Query helpers for `Address` rows."""
    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, address_id: int) -> Optional[models.Address]:
        return self.session.get(models.Address, address_id)

    def find_by_student(self, student_id: int) -> List[models.Address]:
        """List all address rows owned by `student_id`."""
        stmt = select(models.Address).where(models.Address.student_id == student_id).order_by(models.Address.id)
        return list(self.session.exec(stmt).all())

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(models.Address)).one()
