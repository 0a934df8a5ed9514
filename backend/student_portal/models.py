"""SQLModel data models.

This module defines the storage shape of the portal: a `Student` table
and the `Address` rows it owns. Addresses only hold the owning
student's id; there is no relationship attribute pointing back at the
`Student` object.
"""

from typing import List, Optional
from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import SQLModel, Field, Relationship


class Student(SQLModel, table=True):
    """A registered student.

    Fields:
    - `student_class`: free text class/section label, e.g. `5A`
    - `addresses`: owned rows, loaded eagerly; replacing the list deletes
      the previous rows and deleting the student deletes all of them
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    student_class: Optional[str] = Field(default=None, index=True)
    age: int = 0
    addresses: List['Address'] = Relationship(
        sa_relationship_kwargs={
            'cascade': 'all, delete-orphan',
            'lazy': 'selectin',
            'order_by': 'Address.id',
        }
    )


class Address(SQLModel, table=True):
    """An address owned by exactly one `Student`.

    Ids are never reused, so a replaced address list always comes back
    with new identities.
    """
    __table_args__ = {'sqlite_autoincrement': True}

    id: Optional[int] = Field(default=None, primary_key=True)
    flat_no: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    student_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey('student.id', ondelete='CASCADE'), index=True, nullable=False),
    )
