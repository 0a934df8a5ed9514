"""Business logic services used by HTTP controllers.

`StudentService` coordinates the repository and the converters and
wraps every outcome in the portal envelope. Each public method catches
all exceptions at its own boundary: controllers receive a finished
`JSONResponse` and never see an exception from this module.
"""

import logging
from typing import Any
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlmodel import Session
from . import converters, repositories, schemas
from .config import settings
from .exceptions import StudentNotFoundError

logger = logging.getLogger("student_portal.services")

NOT_FOUND_MESSAGE = "Student not found"
NOT_FOUND_CODE = "STD_NOT_FOUND"
REGISTER_ERROR_CODE = "ERR_STUDENT_REGISTER"
INTERNAL_ERROR_CODE = "INTERNAL_SERVER_ERROR"


class BaseService:
    """Envelope helpers shared by services."""
    def __init__(self, session: Session):
        self.session = session

    def _respond(self, status_code: int, envelope: schemas.PortalResponse) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=envelope.model_dump(by_alias=True))

    def _success(self, data: Any) -> JSONResponse:
        envelope = schemas.SuccessEnvelope(response=jsonable_encoder(data, by_alias=True))
        return self._respond(status.HTTP_200_OK, envelope)

    def _error(self, status_code: int, message: str, code: str) -> JSONResponse:
        envelope = schemas.ErrorEnvelope(error=schemas.ErrorResponse(error_message=message, error_code=code))
        return self._respond(status_code, envelope)

    def _not_found(self) -> JSONResponse:
        return self._error(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE, NOT_FOUND_CODE)

    def _internal(self, message: str, code: str = INTERNAL_ERROR_CODE) -> JSONResponse:
        # a failed flush leaves the session unusable until rolled back
        self.session.rollback()
        return self._error(status.HTTP_500_INTERNAL_SERVER_ERROR, message, code)


class StudentService(BaseService):
    """Register, read, list, update and delete students."""
    def __init__(self, session: Session):
        super().__init__(session)
        self.student_repo = repositories.StudentRepository(session)

    def register_student(self, dto: schemas.StudentDTO) -> JSONResponse:
        """Create a student together with its addresses.

        The success body is the stored record, address ids included.
        """
        try:
            student = converters.to_student_entity(dto)
            saved = self.student_repo.save(student)
            logger.info("Student registered with name: %s", dto.name)
            return self._success(converters.to_student_record(saved))
        except Exception:
            logger.exception("Exception while Student registration: %s", dto)
            return self._internal("Error registering student", REGISTER_ERROR_CODE)

    def get_student_by_id(self, student_id: int) -> JSONResponse:
        logger.info("Fetching student with ID: %s", student_id)
        try:
            student = self.student_repo.find_by_id(student_id)
            if student is None:
                raise StudentNotFoundError(student_id)
            return self._success(converters.to_student_dto(student))
        except StudentNotFoundError:
            return self._not_found()
        except Exception:
            logger.exception("Exception while fetching Student by Id: %s", student_id)
            return self._internal("Error While Fetching Student")

    def get_students_by_class(self, student_class: str, page: int, size: int) -> JSONResponse:
        """Return one page of students in `student_class`.

        `page` is 1-based here and converted to the repository's 0-based
        index. Pages past the end are an empty success, not an error.
        """
        logger.info("Retrieving students of class: %s (page=%s, size=%s)", student_class, page, size)
        try:
            if settings.MAX_PAGE_SIZE and size > settings.MAX_PAGE_SIZE:
                size = settings.MAX_PAGE_SIZE
            result = self.student_repo.find_by_class_paginated(student_class, page - 1, size)
            return self._success([converters.to_student_dto(s) for s in result.items])
        except Exception:
            logger.exception("Error retrieving students by class %s", student_class)
            return self._internal("Error while Retrieving students of class")

    def get_all_students(self) -> JSONResponse:
        logger.info("Retrieving all students.")
        try:
            students = self.student_repo.find_all()
            return self._success([converters.to_student_dto(s) for s in students])
        except Exception:
            logger.exception("Error retrieving all students")
            return self._internal(INTERNAL_ERROR_CODE)

    def update_student(self, student_id: int, dto: schemas.StudentDTO) -> JSONResponse:
        """Overwrite a student and replace its whole address list.

        Scalar fields are copied unconditionally, so absent input values
        reset the stored ones. Previous address rows are deleted and new
        ones created; their ids are never reused.
        """
        logger.info("Updating student with ID: %s", student_id)
        try:
            existing = self.student_repo.find_by_id(student_id)
            if existing is None:
                raise StudentNotFoundError(student_id)
            existing.name = dto.name
            existing.age = dto.age
            existing.student_class = dto.student_class
            existing.addresses = converters.to_address_entities(dto.addresses)
            updated = self.student_repo.save(existing)
            logger.info("Student updated with ID: %s", student_id)
            return self._success(converters.to_student_dto(updated))
        except StudentNotFoundError:
            return self._not_found()
        except Exception:
            logger.exception("Error updating student with ID %s", student_id)
            return self._internal("Error while updating student")

    def delete_student(self, student_id: int) -> JSONResponse:
        logger.info("Deleting student with ID: %s", student_id)
        try:
            if not self.student_repo.exists_by_id(student_id):
                raise StudentNotFoundError(student_id)
            self.student_repo.delete_by_id(student_id)
            logger.info("Student deleted with ID: %s", student_id)
            return self._success(f"Student deleted with ID: {student_id}")
        except StudentNotFoundError:
            return self._not_found()
        except Exception:
            logger.exception("Error deleting student with ID %s", student_id)
            return self._internal(INTERNAL_ERROR_CODE)
