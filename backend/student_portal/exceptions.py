"""Domain exceptions raised inside the service layer."""


class StudentNotFoundError(Exception):
    """Raised when no student row exists for the requested id."""

    def __init__(self, student_id: int):
        self.student_id = student_id
        super().__init__(f"Student not found with ID: {student_id}")
