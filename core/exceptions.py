# core/exceptions.py

"""
Domain exceptions shared by the gradebook services and the sources they call.

Grade sources raise the not-found and invalid-grade kinds; services catch them at their boundary
and convert them to a `Response` or a `GradeSaveResult`. `FetchError` is the one exception that is
meant to reach callers: it wraps raw directory failures so their transport types never leak.
"""


class GradebookError(Exception):
    """Base class for gradebook domain errors."""


class FetchError(GradebookError):
    """A roster or directory lookup failed for a reason outside the caller's control."""


class GradebookNotFoundError(GradebookError):
    def __init__(self, gradebook_id: str):
        super().__init__(f"No gradebook with id: {gradebook_id}")
        self.gradebook_id = gradebook_id


class AssignmentNotFoundError(GradebookError):
    def __init__(self, assignment_id: str):
        super().__init__(f"No assignment with id: {assignment_id}")
        self.assignment_id = assignment_id


class InvalidGradeError(GradebookError):
    """The grade value was rejected by the grade source."""
