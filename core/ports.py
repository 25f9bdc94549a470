# core/ports.py

"""
Interfaces of the collaborators the gradebook services depend on.

The services only ever talk to these protocols. `models.gradebook.Gradebook` implements the roster,
grade, and order-resource ports for a single in-process gradebook; production deployments plug in
adapters for their directory and grade store.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, TypeVar

from models.assignment import Assignment
from models.assignment_order import AssignmentOrderEntry
from models.grade_log import GradeLogEntry
from models.grade_record import GradeRecord
from models.user import User

V = TypeVar("V")


class RosterSource(Protocol):
    def gradeable_user_ids(self, site_id: str) -> Optional[list[str]]:
        """Users allowed to hold grades in the site, or None if the site cannot be found."""
        ...

    def resolve_users(self, user_ids: list[str]) -> list[User]:
        ...

    def user(self, user_id: str) -> Optional[User]:
        ...

    def current_user(self) -> User:
        ...


class GradeSource(Protocol):
    def gradebook_uid(self, site_id: str) -> Optional[str]:
        ...

    def assignments(self, gradebook_id: str) -> list[Assignment]:
        """All assignments, already in sort order."""
        ...

    def assignment(self, gradebook_id: str, assignment_id: str) -> Optional[Assignment]:
        ...

    def grades_for_students(
        self, gradebook_id: str, assignment_id: str, student_ids: list[str]
    ) -> list[GradeRecord]:
        """Grade records for the given students; students without a record are omitted."""
        ...

    def current_grade(
        self, gradebook_id: str, assignment_id: str, student_id: str
    ) -> Optional[str]:
        ...

    def commit_grade(
        self,
        gradebook_id: str,
        assignment_id: str,
        student_id: str,
        grade: Optional[str],
        comment: Optional[str],
        graded_by: Optional[str] = None,
    ) -> None:
        """
        Store grade and comment in one write. A None comment clears the stored comment.

        Raises GradebookNotFoundError, AssignmentNotFoundError or InvalidGradeError.
        """
        ...

    def course_grades(self, gradebook_id: str) -> dict[str, str]:
        """Course grades keyed by student eid, overrides taking precedence."""
        ...

    def add_assignment(self, gradebook_id: str, assignment: Assignment) -> None:
        ...

    def update_assignment(self, gradebook_id: str, assignment: Assignment) -> None:
        ...

    def update_assignment_order(
        self, gradebook_id: str, assignment_id: str, order: int
    ) -> None:
        ...

    def grading_events(
        self, gradebook_id: str, student_id: str, assignment_id: str
    ) -> list[GradeLogEntry]:
        """Grading events in the order they happened."""
        ...

    def grade_comment(
        self, gradebook_id: str, assignment_id: str, student_id: str
    ) -> Optional[str]:
        ...

    def set_grade_comment(
        self,
        gradebook_id: str,
        assignment_id: str,
        student_id: str,
        comment: Optional[str],
    ) -> None:
        ...


class OrderResource(Protocol):
    """An opaque blob attached to a site, holding its encoded assignment order."""

    def get_order_blob(self, site_id: str) -> Optional[bytes]:
        ...

    def set_order_blob(self, site_id: str, blob: bytes) -> None:
        ...


class OrderCodec(Protocol):
    def encode(self, entries: list[AssignmentOrderEntry]) -> bytes:
        ...

    def decode(self, blob: bytes) -> list[AssignmentOrderEntry]:
        """Raises ValueError if the blob cannot be decoded."""
        ...


class KeyedCache(Protocol[V]):
    def get(self, key: str) -> Optional[V]:
        ...

    def put(self, key: str, value: V) -> None:
        ...

    def update(self, key: str, fn: Callable[[Optional[V]], V]) -> V:
        """Atomically replace the value for `key` with `fn(current)` and return it."""
        ...

    def remove(self, key: str) -> None:
        ...
