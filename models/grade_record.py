# models/grade_record.py

"""
Represents the stored grade for one student on one assignment.

Each `GradeRecord` holds the student ID, the assignment ID, the grade as entered (a string-typed
real number, or None when the cell is ungraded), an optional free-text comment, and metadata
about who last recorded the grade and when.

Notes:
- Grades are kept as strings because that is how they are entered and compared for concurrency;
  numeric interpretation happens in `core.formatters.parse_grade()`.
- Records are only ever mutated through the grade save protocol.
"""

from __future__ import annotations

import datetime


class GradeRecord:

    def __init__(
        self,
        assignment_id: str,
        student_id: str,
        grade: str | None,
        comment: str | None = None,
        graded_by: str | None = None,
        date_recorded: datetime.datetime | None = None,
    ):
        self._assignment_id = assignment_id
        self._student_id = student_id
        self._grade = grade
        self._comment = comment
        self._graded_by = graded_by
        self._date_recorded = date_recorded

    # === properties ===

    @property
    def assignment_id(self) -> str:
        return self._assignment_id

    @property
    def student_id(self) -> str:
        return self._student_id

    @property
    def grade(self) -> str | None:
        return self._grade

    @grade.setter
    def grade(self, grade: str | None) -> None:
        self._grade = grade

    @property
    def has_grade(self) -> bool:
        return self._grade is not None and self._grade.strip() != ""

    @property
    def comment(self) -> str | None:
        return self._comment

    @comment.setter
    def comment(self, comment: str | None) -> None:
        self._comment = comment

    @property
    def graded_by(self) -> str | None:
        return self._graded_by

    @property
    def date_recorded(self) -> datetime.datetime | None:
        return self._date_recorded

    def mark_recorded(
        self, graded_by: str | None, date_recorded: datetime.datetime
    ) -> None:
        self._graded_by = graded_by
        self._date_recorded = date_recorded

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "assignment_id": self._assignment_id,
            "student_id": self._student_id,
            "grade": self._grade,
            "comment": self._comment,
            "graded_by": self._graded_by,
            "date_recorded": (
                self._date_recorded.isoformat() if self._date_recorded else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> GradeRecord:
        date_recorded_str = data.get("date_recorded")

        return cls(
            assignment_id=data["assignment_id"],
            student_id=data["student_id"],
            grade=data.get("grade"),
            comment=data.get("comment"),
            graded_by=data.get("graded_by"),
            date_recorded=(
                datetime.datetime.fromisoformat(date_recorded_str)
                if date_recorded_str
                else None
            ),
        )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"GradeRecord({self._assignment_id}, {self._student_id}, {self._grade}, {self._graded_by})"

    def __str__(self) -> str:
        return f"GRADE: student id: {self._student_id}, assignment id: {self._assignment_id}, grade: {self._grade}"
