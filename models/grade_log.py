# models/grade_log.py

"""
A single grading event: who set which grade for a student on an assignment, and when.

The grade source appends one entry per committed grade; the business service returns them newest first.
"""

from __future__ import annotations

import datetime


class GradeLogEntry:

    def __init__(
        self,
        assignment_id: str,
        student_id: str,
        grader_id: str | None,
        grade: str | None,
        date_graded: datetime.datetime,
    ):
        self._assignment_id = assignment_id
        self._student_id = student_id
        self._grader_id = grader_id
        self._grade = grade
        self._date_graded = date_graded

    # === properties ===

    @property
    def assignment_id(self) -> str:
        return self._assignment_id

    @property
    def student_id(self) -> str:
        return self._student_id

    @property
    def grader_id(self) -> str | None:
        return self._grader_id

    @property
    def grade(self) -> str | None:
        return self._grade

    @property
    def date_graded(self) -> datetime.datetime:
        return self._date_graded

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "assignment_id": self._assignment_id,
            "student_id": self._student_id,
            "grader_id": self._grader_id,
            "grade": self._grade,
            "date_graded": self._date_graded.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> GradeLogEntry:
        return cls(
            assignment_id=data["assignment_id"],
            student_id=data["student_id"],
            grader_id=data.get("grader_id"),
            grade=data.get("grade"),
            date_graded=datetime.datetime.fromisoformat(data["date_graded"]),
        )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"GradeLogEntry({self._assignment_id}, {self._student_id}, {self._grader_id}, {self._grade})"
