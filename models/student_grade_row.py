# models/student_grade_row.py

"""
One row of the grade matrix: a student, their grades keyed by assignment ID, and their course grade.

Rows are built fresh for every matrix request and discarded afterwards; they are never persisted.
The grades mapping is sparse, an absent assignment ID means the student is ungraded for it.
"""

from __future__ import annotations

from models.grade_record import GradeRecord
from models.user import User


class StudentGradeRow:

    def __init__(self, student: User, course_grade: str | None = None):
        self._student = student
        self._grades: dict[str, GradeRecord] = {}
        self._course_grade = course_grade

    # === properties ===

    @property
    def student(self) -> User:
        return self._student

    @property
    def student_id(self) -> str:
        return self._student.id

    @property
    def student_eid(self) -> str:
        return self._student.eid

    @property
    def student_display_id(self) -> str:
        return self._student.display_id

    @property
    def student_display_name(self) -> str:
        return self._student.display_name

    @property
    def course_grade(self) -> str | None:
        return self._course_grade

    @course_grade.setter
    def course_grade(self, course_grade: str | None) -> None:
        self._course_grade = course_grade

    @property
    def grades(self) -> dict[str, GradeRecord]:
        return self._grades.copy()

    # === data accessors ===

    def grade_for(self, assignment_id: str) -> str | None:
        record = self._grades.get(assignment_id)
        return record.grade if record else None

    def record_for(self, assignment_id: str) -> GradeRecord | None:
        return self._grades.get(assignment_id)

    # === data manipulators ===

    def add_grade(self, assignment_id: str, record: GradeRecord) -> None:
        self._grades[assignment_id] = record

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"StudentGradeRow({self._student.id}, {len(self._grades)} grades, {self._course_grade})"

    def __str__(self) -> str:
        return f"ROW: student: {self._student.display_name}, course grade: {self._course_grade}"
