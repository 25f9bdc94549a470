# core/grade_matrix.py

"""
Builds the grade matrix: one row per rostered student, holding the student's grade record for each
requested assignment and their course grade.

The build is isolated at the assignment level: if fetching one assignment's grades fails, that
assignment's cells stay empty for everyone and the rest of the matrix is still returned. Course
grades are handled the same way: if they cannot be fetched, every row is returned without one. Grade
records for students who are no longer on the roster are skipped with a warning.
"""

from __future__ import annotations

import logging

from core.exceptions import FetchError, GradebookNotFoundError
from core.formatters import grade_sort_key
from core.ports import GradeSource, RosterSource
from core.response import Response
from models.assignment import Assignment
from models.context import GradebookContext
from models.sort_order import GradeSortOrder
from models.student_grade_row import StudentGradeRow
from models.user import User

logger = logging.getLogger(__name__)


class GradeMatrixBuilder:

    def __init__(self, roster: RosterSource, grades: GradeSource):
        self._roster = roster
        self._grades = grades

    def build(
        self,
        context: GradebookContext,
        assignments: list[Assignment],
        student_ids: list[str] | None = None,
        sort_order: GradeSortOrder | None = None,
    ) -> Response:
        """
        Builds the matrix of students and grades for the given assignments.

        Args:
            context (GradebookContext): The resolved site, gradebook, and acting user.
            assignments (list[Assignment]): The assignment columns to fill.
            student_ids (list[str] | None): The students to include. If omitted, the site's full gradeable roster is used.
            sort_order (GradeSortOrder | None): Optional column sort. If omitted, rows stay in last-name order.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the matrix was built, even if some assignments could not be fetched.
                    - False if the site has no gradebook.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, None.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NO_GRADEBOOK` if the site has no gradebook or roster.
                - status_code (int | None):
                    - 200 on success
                    - 404 if there is no gradebook
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "rows" (list[StudentGradeRow]): Exactly one row per resolved student.
                    - On failure:
                        - None

        Raises:
            FetchError: If the user directory fails while resolving students.

        Notes:
            - A descending sort is the exact reverse of the stable ascending sort, so tied rows also come out reversed.
        """
        gradebook_id = context.gradebook_id

        if gradebook_id is None:
            return Response.no_gradebook(context.site_id)

        if student_ids is None:
            student_ids = self._roster.gradeable_user_ids(context.site_id)

            if student_ids is None:
                return Response.no_gradebook(context.site_id)

        students = self._resolve_students(student_ids)

        try:
            course_grades = self._grades.course_grades(gradebook_id)

        except GradebookNotFoundError:
            logger.error(f"No gradebook in site: {context.site_id}")
            return Response.no_gradebook(context.site_id)

        except Exception as e:
            logger.error(
                f"Error retrieving course grades. Continuing without them: {e}",
                exc_info=True,
            )
            course_grades = {}

        # seeded up front so that grades can only ever attach to rostered students
        matrix: dict[str, StudentGradeRow] = {}

        for student in students:
            matrix[student.id] = StudentGradeRow(
                student, course_grade=course_grades.get(student.eid)
            )

        for assignment in assignments:
            self._attach_grades(matrix, gradebook_id, assignment, student_ids)

        rows = list(matrix.values())

        if sort_order is not None:
            rows = sort_rows(rows, sort_order)

        return Response.succeed(
            data={
                "rows": rows,
            }
        )

    # === helper methods ===

    def _resolve_students(self, student_ids: list[str]) -> list[User]:
        """
        Resolves user ids to users, sorted by last name.

        Raises:
            FetchError: If the directory lookup fails for any reason.
        """
        try:
            users = self._roster.resolve_users(student_ids)

        except FetchError:
            raise

        except Exception as e:
            raise FetchError("An error occurred getting the list of users.") from e

        # stable, so the resolver's order breaks last-name ties
        return sorted(users, key=lambda user: user.last_name)

    def _attach_grades(
        self,
        matrix: dict[str, StudentGradeRow],
        gradebook_id: str,
        assignment: Assignment,
        student_ids: list[str],
    ) -> None:
        try:
            records = self._grades.grades_for_students(
                gradebook_id, assignment.id, student_ids
            )

        except Exception as e:
            logger.error(
                f"Error retrieving grades for assignment {assignment.id}. Skipping: {e}",
                exc_info=True,
            )
            return

        for record in records:
            row = matrix.get(record.student_id)

            if row is None:
                logger.warning(
                    f"No matrix entry seeded for: {record.student_id}. This user may have been removed from the site"
                )
                continue

            row.add_grade(assignment.id, record)


def sort_rows(
    rows: list[StudentGradeRow], sort_order: GradeSortOrder
) -> list[StudentGradeRow]:
    """
    Sorts matrix rows on one assignment's numeric grade.

    Missing, blank, and unparsable grades sort lowest. The ascending sort is stable; a descending
    sort reverses the ascending result in full.
    """
    assignment_id = sort_order.assignment_id

    ordered = sorted(rows, key=lambda row: grade_sort_key(row.grade_for(assignment_id)))

    if sort_order.is_descending:
        ordered.reverse()

    return ordered
