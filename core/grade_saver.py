# core/grade_saver.py

"""
Saves a single grade with optimistic concurrency checking.

The caller sends the grade it last saw for the cell (`old_grade`). If the stored grade has changed
since, the save is refused with `CONCURRENT_EDIT` so the UI can show the conflict. Leaving
`old_grade` out disables the check.

Grades are compared after normalization (see `core.formatters.normalize_grade`), so "10.0", "10"
and "10 " are all the same grade, and a blank grade is the same as no grade.
"""

from __future__ import annotations

import logging

from core.edit_notifications import EditNotificationCache
from core.exceptions import GradebookError
from core.formatters import normalize_grade, parse_grade
from core.ports import GradeSource
from core.response import GradeSaveResult
from models.context import GradebookContext

logger = logging.getLogger(__name__)


class GradeSaver:

    def __init__(self, grades: GradeSource, notifications: EditNotificationCache):
        self._grades = grades
        self._notifications = notifications

    def save_grade(
        self,
        context: GradebookContext,
        assignment_id: str,
        student_id: str,
        new_grade: str | None,
        comment: str | None,
        old_grade: str | None = None,
    ) -> GradeSaveResult:
        """
        Saves the grade and comment for a student's assignment.

        Args:
            context (GradebookContext): The resolved site, gradebook, and acting user.
            assignment_id (str): The assignment being graded.
            student_id (str): The student being graded.
            new_grade (str | None): The grade to store. Blank or None clears the grade.
            comment (str | None): The comment to store with the grade. Always pass the current comment if only the grade changed, since None clears it.
            old_grade (str | None): The grade the caller last saw. None skips the concurrency check.

        Returns:
            GradeSaveResult:
                - `NO_CHANGE` if the stored grade already equals `new_grade`. Nothing is written.
                - `CONCURRENT_EDIT` if `old_grade` was given and no longer matches the stored grade. Nothing is written.
                - `OVER_LIMIT` if the grade was stored but exceeds the assignment's points possible.
                - `OK` if the grade was stored.
                - `ERROR` if there is no gradebook, the assignment cannot be found, or the commit fails.

        Notes:
            - The no-change check runs before the concurrency check, so re-saving the current value never reports a conflict.
            - An editing notification is pushed before the write is attempted, even if the write then fails.
            - This method never raises; failures are logged and reported as `ERROR`.
        """
        gradebook_id = context.gradebook_id

        if gradebook_id is None:
            logger.error(f"No gradebook in site: {context.site_id}")
            return GradeSaveResult.ERROR

        try:
            stored_grade = self._grades.current_grade(
                gradebook_id, assignment_id, student_id
            )

        except GradebookError as e:
            logger.error(f"An error occurred fetching the stored grade. {type(e).__name__}: {e}")
            return GradeSaveResult.ERROR

        except Exception:
            logger.exception("Unexpected error fetching the stored grade.")
            return GradeSaveResult.ERROR

        stored_grade = normalize_grade(stored_grade)
        old_grade = normalize_grade(old_grade)
        new_grade = normalize_grade(new_grade)

        logger.debug(f"storedGrade: {stored_grade}")
        logger.debug(f"oldGrade: {old_grade}")
        logger.debug(f"newGrade: {new_grade}")

        if stored_grade == new_grade:
            return GradeSaveResult.NO_CHANGE

        if old_grade is not None and stored_grade != old_grade:
            return GradeSaveResult.CONCURRENT_EDIT

        self._notify(context, student_id, assignment_id)

        try:
            assignment = self._grades.assignment(gradebook_id, assignment_id)

        except GradebookError as e:
            logger.error(f"An error occurred fetching the assignment. {type(e).__name__}: {e}")
            return GradeSaveResult.ERROR

        except Exception:
            logger.exception("Unexpected error fetching the assignment.")
            return GradeSaveResult.ERROR

        if assignment is None:
            logger.error(f"Assignment {assignment_id} not in gradebook {gradebook_id}")
            return GradeSaveResult.ERROR

        result = GradeSaveResult.OK

        new_points = parse_grade(new_grade)

        if new_points is not None and new_points > assignment.points_possible:
            logger.debug(f"over limit. Max: {assignment.points_possible}")
            result = GradeSaveResult.OVER_LIMIT

        try:
            self._grades.commit_grade(
                gradebook_id,
                assignment_id,
                student_id,
                new_grade,
                comment,
                graded_by=context.user.id,
            )

        except GradebookError as e:
            logger.error(f"An error occurred saving the grade. {type(e).__name__}: {e}")
            return GradeSaveResult.ERROR

        except Exception:
            logger.exception("Unexpected error saving the grade.")
            return GradeSaveResult.ERROR

        return result

    # === helper methods ===

    def _notify(self, context: GradebookContext, student_id: str, assignment_id: str) -> None:
        try:
            self._notifications.push(
                context.gradebook_id, context.editor_id, student_id, assignment_id
            )

        except Exception as e:
            logger.warning(f"Could not push editing notification: {e}")
