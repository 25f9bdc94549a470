# core/business_service.py

"""
The gradebook business service: the single entry point the presentation layer calls.

Wires the matrix builder, grade saver, assignment order store, and editing notifications to one
set of sources, and provides the smaller assignment, comment, and grade-log operations around them.

Every operation takes an explicit `GradebookContext`; use `resolve_context()` once per request to
build it from a site id.
"""

from __future__ import annotations

import datetime
import logging

from core.assignment_order_store import AssignmentOrderStore
from core.config import GradebookConfig
from core.edit_notifications import EditNotificationCache
from core.exceptions import GradebookError
from core.expiring_cache import IdleExpiringCache
from core.formatters import format_points
from core.grade_matrix import GradeMatrixBuilder
from core.grade_saver import GradeSaver
from core.ports import GradeSource, KeyedCache, OrderCodec, OrderResource, RosterSource
from core.response import ErrorCode, GradeSaveResult, Response
from models.assignment import Assignment
from models.context import GradebookContext
from models.edit_cell import EditCell
from models.grade_log import GradeLogEntry
from models.sort_order import GradeSortOrder
from models.types import NotificationTable
from models.user import User

logger = logging.getLogger(__name__)


class GradebookBusinessService:

    def __init__(
        self,
        roster: RosterSource,
        grades: GradeSource,
        order_resource: OrderResource,
        cache: KeyedCache[NotificationTable] | None = None,
        config: GradebookConfig | None = None,
        codec: OrderCodec | None = None,
    ):
        self._config = config or GradebookConfig()
        self._roster = roster
        self._grades = grades

        if cache is None:
            cache = IdleExpiringCache(
                time_to_idle=self._config.notification_time_to_idle,
                max_entries=self._config.notification_max_entries,
            )

        self._notifications = EditNotificationCache(cache)
        self._matrix_builder = GradeMatrixBuilder(roster, grades)
        self._grade_saver = GradeSaver(grades, self._notifications)
        self._order_store = AssignmentOrderStore(grades, order_resource, codec)

    # === properties ===

    @property
    def config(self) -> GradebookConfig:
        return self._config

    @property
    def notifications(self) -> EditNotificationCache:
        return self._notifications

    # === context ===

    def resolve_context(self, site_id: str) -> GradebookContext:
        """
        Resolves the gradebook hosted by a site and the acting user.

        The returned context has no gradebook id if the site has none; operations then report `NO_GRADEBOOK`.
        """
        try:
            gradebook_id = self._grades.gradebook_uid(site_id)

        except GradebookError:
            gradebook_id = None

        if gradebook_id is None:
            logger.error(f"No gradebook in site: {site_id}")

        return GradebookContext(site_id, gradebook_id, self._roster.current_user())

    # === data accessors ===

    def get_gradebook_assignments(
        self, context: GradebookContext
    ) -> list[Assignment] | None:
        """Assignments in sort order, or None if the site has no gradebook."""
        if context.gradebook_id is None:
            return None

        try:
            return self._grades.assignments(context.gradebook_id)

        except GradebookError as e:
            logger.error(f"Could not list assignments: {e}")
            return None

    def get_assignment(
        self, context: GradebookContext, assignment_id: str
    ) -> Assignment | None:
        if context.gradebook_id is None:
            return None

        try:
            return self._grades.assignment(context.gradebook_id, assignment_id)

        except GradebookError as e:
            logger.error(f"Could not look up assignment {assignment_id}: {e}")
            return None

    def get_site_course_grades(self, context: GradebookContext) -> dict[str, str]:
        """
        Course grades for every student in the site, keyed by student eid.

        Returns an empty mapping if the site has no gradebook.
        """
        if context.gradebook_id is None:
            return {}

        try:
            return self._grades.course_grades(context.gradebook_id)

        except GradebookError as e:
            logger.error(f"Could not fetch course grades: {e}")
            return {}

    def get_user(self, user_id: str) -> User | None:
        return self._roster.user(user_id)

    def build_grade_matrix(
        self,
        context: GradebookContext,
        assignments: list[Assignment],
        student_ids: list[str] | None = None,
        sort_order: GradeSortOrder | None = None,
    ) -> Response:
        """See `GradeMatrixBuilder.build()`."""
        return self._matrix_builder.build(context, assignments, student_ids, sort_order)

    def get_editing_notifications(
        self, context: GradebookContext, since: datetime.datetime | None = None
    ) -> list[EditCell]:
        """Cells other instructors are editing in this gradebook. Excludes the acting user's own edits."""
        if context.gradebook_id is None:
            return []

        return self._notifications.poll(context.gradebook_id, context.editor_id, since)

    def get_grade_log(
        self, context: GradebookContext, student_id: str, assignment_id: str
    ) -> list[GradeLogEntry]:
        """Grading events for one cell, newest first."""
        if context.gradebook_id is None:
            return []

        try:
            events = self._grades.grading_events(
                context.gradebook_id, student_id, assignment_id
            )

        except GradebookError as e:
            logger.error(f"Could not fetch grade log: {e}")
            return []

        return list(reversed(events))

    def get_assignment_grade_comment(
        self, context: GradebookContext, assignment_id: str, student_id: str
    ) -> str | None:
        if context.gradebook_id is None:
            return None

        try:
            return self._grades.grade_comment(
                context.gradebook_id, assignment_id, student_id
            )

        except GradebookError as e:
            logger.error(
                f"An error occurred retrieving the comment. {type(e).__name__}: {e}"
            )
            return None

    # --- assignment order ---

    def get_categorized_assignments_order(self, context: GradebookContext) -> Response:
        return self._order_store.get_categorized_order(context)

    def get_categorized_sort_order(
        self, context: GradebookContext, assignment_id: str
    ) -> int:
        return self._order_store.get_categorized_sort_order(context, assignment_id)

    def get_assignment_sort_order(
        self, context: GradebookContext, assignment_id: str
    ) -> int:
        return self._order_store.get_assignment_sort_order(context, assignment_id)

    # === data manipulators ===

    def save_grade(
        self,
        context: GradebookContext,
        assignment_id: str,
        student_id: str,
        new_grade: str | None,
        comment: str | None,
        old_grade: str | None = None,
    ) -> GradeSaveResult:
        """See `GradeSaver.save_grade()`. Omitting `old_grade` skips the concurrency check."""
        return self._grade_saver.save_grade(
            context, assignment_id, student_id, new_grade, comment, old_grade
        )

    def update_categorized_assignment_order(
        self, context: GradebookContext, assignment_id: str, order: int
    ) -> Response:
        return self._order_store.update_order(context, assignment_id, order)

    def update_assignment_order(
        self, context: GradebookContext, assignment_id: str, order: int
    ) -> Response:
        """
        Moves an assignment within the flat (uncategorized view) order kept by the grade source.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the grade source accepted the new order.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NO_GRADEBOOK` if the site has no gradebook.
                    - `ErrorCode.NOT_FOUND` if the assignment is not in the gradebook.
                - data (dict | None): Always None.
        """
        if context.gradebook_id is None:
            return Response.no_gradebook(context.site_id)

        try:
            self._grades.update_assignment_order(
                context.gradebook_id, assignment_id, order
            )

        except GradebookError as e:
            return Response.fail(
                detail=f"Could not reorder assignment: {e}",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        return Response.succeed(detail=f"Assignment order updated to: {order}.")

    def add_assignment(
        self, context: GradebookContext, assignment: Assignment
    ) -> Response:
        """
        Adds a new assignment definition to the gradebook.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the assignment was added.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NO_GRADEBOOK` if the site has no gradebook.
                    - `ErrorCode.VALIDATION_FAILED` if the grade source rejects the assignment.
                    - `ErrorCode.INTERNAL_ERROR` for unexpected errors.
                - data (dict | None): On success, "record" (Assignment): the added assignment.
        """
        if context.gradebook_id is None:
            return Response.no_gradebook(context.site_id)

        try:
            self._grades.add_assignment(context.gradebook_id, assignment)

        except (GradebookError, ValueError) as e:
            return Response.fail(
                detail=f"Failed to add assignment: {e}",
                error=ErrorCode.VALIDATION_FAILED,
            )

        except Exception as e:
            return Response.unexpected(e)

        return Response.succeed(
            detail=f"{assignment.name} successfully added to the gradebook.",
            data={
                "record": assignment,
            },
        )

    def update_assignment(
        self, context: GradebookContext, assignment: Assignment
    ) -> Response:
        """
        Updates the details of an existing assignment.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the assignment was updated.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NO_GRADEBOOK` if the site has no gradebook.
                    - `ErrorCode.NOT_FOUND` if the assignment does not exist.
                    - `ErrorCode.INTERNAL_ERROR` for unexpected errors.
                - data (dict | None): On success, "record" (Assignment): the updated assignment.
        """
        if context.gradebook_id is None:
            return Response.no_gradebook(context.site_id)

        try:
            self._grades.update_assignment(context.gradebook_id, assignment)

        except GradebookError as e:
            return Response.fail(
                detail=f"Failed to update assignment: {e}",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        except Exception as e:
            logger.error("An error occurred updating the assignment", exc_info=True)
            return Response.unexpected(e)

        return Response.succeed(
            detail=f"{assignment.name} successfully updated.",
            data={
                "record": assignment,
            },
        )

    def update_ungraded_items(
        self, context: GradebookContext, assignment_id: str, grade: float
    ) -> Response:
        """
        Gives every rostered student without a grade for the assignment the given grade.

        Students whose stored grade is blank count as ungraded and are updated too.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if every ungraded student was updated (including when there were none).
                    - False if there is no gradebook or a save fails part way through.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NO_GRADEBOOK` if the site has no gradebook.
                    - `ErrorCode.INTERNAL_ERROR` if a save fails.
                - data (dict | None): Payload with the following keys:
                    - "updated" (list[str]): Student ids that received the grade.

        Notes:
            - This method is not transactional; students updated before a failure keep the new grade.
            - Existing comments are cleared, matching the grade source's commit semantics.
        """
        if context.gradebook_id is None:
            return Response.no_gradebook(context.site_id)

        student_ids = self._roster.gradeable_user_ids(context.site_id)

        if student_ids is None:
            return Response.no_gradebook(context.site_id)

        grade_str = format_points(grade)
        updated: list[str] = []

        try:
            records = self._grades.grades_for_students(
                context.gradebook_id, assignment_id, student_ids
            )
            graded = {record.student_id for record in records if record.has_grade}
            ungraded = [sid for sid in student_ids if sid not in graded]

            if not ungraded:
                logger.debug("Setting default grade. No students are ungraded.")

            for student_id in ungraded:
                logger.debug(
                    f"Setting default grade. Values of assignmentId: {assignment_id}, studentUuid: {student_id}, grade: {grade_str}"
                )
                self._grades.commit_grade(
                    context.gradebook_id,
                    assignment_id,
                    student_id,
                    grade_str,
                    None,
                    graded_by=context.user.id,
                )
                updated.append(student_id)

        except Exception as e:
            logger.error("An error occurred updating ungraded items", exc_info=True)
            return Response.fail(
                detail=f"Failed to update ungraded items: {e}",
                error=ErrorCode.INTERNAL_ERROR,
                data={
                    "updated": updated,
                },
            )

        return Response.succeed(
            detail=f"Default grade applied to {len(updated)} students.",
            data={
                "updated": updated,
            },
        )

    def update_assignment_grade_comment(
        self,
        context: GradebookContext,
        assignment_id: str,
        student_id: str,
        comment: str | None,
    ) -> bool:
        if context.gradebook_id is None:
            return False

        try:
            self._grades.set_grade_comment(
                context.gradebook_id, assignment_id, student_id, comment
            )

        except (GradebookError, ValueError) as e:
            logger.error(
                f"An error occurred saving the comment. {type(e).__name__}: {e}"
            )
            return False

        return True
