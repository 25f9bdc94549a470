# core/assignment_order_store.py

"""
Per-category assignment order, persisted as an encoded list of `AssignmentOrderEntry` records on the site.

The store owns the ordering semantics; the blob itself is opaque and goes through an `OrderCodec`
(`JsonOrderCodec` by default) to the site's `OrderResource`.

Every read-modify-write of a site's order happens under a lock for that site, so concurrent
reorders on one site are applied one after the other instead of overwriting each other.

If a site has no stored order yet, one is derived from the gradebook's assignments (grouped by
category, in the grade source's order) and stored before it is returned.
"""

from __future__ import annotations

import json
import logging
import weakref
from threading import Lock

from core.exceptions import GradebookError
from core.ports import GradeSource, OrderCodec, OrderResource
from core.response import ErrorCode, Response
from models.assignment import Assignment
from models.assignment_order import AssignmentOrderEntry
from models.context import GradebookContext
from models.types import CategorizedOrder

logger = logging.getLogger(__name__)


class JsonOrderCodec:
    """Encodes order entries as a UTF-8 JSON list."""

    def encode(self, entries: list[AssignmentOrderEntry]) -> bytes:
        return json.dumps(
            [entry.to_dict() for entry in entries], sort_keys=True
        ).encode("utf-8")

    def decode(self, blob: bytes) -> list[AssignmentOrderEntry]:
        try:
            data = json.loads(blob)

        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValueError(f"Failed to parse assignment order: {e}") from e

        if not isinstance(data, list):
            raise ValueError("Expected assignment order to contain a list.")

        try:
            return [AssignmentOrderEntry.from_dict(item) for item in data]

        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed assignment order entry: {e}") from e


class AssignmentOrderStore:

    def __init__(
        self,
        grades: GradeSource,
        resource: OrderResource,
        codec: OrderCodec | None = None,
    ):
        self._grades = grades
        self._resource = resource
        self._codec = codec or JsonOrderCodec()
        # a site's lock lives only while some caller holds it
        self._site_locks: weakref.WeakValueDictionary[str, Lock] = (
            weakref.WeakValueDictionary()
        )
        self._site_locks_guard = Lock()

    # === data accessors ===

    def get_categorized_order(self, context: GradebookContext) -> Response:
        """
        Gets the ordered assignment ids for each category in the site.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the order was loaded, or initialized and stored.
                    - False if there is no gradebook or the stored order cannot be decoded.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, None.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NO_GRADEBOOK` if the site has no gradebook.
                    - `ErrorCode.INVALID_INPUT` if the stored order cannot be decoded.
                    - `ErrorCode.INTERNAL_ERROR` for unexpected errors.
                - status_code (int | None):
                    - 200 on success
                    - 404 if there is no gradebook
                    - 400 on other failures
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "order" (CategorizedOrder): Category label (None for uncategorized) to assignment ids.
                    - On failure:
                        - None
        """
        if not context.has_gradebook:
            return Response.no_gradebook(context.site_id)

        try:
            with self._lock_for(context.site_id):
                order = self._load_or_initialize(context)

        except ValueError as e:
            return Response.fail(
                detail=f"Failed to decode assignment order: {e}",
                error=ErrorCode.INVALID_INPUT,
            )

        except Exception as e:
            return Response.unexpected(e)

        return Response.succeed(
            data={
                "order": order,
            }
        )

    def get_categorized_sort_order(
        self, context: GradebookContext, assignment_id: str
    ) -> int:
        """
        Gets the position of an assignment within its category.

        Returns:
            The 0-based position, or -1 if the assignment or its position cannot be determined.
        """
        assignment = self._find_assignment(context, assignment_id)

        if assignment is None:
            return -1

        response = self.get_categorized_order(context)

        if not response.success:
            return -1

        ordered_ids = response.data["order"].get(assignment.category_name, [])

        return ordered_ids.index(assignment_id) if assignment_id in ordered_ids else -1

    def get_assignment_sort_order(
        self, context: GradebookContext, assignment_id: str
    ) -> int:
        """
        Gets the sort order of an assignment across the whole gradebook.

        Prefers the assignment's own `sort_order`. Otherwise falls back to the assignment's position in
        the grade source's assignment list, so an order is available even if the list was never sorted.

        Returns:
            The sort order, or -1 if it cannot be determined at all.
        """
        assignment = self._find_assignment(context, assignment_id)

        if assignment is None:
            return -1

        if assignment.sort_order is not None:
            return assignment.sort_order

        try:
            assignments = self._grades.assignments(context.gradebook_id)

        except GradebookError:
            return -1

        for index, candidate in enumerate(assignments):
            if candidate.id == assignment_id:
                return index

        return -1

    # === data manipulators ===

    def update_order(
        self, context: GradebookContext, assignment_id: str, position: int
    ) -> Response:
        """
        Moves an assignment to a new position within its category.

        Args:
            context (GradebookContext): The resolved site, gradebook, and acting user.
            assignment_id (str): The assignment being moved.
            position (int): The new 0-based position. Clamped to the bounds of the category list.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the new order was stored.
                    - False if there is no gradebook, the assignment is unknown, or the stored order cannot be decoded.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, a simple confirmation message.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NO_GRADEBOOK` if the site has no gradebook.
                    - `ErrorCode.NOT_FOUND` if the assignment is not in the gradebook.
                    - `ErrorCode.INVALID_INPUT` if the stored order cannot be decoded.
                    - `ErrorCode.INTERNAL_ERROR` for unexpected errors.
                - status_code (int | None):
                    - 200 on success
                    - 404 if there is no gradebook or assignment
                    - 400 on other failures
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "order" (CategorizedOrder): The full order after the move.
                    - On failure:
                        - None

        Notes:
            - The category comes from the stored `Assignment`, not from the caller.
            - The assignment is removed from every category list it appears in, so an assignment whose category changed moves out of its old list.
            - The whole order is written back in one store.
        """
        if not context.has_gradebook:
            return Response.no_gradebook(context.site_id)

        assignment = self._find_assignment(context, assignment_id)

        if assignment is None:
            return Response.fail(
                detail=f"Assignment {assignment_id} not in site {context.site_id}",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        category = assignment.category_name

        try:
            with self._lock_for(context.site_id):
                order = self._load_or_initialize(context)

                for ordered_ids in order.values():
                    if assignment_id in ordered_ids:
                        ordered_ids.remove(assignment_id)

                target = order.setdefault(category, [])
                target.insert(max(0, min(position, len(target))), assignment_id)

                order = {key: ids for key, ids in order.items() if ids}

                self._store(context.site_id, order)

        except ValueError as e:
            return Response.fail(
                detail=f"Failed to decode assignment order: {e}",
                error=ErrorCode.INVALID_INPUT,
            )

        except Exception as e:
            return Response.unexpected(e)

        return Response.succeed(
            detail=f"Assignment {assignment.name} moved to position {target.index(assignment_id)}.",
            data={
                "order": order,
            },
        )

    # === helper methods ===

    def _lock_for(self, site_id: str) -> Lock:
        with self._site_locks_guard:
            lock = self._site_locks.get(site_id)

            if lock is None:
                lock = Lock()
                self._site_locks[site_id] = lock

            return lock

    def _find_assignment(
        self, context: GradebookContext, assignment_id: str
    ) -> Assignment | None:
        if context.gradebook_id is None:
            return None

        try:
            assignment = self._grades.assignment(context.gradebook_id, assignment_id)

        except GradebookError as e:
            logger.error(f"Could not look up assignment {assignment_id}: {e}")
            return None

        if assignment is None:
            logger.error(f"Assignment {assignment_id} not in site {context.site_id}")

        return assignment

    def _load_or_initialize(self, context: GradebookContext) -> CategorizedOrder:
        """Callers must hold the site lock."""
        blob = self._resource.get_order_blob(context.site_id)

        if blob and blob.strip():
            return group_entries(self._codec.decode(blob))

        order: CategorizedOrder = {}

        for assignment in self._grades.assignments(context.gradebook_id):
            order.setdefault(assignment.category_name, []).append(assignment.id)

        self._store(context.site_id, order)

        return order

    def _store(self, site_id: str, order: CategorizedOrder) -> None:
        blob = self._codec.encode(flatten_order(order))
        self._resource.set_order_blob(site_id, blob)
        logger.debug(f"Updated assignment order for site {site_id}: {blob!r}")


def group_entries(entries: list[AssignmentOrderEntry]) -> CategorizedOrder:
    """
    Groups decoded entries into per-category lists, each ordered by stored position.

    Positions are only used for ordering, so the resulting lists are dense even if the stored positions had gaps.
    """
    order: CategorizedOrder = {}

    for entry in sorted(entries, key=AssignmentOrderEntry.sort_key):
        ordered_ids = order.setdefault(entry.category, [])

        if entry.assignment_id not in ordered_ids:
            ordered_ids.append(entry.assignment_id)

    return order


def flatten_order(order: CategorizedOrder) -> list[AssignmentOrderEntry]:
    return [
        AssignmentOrderEntry(assignment_id, category, position)
        for category, ordered_ids in order.items()
        for position, assignment_id in enumerate(ordered_ids)
    ]
