# core/edit_notifications.py

"""
Editing notifications: short-lived records telling instructors that someone else is editing
a grade cell in the same gradebook.

The cache holds one `NotificationTable` per gradebook id:

    gradebook_id -> editor_id -> cell key -> EditCell

Pushes replace the whole table through the cache's atomic `update()`, building a new table
instead of mutating the cached one. Readers therefore always see a consistent snapshot, and
concurrent pushes from different editors to the same gradebook never lose each other's cells.

Entries are never deleted on poll. They disappear when the gradebook's table has been idle
for the cache's time-to-idle.
"""

from __future__ import annotations

import datetime
import logging

from core.ports import KeyedCache
from models.edit_cell import EditCell
from models.types import NotificationTable

logger = logging.getLogger(__name__)


class EditNotificationCache:

    def __init__(self, cache: KeyedCache[NotificationTable]):
        self._cache = cache

    def push(
        self,
        gradebook_id: str,
        editor_id: str,
        student_id: str,
        assignment_id: str,
        edited_at: datetime.datetime | None = None,
    ) -> EditCell:
        """
        Record that `editor_id` is editing the cell for (student_id, assignment_id).

        Repeated pushes for the same cell by the same editor replace the earlier entry.

        Returns:
            EditCell: The cell that was stored.
        """
        cell = EditCell(student_id, assignment_id, editor_id, edited_at)

        def merge(table: NotificationTable | None) -> NotificationTable:
            merged = dict(table) if table else {}
            cells = dict(merged.get(editor_id, {}))
            cells[cell.key] = cell
            merged[editor_id] = cells
            return merged

        self._cache.update(gradebook_id, merge)
        logger.debug(
            f"Editing notification pushed for gradebook {gradebook_id} by {editor_id}: {cell.key}"
        )

        return cell

    def poll(
        self,
        gradebook_id: str,
        requesting_editor_id: str,
        since: datetime.datetime | None = None,
    ) -> list[EditCell]:
        """
        Get the cells other editors have touched in a gradebook.

        Args:
            gradebook_id (str): The gradebook being viewed.
            requesting_editor_id (str): The caller's editor id; their own cells are left out.
            since (datetime.datetime | None): If provided, only cells edited at or after this time are returned.

        Returns:
            list[EditCell]: A flat list of cells, grouped by editor in the order editors first pushed.

        Notes:
            - The requester's cells are excluded from the returned view only, the cached table is untouched.
            - Without `since`, no freshness filtering happens; stale cells live until the table idles out.
        """
        table = self._cache.get(gradebook_id)

        if not table:
            return []

        cells: list[EditCell] = []

        for editor_id, editor_cells in table.items():
            if editor_id == requesting_editor_id:
                continue

            cells.extend(editor_cells.values())

        if since is not None:
            cells = [cell for cell in cells if cell.edited_at >= since]

        return cells

    def editors(self, gradebook_id: str) -> list[str]:
        """Editor ids with live notifications in the gradebook."""
        table = self._cache.get(gradebook_id)
        return list(table.keys()) if table else []
