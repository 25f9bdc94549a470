# models/edit_cell.py

"""
An edit-intent notification: a record that a given editor touched a given grade cell.

Cells are identified by the composite key `"<student_id>-<assignment_id>"`, so repeated edits of the
same cell by the same editor replace each other instead of accumulating.
"""

from __future__ import annotations

import datetime

from core.formatters import build_cell_key
from core.utils import now


class EditCell:

    def __init__(
        self,
        student_id: str,
        assignment_id: str,
        editor_id: str | None = None,
        edited_at: datetime.datetime | None = None,
    ):
        self._student_id = student_id
        self._assignment_id = assignment_id
        self._editor_id = editor_id
        self._edited_at = edited_at or now()

    # === properties ===

    @property
    def student_id(self) -> str:
        return self._student_id

    @property
    def assignment_id(self) -> str:
        return self._assignment_id

    @property
    def editor_id(self) -> str | None:
        return self._editor_id

    @property
    def edited_at(self) -> datetime.datetime:
        return self._edited_at

    @property
    def key(self) -> str:
        return build_cell_key(self._student_id, self._assignment_id)

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "student_id": self._student_id,
            "assignment_id": self._assignment_id,
            "editor_id": self._editor_id,
            "edited_at": self._edited_at.isoformat(),
        }

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"EditCell({self._student_id}, {self._assignment_id}, {self._editor_id}, {self._edited_at.isoformat()})"
