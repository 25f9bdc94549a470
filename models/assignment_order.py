# models/assignment_order.py

"""
One persisted position of an assignment within its category.

A collection of `AssignmentOrderEntry` records is what gets encoded into the site's order blob.
Grouped by category, the entries form a `CategorizedOrder` (see `models.types`).
"""

from __future__ import annotations


class AssignmentOrderEntry:

    def __init__(self, assignment_id: str, category: str | None, position: int):
        self._assignment_id = assignment_id
        self._category = category
        self._position = position

    # === properties ===

    @property
    def assignment_id(self) -> str:
        return self._assignment_id

    @property
    def category(self) -> str | None:
        return self._category

    @property
    def position(self) -> int:
        return self._position

    def sort_key(self) -> tuple[bool, str, int]:
        """
        Key for the deterministic decode order of persisted entries.

        Entries with a category come before uncategorized entries. Categories are ordered
        lexicographically, and entries inside one category (or among the uncategorized) by position.
        """
        return (self._category is None, self._category or "", self._position)

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "assignment_id": self._assignment_id,
            "category": self._category,
            "position": self._position,
        }

    @classmethod
    def from_dict(cls, data: dict) -> AssignmentOrderEntry:
        return cls(
            assignment_id=str(data["assignment_id"]),
            category=data.get("category"),
            position=int(data["position"]),
        )

    # === dunder methods ===

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssignmentOrderEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"AssignmentOrderEntry({self._assignment_id}, {self._category}, {self._position})"
