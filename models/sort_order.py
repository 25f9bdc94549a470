# models/sort_order.py

"""
Sort request for the grade matrix: which assignment column to sort on, and in which direction.
"""

from __future__ import annotations

from enum import Enum


class SortDirection(str, Enum):
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"


class GradeSortOrder:

    def __init__(
        self,
        assignment_id: str,
        direction: SortDirection = SortDirection.ASCENDING,
    ):
        self._assignment_id = assignment_id
        self._direction = direction

    @property
    def assignment_id(self) -> str:
        return self._assignment_id

    @property
    def direction(self) -> SortDirection:
        return self._direction

    @property
    def is_descending(self) -> bool:
        return self._direction is SortDirection.DESCENDING

    def __repr__(self) -> str:
        return f"GradeSortOrder({self._assignment_id}, {self._direction.value})"
