# models/assignment.py

"""
The Assignment model represents a gradable item in a gradebook: a name, a maximum point value,
and an optional category label.

Assignments are owned by the grade source and are read-only to the matrix, save, and ordering logic.
"""

from __future__ import annotations

import datetime
import math
from typing import Any


class Assignment:

    def __init__(
        self,
        id: str,
        name: str,
        points_possible: float,
        category_name: str | None = None,
        is_external: bool = False,
        sort_order: int | None = None,
        due_date: datetime.datetime | None = None,
        released: bool = True,
    ):
        self._id = id
        self._name = name
        # validated through the setter
        self.points_possible = points_possible
        self._category_name = category_name
        self._is_external = is_external
        self._sort_order = sort_order
        self._due_date_dt = due_date
        self._is_released = released

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = name

    @property
    def points_possible(self) -> float:
        return self._points_possible

    @points_possible.setter
    def points_possible(self, points: float) -> None:
        self._points_possible = Assignment.validate_points_input(points)

    @property
    def category_name(self) -> str | None:
        return self._category_name

    @category_name.setter
    def category_name(self, category_name: str | None) -> None:
        self._category_name = category_name

    @property
    def is_categorized(self) -> bool:
        return self._category_name is not None

    @property
    def is_external(self) -> bool:
        return self._is_external

    @property
    def sort_order(self) -> int | None:
        return self._sort_order

    @sort_order.setter
    def sort_order(self, sort_order: int | None) -> None:
        self._sort_order = sort_order

    @property
    def due_date_dt(self) -> datetime.datetime | None:
        return self._due_date_dt

    @due_date_dt.setter
    def due_date_dt(self, due_date_dt: datetime.datetime | None) -> None:
        self._due_date_dt = due_date_dt

    @property
    def due_date_iso(self) -> str | None:
        return self._due_date_dt.isoformat() if self._due_date_dt else None

    @property
    def is_released(self) -> bool:
        return self._is_released

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "name": self._name,
            "points_possible": self._points_possible,
            "category_name": self._category_name,
            "external": self._is_external,
            "sort_order": self._sort_order,
            "due_date": self.due_date_iso,
            "released": self._is_released,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Assignment:
        due_date_str = data.get("due_date")
        due_date = (
            datetime.datetime.fromisoformat(due_date_str) if due_date_str else None
        )

        return cls(
            id=data["id"],
            name=data["name"],
            points_possible=data["points_possible"],
            category_name=data.get("category_name"),
            is_external=data.get("external", False),
            sort_order=data.get("sort_order"),
            due_date=due_date,
            released=data.get("released", True),
        )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"Assignment({self._id}, {self._name}, {self._points_possible}, {self._category_name}, {self._sort_order})"

    def __str__(self) -> str:
        return f"ASSIGNMENT: name: {self._name}, id: {self._id}"

    # === data validators ===

    @staticmethod
    def validate_points_input(points: Any) -> float:
        """
        Validates and normalizes input for an `Assignment` points_possible value.

        Accepts any input, and then:
            - Casts to float.
            - Ensures the number is finite.
            - Ensures it is non-negative.

        Args:
            points (Any): The input value to validate.

        Returns:
            The normalized points value (float).

        Raises:
            TypeError: If the input cannot be cast to float.
            ValueError: If the input is non-finite or less than zero.
        """
        try:
            points = float(points)

        except (TypeError, ValueError):
            raise TypeError("Invalid input. Points possible must be a number.") from None

        if not math.isfinite(points):
            raise ValueError("Invalid input. Points possible must be a finite number.")

        if points < 0:
            raise ValueError("Invalid input. Points possible cannot be less than zero.")

        return points
