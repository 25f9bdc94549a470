# models/user.py

"""
Represents a user as returned by the roster source: a student who can hold grades, or the
instructor who is editing them.

Stores the stable internal ID alongside the human-readable identifiers:
- `id`: the stable uuid used to key grade records and matrix rows
- `eid`: the enterprise ID, used to key course grades and editing notifications
- `display_id`: the identifier shown in the UI (falls back to `eid`)

Includes functionality for:
- Validating and normalizing optional email input
- Display and sort name formatting
- Serializing to and from JSON-compatible dictionaries
"""

from __future__ import annotations

import re


class User:

    def __init__(
        self,
        id: str,
        eid: str,
        first_name: str,
        last_name: str,
        email: str | None = None,
        display_id: str | None = None,
    ):
        self._id: str = id
        self._eid: str = eid
        self._first_name: str = first_name
        self._last_name: str = last_name
        # validated and normalized through the setter
        self.email = email
        self._display_id: str | None = display_id

    # === properties ===

    @property
    def id(self) -> str:
        return self._id

    @property
    def eid(self) -> str:
        return self._eid

    @property
    def display_id(self) -> str:
        return self._display_id or self._eid

    @property
    def first_name(self) -> str:
        return self._first_name

    @first_name.setter
    def first_name(self, first_name: str) -> None:
        self._first_name = first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    @last_name.setter
    def last_name(self, last_name: str) -> None:
        self._last_name = last_name

    @property
    def display_name(self) -> str:
        return f"{self._first_name} {self._last_name}"

    @property
    def sort_name(self) -> str:
        return f"{self._last_name}, {self._first_name}"

    @property
    def email(self) -> str | None:
        return self._email

    @email.setter
    def email(self, email: str | None) -> None:
        self._email = User.validate_email_input(email) if email else None

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "eid": self._eid,
            "first_name": self._first_name,
            "last_name": self._last_name,
            "email": self._email,
            "display_id": self._display_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> User:
        return cls(
            id=data["id"],
            eid=data["eid"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data.get("email"),
            display_id=data.get("display_id"),
        )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"User({self._id}, {self._eid}, {self._first_name}, {self._last_name})"

    def __str__(self) -> str:
        return f"USER: name: {self.display_name}, id: {self.display_id}"

    # === data validators ===

    @staticmethod
    def validate_email_input(email: str) -> str:
        """
        Validates and normalizes a User email address.

        Normalizes the input by stripping whitespace and converting to lowercase.
        Ensures the email:
            - Contains exactly one '@' symbol
            - Has non-whitespace characters on both sides of the '@'
            - Contains at least one '.' after the '@' to separate the domain and TLD

        Args:
            email: The input email string to validate.

        Returns:
            A normalized, lowercase version of the email if valid.

        Raises:
            ValueError: If the email does not conform to the expected format.
        """
        email = email.strip().lower()
        if not re.fullmatch(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
            raise ValueError(
                "Invalid input. Email must be a valid address with one @ and a domain."
            )
        return email
