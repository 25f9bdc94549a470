# models/context.py

"""
The resolved request context passed explicitly into every service call.

The presentation layer resolves the site, the gradebook hosted by that site (if any), and the
acting user once per request; services never look these up on their own.
"""

from __future__ import annotations

from models.user import User


class GradebookContext:

    def __init__(self, site_id: str, gradebook_id: str | None, user: User):
        self._site_id = site_id
        self._gradebook_id = gradebook_id
        self._user = user

    @property
    def site_id(self) -> str:
        return self._site_id

    @property
    def gradebook_id(self) -> str | None:
        return self._gradebook_id

    @property
    def has_gradebook(self) -> bool:
        return self._gradebook_id is not None

    @property
    def user(self) -> User:
        return self._user

    @property
    def editor_id(self) -> str:
        # editing notifications are keyed on the stable enterprise id, not a session id
        return self._user.eid

    def __repr__(self) -> str:
        return f"GradebookContext({self._site_id}, {self._gradebook_id}, {self._user.eid})"
