# models/gradebook.py

"""
The Gradebook model is an in-process gradebook container for one site: its users and roster, assignments,
grade records, course grades, grading history, and site properties.

It implements the roster, grade, and order-resource ports from `core.ports`, so it can back
`GradebookBusinessService` directly for single-site deployments, demos, and tests.

Records are stored in dictionaries and written to .json files upon saving, along with `Gradebook.metadata`,
which stores the site and gradebook identifiers.

Provides functions for creating a Gradebook, loading it from disk, and saving it and all linked data to disk.
"""

from __future__ import annotations

import json
import math
import os
from typing import Any, Callable

from core.exceptions import (
    AssignmentNotFoundError,
    FetchError,
    GradebookNotFoundError,
    InvalidGradeError,
)
from core.response import ErrorCode, Response
from core.utils import generate_uuid, now
from models.assignment import Assignment
from models.grade_log import GradeLogEntry
from models.grade_record import GradeRecord
from models.user import User

ASSIGNMENT_ORDER_PROPERTY = "gbng_assignment_order"


class Gradebook:

    def __init__(self, site_id: str, uid: str, save_dir_path: str | None = None):
        self._metadata: dict[str, Any] = {
            "site_id": site_id,
            "uid": uid,
        }
        self._users: dict[str, User] = {}
        self._roster: list[str] = []
        self._assignments: dict[str, Assignment] = {}
        self._grades: dict[tuple[str, str], GradeRecord] = {}
        self._course_grades: dict[str, str] = {}
        self._grading_events: list[GradeLogEntry] = []
        self._site_properties: dict[str, str] = {}
        self._current_user_id: str | None = None
        self._dir_path = save_dir_path

    # === properties ===

    @property
    def site_id(self) -> str:
        return self._metadata["site_id"]

    @property
    def uid(self) -> str:
        return self._metadata["uid"]

    @property
    def title(self) -> str:
        return self._metadata.get("title", "")

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata.copy()

    @property
    def users(self) -> dict[str, User]:
        return self._users

    @property
    def roster(self) -> list[str]:
        return list(self._roster)

    @property
    def dir_path(self) -> str | None:
        return self._dir_path

    # === public classmethods ===

    @classmethod
    def create(
        cls,
        site_id: str,
        title: str,
        save_dir_path: str | None = None,
        uid: str | None = None,
    ) -> Response:
        """
        Creates and returns a new `Gradebook` instance, saving it if a directory is given.

        Args:
            site_id (str): The site hosting the gradebook.
            title (str): The gradebook title.
            save_dir_path (str | None): The path for writing and reading serialized data.
            uid (str | None): The gradebook uid. A new uuid is generated if omitted.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the `Gradebook` object was created successfully.
                    - False if the initial save fails.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, None.
                - error (ErrorCode | str | None):
                    - The error of the failed `save()` call.
                - status_code (int | None):
                    - 200 on success
                    - 400 on failure
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "gradebook" (Gradebook): The newly created `Gradebook` object.
                    - On failure:
                        - None
        """
        gradebook = cls(site_id, uid or generate_uuid(), save_dir_path)
        gradebook._metadata.update(
            {
                "title": title,
                "created_at": now().isoformat(),
            }
        )

        if save_dir_path is not None:
            save_response = gradebook.save(save_dir_path)

            if not save_response.success:
                return save_response

        return Response.succeed(
            data={
                "gradebook": gradebook,
            },
        )

    @classmethod
    def load(cls, save_dir_path: str) -> Response:
        """
        Loads previously serialized data from disk and returns a `Gradebook` instance.

        Args:
            save_dir_path (str): The directory path where the gradebook data is stored.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the load operation was successful and a new `Gradebook` object was created.
                    - False for JSON deserialization issues, invalid input, or missing fields.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, None.
                - error (ErrorCode | str | None):
                    - `ErrorCode.INVALID_INPUT` if JSONDecodeError raised.
                    - `ErrorCode.INVALID_FIELD_VALUE` if ValueError raised.
                    - `ErrorCode.MISSING_REQUIRED_FIELD` if KeyError or TypeError raised.
                    - `ErrorCode.NOT_FOUND` if a required file is missing.
                    - `ErrorCode.INTERNAL_ERROR` for unexpected errors.
                - status_code (int | None):
                    - 200 on success
                    - 400 on failure
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "gradebook" (Gradebook): The loaded `Gradebook` object.
                    - On failure:
                        - None

        Notes:
            - `course_grades.json`, `grading_events.json`, and `site_properties.json` are optional.
        """

        def read_json(filename: str, default: Any = None) -> Any:
            path = os.path.join(save_dir_path, filename)
            if default is not None and not os.path.exists(path):
                return default
            with open(path, "r") as f:
                return json.load(f)

        def load_list(filename: str, import_fn: Callable[[dict], None]) -> None:
            data = read_json(filename, default=[])
            if not isinstance(data, list):
                raise ValueError(f"Expected {filename} to contain a list.")
            for item in data:
                import_fn(item)

        try:
            metadata = read_json("metadata.json")
            if not isinstance(metadata, dict):
                raise ValueError("metadata.json must contain a dictionary.")

            gradebook = cls(metadata["site_id"], metadata["uid"], save_dir_path)
            gradebook._metadata = metadata

            load_list("users.json", gradebook._import_user)
            load_list("assignments.json", gradebook._import_assignment)
            load_list("grades.json", gradebook._import_grade)
            load_list("grading_events.json", gradebook._import_grading_event)

            roster = read_json("roster.json", default=[])
            gradebook._roster = [uid for uid in roster if uid in gradebook._users]

            gradebook._course_grades = dict(read_json("course_grades.json", default={}))
            gradebook._site_properties = dict(
                read_json("site_properties.json", default={})
            )

        except json.JSONDecodeError as e:
            return Response.fail(
                detail=f"Failed to parse JSON data: {e}",
                error=ErrorCode.INVALID_INPUT,
            )

        except FileNotFoundError as e:
            return Response.fail(
                detail=f"Missing gradebook file: {e}",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        except ValueError as e:
            return Response.fail(
                detail=f"Invalid field value: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        except (KeyError, TypeError) as e:
            return Response.fail(
                detail=f"Missing required field: {e}",
                error=ErrorCode.MISSING_REQUIRED_FIELD,
            )

        except Exception as e:
            return Response.unexpected(e)

        else:
            return Response.succeed(
                data={
                    "gradebook": gradebook,
                },
            )

    # === persistence and import ===

    def save(self, save_dir_path: str | None = None) -> Response:
        """
        Serializes and saves data to disk in JSON format.

        Args:
            save_dir_path (str | None):
                - The directory path where the gradebook data will be saved.
                - If no argument is provided, `self.dir_path` will be used by default.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the gradebook data was saved successfully to disk.
                    - False for serialization issues, a missing directory, or write failures.
                - detail (str | None):
                    - On success:
                        - "Gradebook successfully saved to disk."
                    - On failure:
                        - Description of the error if the save failed.
                - error (ErrorCode | str | None):
                    - `ErrorCode.MISSING_REQUIRED_FIELD` if no directory is known.
                    - `ErrorCode.INVALID_FIELD_VALUE` if a value is not JSON serializable.
                    - `ErrorCode.INTERNAL_ERROR` if OSError raised or for unexpected errors.
                - status_code (int | None):
                    - 200 on success
                    - 400 on failure
                - data (dict | None):
                    - Always None, this method does not return any payload.

        Notes:
            - The caller is responsible for ensuring that `save_dir_path` exists.
            - Existing files are overwritten.
        """
        save_dir_path = save_dir_path or self._dir_path

        if save_dir_path is None:
            return Response.fail(
                detail="No save directory provided.",
                error=ErrorCode.MISSING_REQUIRED_FIELD,
            )

        def write_json(filename: str, data: list | dict) -> None:
            with open(os.path.join(save_dir_path, filename), "w") as f:
                json.dump(data, f, indent=2, sort_keys=True)

        try:
            write_json("metadata.json", self._metadata)
            write_json("users.json", [u.to_dict() for u in self._users.values()])
            write_json("roster.json", self._roster)
            write_json(
                "assignments.json", [a.to_dict() for a in self._assignments.values()]
            )
            write_json("grades.json", [g.to_dict() for g in self._grades.values()])
            write_json("course_grades.json", self._course_grades)
            write_json(
                "grading_events.json", [e.to_dict() for e in self._grading_events]
            )
            write_json("site_properties.json", self._site_properties)

        except TypeError as e:
            return Response.fail(
                detail=f"Object not JSON serializable: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        except OSError as e:
            return Response.fail(
                detail=f"Failed to write data to disk: {e}",
                error=ErrorCode.INTERNAL_ERROR,
            )

        except Exception as e:
            return Response.unexpected(e)

        else:
            self._dir_path = save_dir_path

            return Response.succeed(detail="Gradebook successfully saved to disk.")

    def _import_user(self, data: dict) -> None:
        user = User.from_dict(data)
        self._users[user.id] = user

    def _import_assignment(self, data: dict) -> None:
        assignment = Assignment.from_dict(data)
        self._assignments[assignment.id] = assignment

    def _import_grade(self, data: dict) -> None:
        record = GradeRecord.from_dict(data)
        self._grades[(record.assignment_id, record.student_id)] = record

    def _import_grading_event(self, data: dict) -> None:
        self._grading_events.append(GradeLogEntry.from_dict(data))

    # === data manipulators ===

    def add_user(self, user: User, gradeable: bool = True) -> Response:
        """
        Adds a `User` to the gradebook, and to the roster of gradeable users if `gradeable` is True.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the user was added, False if the id is already in use.
                - error (ErrorCode | str | None): `ErrorCode.VALIDATION_FAILED` if the id is already in use.
                - data (dict | None): On success, "record" (User): the added user.
        """
        if user.id in self._users:
            return Response.fail(
                detail=f"A user with the id '{user.id}' already exists.",
                error=ErrorCode.VALIDATION_FAILED,
            )

        self._users[user.id] = user

        if gradeable:
            self._roster.append(user.id)

        return Response.succeed(
            detail=f"{user.display_name} successfully added to the gradebook.",
            data={
                "record": user,
            },
        )

    def remove_from_roster(self, user_id: str) -> None:
        """Removes a user from the gradeable roster. Their grade records are kept."""
        if user_id in self._roster:
            self._roster.remove(user_id)

    def sign_in(self, user_id: str) -> None:
        if user_id not in self._users:
            raise KeyError(f"Unknown user: {user_id}")
        self._current_user_id = user_id

    def set_course_grade(self, student_eid: str, course_grade: str | None) -> None:
        if course_grade is None:
            self._course_grades.pop(student_eid, None)
        else:
            self._course_grades[student_eid] = course_grade

    # === roster source ===

    def gradeable_user_ids(self, site_id: str) -> list[str] | None:
        if site_id != self.site_id:
            return None
        return list(self._roster)

    def resolve_users(self, user_ids: list[str]) -> list[User]:
        users = [self._users[uid] for uid in user_ids if uid in self._users]
        return sorted(users, key=lambda user: user.last_name)

    def user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def current_user(self) -> User:
        if self._current_user_id is None:
            raise FetchError("No user is signed in.")
        return self._users[self._current_user_id]

    # === grade source ===

    def gradebook_uid(self, site_id: str) -> str | None:
        return self.uid if site_id == self.site_id else None

    def assignments(self, gradebook_id: str) -> list[Assignment]:
        self._require_gradebook(gradebook_id)
        # unordered assignments keep insertion order after the ordered ones
        return sorted(
            self._assignments.values(),
            key=lambda a: (a.sort_order is None, a.sort_order or 0),
        )

    def assignment(self, gradebook_id: str, assignment_id: str) -> Assignment | None:
        self._require_gradebook(gradebook_id)
        return self._assignments.get(assignment_id)

    def grades_for_students(
        self, gradebook_id: str, assignment_id: str, student_ids: list[str]
    ) -> list[GradeRecord]:
        self._require_assignment(gradebook_id, assignment_id)
        return [
            self._grades[(assignment_id, student_id)]
            for student_id in student_ids
            if (assignment_id, student_id) in self._grades
        ]

    def current_grade(
        self, gradebook_id: str, assignment_id: str, student_id: str
    ) -> str | None:
        self._require_assignment(gradebook_id, assignment_id)
        record = self._grades.get((assignment_id, student_id))
        return record.grade if record else None

    def commit_grade(
        self,
        gradebook_id: str,
        assignment_id: str,
        student_id: str,
        grade: str | None,
        comment: str | None,
        graded_by: str | None = None,
    ) -> None:
        """
        Stores a grade and comment for a student in one write, and logs the grading event.

        Raises:
            GradebookNotFoundError: If `gradebook_id` is not this gradebook.
            AssignmentNotFoundError: If the assignment does not exist.
            InvalidGradeError: If the grade is not a non-negative finite number.

        Notes:
            - A None comment clears any stored comment.
        """
        self._require_assignment(gradebook_id, assignment_id)
        grade = Gradebook.validate_grade_input(grade)
        recorded_at = now()

        record = self._grades.get((assignment_id, student_id))

        if record is None:
            record = GradeRecord(assignment_id, student_id, grade)
            self._grades[(assignment_id, student_id)] = record

        record.grade = grade
        record.comment = comment
        record.mark_recorded(graded_by, recorded_at)

        self._grading_events.append(
            GradeLogEntry(assignment_id, student_id, graded_by, grade, recorded_at)
        )

    def course_grades(self, gradebook_id: str) -> dict[str, str]:
        self._require_gradebook(gradebook_id)
        return dict(self._course_grades)

    def add_assignment(self, gradebook_id: str, assignment: Assignment) -> None:
        self._require_gradebook(gradebook_id)

        if assignment.id in self._assignments:
            raise ValueError(f"An assignment with the id '{assignment.id}' already exists.")

        self.require_unique_assignment_name(assignment.name)

        if assignment.sort_order is None:
            assignment.sort_order = len(self._assignments)

        self._assignments[assignment.id] = assignment

    def update_assignment(self, gradebook_id: str, assignment: Assignment) -> None:
        self._require_assignment(gradebook_id, assignment.id)
        self._assignments[assignment.id] = assignment

    def update_assignment_order(
        self, gradebook_id: str, assignment_id: str, order: int
    ) -> None:
        """Moves an assignment in the flat order and renumbers every `sort_order` densely from 0."""
        self._require_assignment(gradebook_id, assignment_id)

        ordered = [a for a in self.assignments(gradebook_id) if a.id != assignment_id]
        ordered.insert(
            max(0, min(order, len(ordered))), self._assignments[assignment_id]
        )

        for index, assignment in enumerate(ordered):
            assignment.sort_order = index

    def grading_events(
        self, gradebook_id: str, student_id: str, assignment_id: str
    ) -> list[GradeLogEntry]:
        self._require_assignment(gradebook_id, assignment_id)
        return [
            event
            for event in self._grading_events
            if event.student_id == student_id and event.assignment_id == assignment_id
        ]

    def grade_comment(
        self, gradebook_id: str, assignment_id: str, student_id: str
    ) -> str | None:
        self._require_assignment(gradebook_id, assignment_id)
        record = self._grades.get((assignment_id, student_id))
        return record.comment if record else None

    def set_grade_comment(
        self,
        gradebook_id: str,
        assignment_id: str,
        student_id: str,
        comment: str | None,
    ) -> None:
        self._require_assignment(gradebook_id, assignment_id)
        record = self._grades.setdefault(
            (assignment_id, student_id), GradeRecord(assignment_id, student_id, None)
        )
        record.comment = comment

    # === order resource ===

    def get_order_blob(self, site_id: str) -> bytes | None:
        self._require_site(site_id)
        value = self._site_properties.get(ASSIGNMENT_ORDER_PROPERTY)
        return value.encode("utf-8") if value else None

    def set_order_blob(self, site_id: str, blob: bytes) -> None:
        self._require_site(site_id)
        self._site_properties[ASSIGNMENT_ORDER_PROPERTY] = blob.decode("utf-8")

    # === data validators ===

    def require_unique_assignment_name(self, name: str) -> None:
        """
        Validates that no existing assignment shares the given name.

        Args:
            name (str): The assignment name to validate for uniqueness.

        Raises:
            ValueError: If an assignment with the same normalized name already exists.
        """
        normalized = self._normalize(name)
        if any(
            self._normalize(a.name) == normalized for a in self._assignments.values()
        ):
            raise ValueError(f"An assignment with the name '{name}' already exists.")

    @staticmethod
    def validate_grade_input(grade: str | None) -> str | None:
        """
        Validates a grade string before it is stored.

        Accepts None or a blank string (stored as None, meaning ungraded), otherwise:
            - Strips whitespace.
            - Ensures the grade parses as a finite number.
            - Ensures it is non-negative.

        Raises:
            InvalidGradeError: If the grade is not a non-negative finite number.
        """
        if grade is None or not grade.strip():
            return None

        grade = grade.strip()

        try:
            points = float(grade)

        except ValueError:
            raise InvalidGradeError(f"Grade must be a number, got: {grade!r}") from None

        if not math.isfinite(points):
            raise InvalidGradeError("Grade must be a finite number.")

        if points < 0:
            raise InvalidGradeError("Grade cannot be less than zero.")

        return grade

    # === helper methods ===

    def _require_site(self, site_id: str) -> None:
        if site_id != self.site_id:
            raise LookupError(f"Unknown site: {site_id}")

    def _require_gradebook(self, gradebook_id: str | None) -> None:
        if gradebook_id != self.uid:
            raise GradebookNotFoundError(str(gradebook_id))

    def _require_assignment(self, gradebook_id: str | None, assignment_id: str) -> None:
        self._require_gradebook(gradebook_id)
        if assignment_id not in self._assignments:
            raise AssignmentNotFoundError(assignment_id)

    def _normalize(self, input: str) -> str:
        return input.strip().lower()

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"Gradebook({self.site_id}, {self.uid}, {len(self._assignments)} assignments, {len(self._roster)} students)"
