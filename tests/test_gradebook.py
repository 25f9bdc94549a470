# tests/test_gradebook.py

import json
import os

import pytest

from core.exceptions import (
    AssignmentNotFoundError,
    FetchError,
    GradebookNotFoundError,
    InvalidGradeError,
)
from core.response import ErrorCode
from models.assignment import Assignment
from models.gradebook import Gradebook
from models.user import User

SITE_ID = "site-001"
GRADEBOOK_UID = "gb-001"


def test_create_new_gradebook():
    gradebook = Gradebook.create("site-x", "SPRING 2026").data["gradebook"]

    assert gradebook.site_id == "site-x"
    assert gradebook.title == "SPRING 2026"
    assert gradebook.uid
    assert gradebook.gradebook_uid("site-x") == gradebook.uid
    assert gradebook.gradebook_uid("site-y") is None


def test_save_and_load_round_trip(sample_gradebook, tmp_path):
    sample_gradebook.commit_grade(GRADEBOOK_UID, "a-1", "u-s1", "9", "Great", "u-inst")
    sample_gradebook.set_course_grade("s1", "A")
    sample_gradebook.set_order_blob(SITE_ID, b"[]")

    save_response = sample_gradebook.save(str(tmp_path))
    assert save_response.success

    load_response = Gradebook.load(str(tmp_path))
    assert load_response.success

    loaded = load_response.data["gradebook"]
    assert loaded.uid == GRADEBOOK_UID
    assert loaded.title == "FALL 2025"
    assert loaded.roster == sample_gradebook.roster
    assert [a.id for a in loaded.assignments(GRADEBOOK_UID)] == ["a-1", "a-2", "a-3", "a-4"]
    assert loaded.current_grade(GRADEBOOK_UID, "a-1", "u-s1") == "9"
    assert loaded.grade_comment(GRADEBOOK_UID, "a-1", "u-s1") == "Great"
    assert loaded.course_grades(GRADEBOOK_UID) == {"s1": "A"}
    assert loaded.get_order_blob(SITE_ID) == b"[]"
    assert len(loaded.grading_events(GRADEBOOK_UID, "u-s1", "a-1")) == 1


def test_save_without_directory_fails(sample_gradebook):
    response = sample_gradebook.save()

    assert not response.success
    assert response.error == ErrorCode.MISSING_REQUIRED_FIELD


def test_load_missing_directory_is_not_found(tmp_path):
    response = Gradebook.load(str(tmp_path / "missing"))

    assert response.error == ErrorCode.NOT_FOUND


def test_load_malformed_json(tmp_path):
    with open(os.path.join(tmp_path, "metadata.json"), "w") as f:
        f.write("{not json")

    response = Gradebook.load(str(tmp_path))

    assert response.error == ErrorCode.INVALID_INPUT


def test_load_missing_metadata_field(tmp_path):
    with open(os.path.join(tmp_path, "metadata.json"), "w") as f:
        json.dump({"site_id": "site-x"}, f)

    response = Gradebook.load(str(tmp_path))

    assert response.error == ErrorCode.MISSING_REQUIRED_FIELD


# === data manipulators ===


def test_add_user_rejects_duplicate_id(sample_gradebook, sample_students):
    response = sample_gradebook.add_user(sample_students[0])

    assert not response.success
    assert response.error == ErrorCode.VALIDATION_FAILED


def test_add_user_not_gradeable(sample_gradebook):
    guest = User("u-guest", "guest", "Guest", "Viewer")

    sample_gradebook.add_user(guest, gradeable=False)

    assert "u-guest" not in sample_gradebook.gradeable_user_ids(SITE_ID)
    assert sample_gradebook.user("u-guest") is guest


def test_current_user_requires_sign_in():
    gradebook = Gradebook(SITE_ID, GRADEBOOK_UID)

    with pytest.raises(FetchError):
        gradebook.current_user()


def test_resolve_users_sorts_by_last_name(sample_gradebook):
    users = sample_gradebook.resolve_users(["u-s2", "u-s1", "u-unknown"])

    assert [u.last_name for u in users] == ["Cameron", "Turing"]


def test_add_assignment_assigns_sort_order(sample_gradebook):
    assignment = Assignment("a-5", "Final", 100.0)

    sample_gradebook.add_assignment(GRADEBOOK_UID, assignment)

    assert assignment.sort_order == 4


def test_add_assignment_rejects_duplicate_name(sample_gradebook):
    with pytest.raises(ValueError):
        sample_gradebook.add_assignment(
            GRADEBOOK_UID, Assignment("a-9", "  essay 1 ", 10.0)
        )


def test_update_assignment_order_renumbers(sample_gradebook):
    sample_gradebook.update_assignment_order(GRADEBOOK_UID, "a-4", 0)

    ordered = sample_gradebook.assignments(GRADEBOOK_UID)

    assert [a.id for a in ordered] == ["a-4", "a-1", "a-2", "a-3"]
    assert [a.sort_order for a in ordered] == [0, 1, 2, 3]


def test_commit_grade_rejects_invalid_values(sample_gradebook):
    for grade in ("abc", "-1", "nan"):
        with pytest.raises(InvalidGradeError):
            sample_gradebook.commit_grade(GRADEBOOK_UID, "a-1", "u-s1", grade, None)


def test_commit_grade_blank_stores_none(sample_gradebook):
    sample_gradebook.commit_grade(GRADEBOOK_UID, "a-1", "u-s1", "5", "note")
    sample_gradebook.commit_grade(GRADEBOOK_UID, "a-1", "u-s1", " ", None)

    assert sample_gradebook.current_grade(GRADEBOOK_UID, "a-1", "u-s1") is None
    assert sample_gradebook.grade_comment(GRADEBOOK_UID, "a-1", "u-s1") is None


def test_unknown_ids_raise(sample_gradebook):
    with pytest.raises(GradebookNotFoundError):
        sample_gradebook.assignments("gb-missing")

    with pytest.raises(AssignmentNotFoundError):
        sample_gradebook.current_grade(GRADEBOOK_UID, "a-missing", "u-s1")

    with pytest.raises(LookupError):
        sample_gradebook.set_order_blob("other-site", b"[]")
