# tests/test_grade_saver.py

import pytest

from core.grade_saver import GradeSaver
from core.response import GradeSaveResult

GRADEBOOK_UID = "gb-001"


@pytest.fixture
def saver(sample_gradebook, notifications):
    return GradeSaver(sample_gradebook, notifications)


def stored(gradebook, assignment_id="a-1", student_id="u-s1"):
    return gradebook.current_grade(GRADEBOOK_UID, assignment_id, student_id)


def test_save_then_resave_is_no_change(saver, sample_context, sample_gradebook):
    assert saver.save_grade(sample_context, "a-1", "u-s1", "8", None) == GradeSaveResult.OK
    assert stored(sample_gradebook) == "8"

    result = saver.save_grade(sample_context, "a-1", "u-s1", "8.0", None, old_grade="8")

    assert result == GradeSaveResult.NO_CHANGE


def test_no_change_wins_over_stale_old_grade(saver, sample_context):
    saver.save_grade(sample_context, "a-1", "u-s1", "8", None)

    result = saver.save_grade(sample_context, "a-1", "u-s1", "8", None, old_grade="3")

    assert result == GradeSaveResult.NO_CHANGE


def test_stale_old_grade_is_concurrent_edit(
    saver, sample_context, other_context, sample_gradebook
):
    saver.save_grade(sample_context, "a-1", "u-s1", "8", None)

    result = saver.save_grade(other_context, "a-1", "u-s1", "9", None, old_grade="7")

    assert result == GradeSaveResult.CONCURRENT_EDIT
    assert stored(sample_gradebook) == "8"


def test_matching_old_grade_saves(saver, sample_context, sample_gradebook):
    saver.save_grade(sample_context, "a-1", "u-s1", "8", None)

    result = saver.save_grade(sample_context, "a-1", "u-s1", "9", None, old_grade="8.0")

    assert result == GradeSaveResult.OK
    assert stored(sample_gradebook) == "9"


def test_omitted_old_grade_skips_concurrency_check(
    saver, sample_context, other_context, sample_gradebook
):
    saver.save_grade(sample_context, "a-1", "u-s1", "8", None)

    result = saver.save_grade(other_context, "a-1", "u-s1", "6", None)

    assert result == GradeSaveResult.OK
    assert stored(sample_gradebook) == "6"


def test_over_limit_is_stored_and_reported(saver, sample_context, sample_gradebook):
    result = saver.save_grade(sample_context, "a-1", "u-s1", "15", None)

    assert result == GradeSaveResult.OVER_LIMIT
    assert result.is_saved
    assert stored(sample_gradebook) == "15"


def test_blank_grade_clears(saver, sample_context, sample_gradebook):
    saver.save_grade(sample_context, "a-1", "u-s1", "8", "keep going")

    result = saver.save_grade(sample_context, "a-1", "u-s1", "  ", None)

    assert result == GradeSaveResult.OK
    assert stored(sample_gradebook) is None


def test_comment_and_grader_are_recorded(saver, sample_context, sample_gradebook):
    saver.save_grade(sample_context, "a-1", "u-s1", "8", "Solid draft")

    assert sample_gradebook.grade_comment(GRADEBOOK_UID, "a-1", "u-s1") == "Solid draft"
    events = sample_gradebook.grading_events(GRADEBOOK_UID, "u-s1", "a-1")
    assert events[-1].grader_id == "u-inst"
    assert events[-1].grade == "8"


def test_no_gradebook_is_error(saver, no_gradebook_context):
    result = saver.save_grade(no_gradebook_context, "a-1", "u-s1", "8", None)

    assert result == GradeSaveResult.ERROR


def test_unknown_assignment_is_error(saver, sample_context):
    result = saver.save_grade(sample_context, "a-missing", "u-s1", "8", None)

    assert result == GradeSaveResult.ERROR


def test_rejected_grade_is_error_but_still_notifies(
    saver, sample_context, notifications, sample_gradebook
):
    result = saver.save_grade(sample_context, "a-1", "u-s1", "abc", None)

    assert result == GradeSaveResult.ERROR
    assert stored(sample_gradebook) is None

    cells = notifications.poll(GRADEBOOK_UID, "ta01")
    assert [cell.key for cell in cells] == ["u-s1-a-1"]


def test_save_notifies_other_editors_only(saver, sample_context, notifications):
    saver.save_grade(sample_context, "a-1", "u-s1", "8", None)

    assert notifications.poll(GRADEBOOK_UID, "inst01") == []
    assert len(notifications.poll(GRADEBOOK_UID, "ta01")) == 1


def test_no_change_does_not_notify(saver, sample_context, notifications):
    result = saver.save_grade(sample_context, "a-1", "u-s1", "", None)

    assert result == GradeSaveResult.NO_CHANGE
    assert notifications.poll(GRADEBOOK_UID, "ta01") == []


def test_commit_failure_is_error(saver, sample_context, sample_gradebook, monkeypatch):
    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(sample_gradebook, "commit_grade", broken)

    result = saver.save_grade(sample_context, "a-1", "u-s1", "8", None)

    assert result == GradeSaveResult.ERROR


@pytest.mark.parametrize("lookup", ["current_grade", "assignment"])
def test_lookup_failure_is_error(
    saver, sample_context, sample_gradebook, monkeypatch, lookup
):
    def broken(*args, **kwargs):
        raise ConnectionError("grade store down")

    monkeypatch.setattr(sample_gradebook, lookup, broken)

    result = saver.save_grade(sample_context, "a-1", "u-s1", "5", None)

    assert result == GradeSaveResult.ERROR
    monkeypatch.undo()
    assert stored(sample_gradebook) is None
