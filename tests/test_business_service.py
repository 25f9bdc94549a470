# tests/test_business_service.py

from core.business_service import GradebookBusinessService
from core.config import GradebookConfig
from core.expiring_cache import IdleExpiringCache
from core.response import ErrorCode, GradeSaveResult
from models.assignment import Assignment
from models.sort_order import GradeSortOrder, SortDirection

SITE_ID = "site-001"
GRADEBOOK_UID = "gb-001"


def test_resolve_context(sample_service):
    context = sample_service.resolve_context(SITE_ID)

    assert context.gradebook_id == GRADEBOOK_UID
    assert context.user.id == "u-inst"
    assert context.editor_id == "inst01"


def test_resolve_context_without_gradebook(sample_service):
    context = sample_service.resolve_context("site-without-gradebook")

    assert not context.has_gradebook
    assert sample_service.get_gradebook_assignments(context) is None
    assert sample_service.get_site_course_grades(context) == {}


def test_default_cache_follows_config(sample_gradebook):
    service = GradebookBusinessService(
        sample_gradebook,
        sample_gradebook,
        sample_gradebook,
        config=GradebookConfig(notification_time_to_idle=30.0),
    )

    assert service.config.notification_time_to_idle == 30.0


def test_assignment_lookups(sample_service, sample_context):
    assignments = sample_service.get_gradebook_assignments(sample_context)

    assert [a.id for a in assignments] == ["a-1", "a-2", "a-3", "a-4"]
    assert sample_service.get_assignment(sample_context, "a-3").name == "Quiz 1"
    assert sample_service.get_assignment(sample_context, "a-missing") is None


def test_save_and_build_matrix(sample_service, sample_context, other_context):
    assert sample_service.save_grade(sample_context, "a-1", "u-s2", "7", None) == GradeSaveResult.OK
    assert sample_service.save_grade(other_context, "a-1", "u-s3", "9", None) == GradeSaveResult.OK

    assignments = sample_service.get_gradebook_assignments(sample_context)
    response = sample_service.build_grade_matrix(
        sample_context,
        assignments,
        sort_order=GradeSortOrder("a-1", SortDirection.DESCENDING),
    )

    rows = response.data["rows"]
    assert [row.student_id for row in rows][:2] == ["u-s3", "u-s2"]


def test_editing_notifications_between_instructors(
    sample_service, sample_context, other_context
):
    sample_service.save_grade(sample_context, "a-1", "u-s1", "8", None)

    assert sample_service.get_editing_notifications(sample_context) == []
    cells = sample_service.get_editing_notifications(other_context)
    assert [(cell.student_id, cell.assignment_id) for cell in cells] == [("u-s1", "a-1")]


def test_grade_log_is_newest_first(sample_service, sample_context):
    sample_service.save_grade(sample_context, "a-1", "u-s1", "5", None)
    sample_service.save_grade(sample_context, "a-1", "u-s1", "6", None)

    log = sample_service.get_grade_log(sample_context, "u-s1", "a-1")

    assert [entry.grade for entry in log] == ["6", "5"]


def test_grade_comments(sample_service, sample_context):
    assert sample_service.update_assignment_grade_comment(
        sample_context, "a-1", "u-s1", "See me"
    )
    assert (
        sample_service.get_assignment_grade_comment(sample_context, "a-1", "u-s1")
        == "See me"
    )
    assert not sample_service.update_assignment_grade_comment(
        sample_context, "a-missing", "u-s1", "See me"
    )


def test_categorized_order_operations(sample_service, sample_context):
    response = sample_service.update_categorized_assignment_order(
        sample_context, "a-2", 0
    )

    assert response.success
    order = sample_service.get_categorized_assignments_order(sample_context).data["order"]
    assert order["Essays"] == ["a-2", "a-1"]
    assert sample_service.get_categorized_sort_order(sample_context, "a-1") == 1
    assert sample_service.get_assignment_sort_order(sample_context, "a-4") == 3


def test_update_assignment_order(sample_service, sample_context):
    assert sample_service.update_assignment_order(sample_context, "a-3", 0).success

    ids = [a.id for a in sample_service.get_gradebook_assignments(sample_context)]
    assert ids == ["a-3", "a-1", "a-2", "a-4"]

    response = sample_service.update_assignment_order(sample_context, "a-missing", 0)
    assert response.error == ErrorCode.NOT_FOUND


def test_add_and_update_assignment(sample_service, sample_context):
    assignment = Assignment("a-5", "Midterm", 50.0, category_name="Exams")

    assert sample_service.add_assignment(sample_context, assignment).success

    duplicate = sample_service.add_assignment(
        sample_context, Assignment("a-6", "midterm", 50.0)
    )
    assert duplicate.error == ErrorCode.VALIDATION_FAILED

    assignment.points_possible = 60.0
    assert sample_service.update_assignment(sample_context, assignment).success
    assert sample_service.get_assignment(sample_context, "a-5").points_possible == 60.0

    missing = sample_service.update_assignment(
        sample_context, Assignment("a-missing", "Ghost", 1.0)
    )
    assert missing.error == ErrorCode.NOT_FOUND


def test_update_ungraded_items(sample_service, sample_context, sample_gradebook):
    sample_service.save_grade(sample_context, "a-3", "u-s1", "18", "kept")
    sample_gradebook.commit_grade(GRADEBOOK_UID, "a-3", "u-s2", "", None)

    response = sample_service.update_ungraded_items(sample_context, "a-3", 10.0)

    assert response.success
    assert sorted(response.data["updated"]) == ["u-s2", "u-s3", "u-s4"]
    assert sample_gradebook.current_grade(GRADEBOOK_UID, "a-3", "u-s1") == "18"
    assert sample_gradebook.current_grade(GRADEBOOK_UID, "a-3", "u-s4") == "10"


def test_update_ungraded_items_unknown_assignment(sample_service, sample_context):
    response = sample_service.update_ungraded_items(sample_context, "a-missing", 1.0)

    assert not response.success
    assert response.error == ErrorCode.INTERNAL_ERROR
    assert response.data["updated"] == []


def test_operations_without_gradebook(sample_service, no_gradebook_context):
    assert (
        sample_service.save_grade(no_gradebook_context, "a-1", "u-s1", "5", None)
        == GradeSaveResult.ERROR
    )
    assert sample_service.get_editing_notifications(no_gradebook_context) == []
    assert sample_service.get_grade_log(no_gradebook_context, "u-s1", "a-1") == []
    assert (
        sample_service.update_ungraded_items(no_gradebook_context, "a-1", 5.0).error
        == ErrorCode.NO_GRADEBOOK
    )
    assert (
        sample_service.add_assignment(
            no_gradebook_context, Assignment("a-9", "X", 1.0)
        ).error
        == ErrorCode.NO_GRADEBOOK
    )


def test_injected_cache_is_used(sample_gradebook, sample_context):
    cache = IdleExpiringCache(time_to_idle=60.0)
    service = GradebookBusinessService(
        sample_gradebook, sample_gradebook, sample_gradebook, cache=cache
    )

    service.save_grade(sample_context, "a-1", "u-s1", "8", None)

    assert GRADEBOOK_UID in cache
