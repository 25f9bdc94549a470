# tests/conftest.py

from datetime import datetime

import pytest

from core.business_service import GradebookBusinessService
from core.config import GradebookConfig
from core.edit_notifications import EditNotificationCache
from core.expiring_cache import IdleExpiringCache
from models.assignment import Assignment
from models.context import GradebookContext
from models.gradebook import Gradebook
from models.user import User

SITE_ID = "site-001"
GRADEBOOK_UID = "gb-001"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_clock_cache(fake_clock):
    return IdleExpiringCache(time_to_idle=10.0, clock=fake_clock)


@pytest.fixture
def notifications(fake_clock_cache):
    return EditNotificationCache(fake_clock_cache)


@pytest.fixture
def instructor():
    return User("u-inst", "inst01", "Ada", "Lovelace", "ada@example.edu")


@pytest.fixture
def other_instructor():
    return User("u-ta", "ta01", "Grace", "Hopper", "grace@example.edu")


@pytest.fixture
def sample_students():
    return [
        User("u-s1", "s1", "Sean", "Cameron", "scameron@example.edu"),
        User("u-s2", "s2", "Alan", "Turing"),
        User("u-s3", "s3", "Barbara", "Liskov"),
        User("u-s4", "s4", "Edsger", "Dijkstra"),
    ]


@pytest.fixture
def sample_assignment():
    due_date = datetime.strptime("1987-06-21 23:59", "%Y-%m-%d %H:%M")
    return Assignment(
        id="a001",
        name="test_assignment",
        points_possible=10.0,
        category_name="Homework",
        sort_order=0,
        due_date=due_date,
    )


@pytest.fixture
def sample_assignments():
    return [
        Assignment("a-1", "Essay 1", 10.0, category_name="Essays"),
        Assignment("a-2", "Essay 2", 10.0, category_name="Essays"),
        Assignment("a-3", "Quiz 1", 20.0, category_name="Quizzes"),
        Assignment("a-4", "Participation", 5.0),
    ]


@pytest.fixture
def sample_gradebook(instructor, other_instructor, sample_students, sample_assignments):
    gradebook = Gradebook.create(SITE_ID, "FALL 2025", uid=GRADEBOOK_UID).data[
        "gradebook"
    ]

    gradebook.add_user(instructor, gradeable=False)
    gradebook.add_user(other_instructor, gradeable=False)

    for student in sample_students:
        gradebook.add_user(student)

    for assignment in sample_assignments:
        gradebook.add_assignment(GRADEBOOK_UID, assignment)

    gradebook.sign_in(instructor.id)

    return gradebook


@pytest.fixture
def sample_context(instructor):
    return GradebookContext(SITE_ID, GRADEBOOK_UID, instructor)


@pytest.fixture
def other_context(other_instructor):
    return GradebookContext(SITE_ID, GRADEBOOK_UID, other_instructor)


@pytest.fixture
def no_gradebook_context(instructor):
    return GradebookContext("site-without-gradebook", None, instructor)


@pytest.fixture
def sample_service(sample_gradebook, fake_clock_cache):
    return GradebookBusinessService(
        roster=sample_gradebook,
        grades=sample_gradebook,
        order_resource=sample_gradebook,
        cache=fake_clock_cache,
        config=GradebookConfig(),
    )
