"""
Permission handler tests with mocked sessions and plain record objects.
"""

import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock
from sqlalchemy.orm import Session

from unistudious_backend.api.exceptions import ForbiddenException
from unistudious_backend.model.auth import User
from unistudious_backend.model.calendar import CalendarEvent
from unistudious_backend.model.course import Course
from unistudious_backend.model.notification import Notification
from unistudious_backend.model.resource import Resource
from unistudious_backend.permissions.core import PROFESSOR_DIRECTORY, authorize, check_permissions
from unistudious_backend.permissions.handlers import permission_registry
from unistudious_backend.permissions.policy import ADMIN, PROFESSOR, STUDENT
from unistudious_backend.tests.fixtures import make_principal


def create_mock_db():
    """Mock session whose query chain returns itself"""
    db = MagicMock(spec=Session)

    query_mock = MagicMock()
    query_mock.filter = MagicMock(return_value=query_mock)
    query_mock.join = MagicMock(return_value=query_mock)
    query_mock.subquery = MagicMock()

    db.query = MagicMock(return_value=query_mock)
    return db, query_mock


def course(id="c1", teacher_id="prof-1"):
    return SimpleNamespace(id=id, teacher_id=teacher_id)


@pytest.mark.unit
class TestRegistry:

    def test_handlers_registered(self):
        for key in (User, PROFESSOR_DIRECTORY, Course, CalendarEvent, Resource, Notification):
            assert permission_registry.get_handler(key) is not None

    def test_admin_query_is_unfiltered(self):
        db, query_mock = create_mock_db()
        query = check_permissions(make_principal(ADMIN), Course, "list", db)

        db.query.assert_called_once_with(Course)
        assert query is query_mock
        query_mock.filter.assert_not_called()

    def test_student_cannot_list_users(self):
        db, _ = create_mock_db()
        with pytest.raises(ForbiddenException):
            check_permissions(make_principal(STUDENT), User, "list", db)

    def test_professor_course_list_is_filtered(self):
        db, query_mock = create_mock_db()
        check_permissions(make_principal(PROFESSOR, user_id="prof-1"), Course, "list", db)
        query_mock.filter.assert_called_once()


@pytest.mark.unit
class TestCourseHandler:

    def test_read_requires_membership(self):
        handler = permission_registry.get_handler(Course)
        c = course()

        assert handler.can_perform_action(make_principal(PROFESSOR, user_id="prof-1"), "get", c)
        assert handler.can_perform_action(make_principal(STUDENT, user_id="s1", enrolled={"c1"}), "get", c)
        assert not handler.can_perform_action(make_principal(STUDENT, user_id="s2"), "get", c)
        assert not handler.can_perform_action(make_principal(PROFESSOR, user_id="prof-2"), "get", c)
        assert handler.can_perform_action(make_principal(ADMIN, user_id="a"), "get", c)

    @pytest.mark.parametrize("action", ["update", "delete", "assign_students", "remove_students"])
    def test_owner_actions(self, action):
        c = course()

        authorize(make_principal(PROFESSOR, user_id="prof-1"), Course, action, c)

        with pytest.raises(ForbiddenException):
            authorize(make_principal(PROFESSOR, user_id="prof-2"), Course, action, c)

        with pytest.raises(ForbiddenException):
            authorize(make_principal(STUDENT, user_id="s1", enrolled={"c1"}), Course, action, c)

    def test_student_cannot_create(self):
        with pytest.raises(ForbiddenException):
            authorize(make_principal(STUDENT), Course, "create")


@pytest.mark.unit
class TestCalendarEventHandler:

    def test_owner_may_always_edit(self):
        event = SimpleNamespace(owner_id="s1", course_id=None)
        authorize(make_principal(STUDENT, user_id="s1"), CalendarEvent, "update", event)
        authorize(make_principal(STUDENT, user_id="s1"), CalendarEvent, "delete", event)

    def test_course_events_readable_by_members(self):
        handler = permission_registry.get_handler(CalendarEvent)
        event = SimpleNamespace(owner_id="prof-1", course_id="c1")

        assert handler.can_perform_action(make_principal(STUDENT, user_id="s1", enrolled={"c1"}), "get", event)
        assert not handler.can_perform_action(make_principal(STUDENT, user_id="s2"), "get", event)

    def test_create_for_course_requires_teaching(self):
        authorize(make_principal(PROFESSOR, taught={"c1"}), CalendarEvent, "create", None, {"course_id": "c1"})

        with pytest.raises(ForbiddenException):
            authorize(make_principal(PROFESSOR, taught={"c1"}), CalendarEvent, "create", None, {"course_id": "c2"})


@pytest.mark.unit
class TestResourceHandler:

    def test_only_uploading_professor_edits(self):
        resource = SimpleNamespace(uploaded_by_professor_id="prof-1", uploaded_by_user_id=None, course_id="c1")

        authorize(make_principal(PROFESSOR, user_id="prof-1"), Resource, "update", resource)

        with pytest.raises(ForbiddenException):
            authorize(make_principal(PROFESSOR, user_id="prof-2", taught={"c1"}), Resource, "delete", resource)

    def test_students_read_resources_of_their_courses(self):
        handler = permission_registry.get_handler(Resource)
        resource = SimpleNamespace(uploaded_by_professor_id="prof-1", uploaded_by_user_id=None, course_id="c1")

        assert handler.can_perform_action(make_principal(STUDENT, user_id="s1", enrolled={"c1"}), "get", resource)
        assert not handler.can_perform_action(make_principal(STUDENT, user_id="s1"), "get", resource)


@pytest.mark.unit
class TestNotificationHandler:

    def test_mark_read_is_recipient_only(self):
        notification = SimpleNamespace(recipient_id="s1", sender_id="prof-1")

        authorize(make_principal(STUDENT, user_id="s1"), Notification, "mark_read", notification)

        with pytest.raises(ForbiddenException):
            authorize(make_principal(ADMIN, user_id="a"), Notification, "mark_read", notification)

    def test_sender_may_delete(self):
        notification = SimpleNamespace(recipient_id="s1", sender_id="prof-1")
        authorize(make_principal(PROFESSOR, user_id="prof-1"), Notification, "delete", notification)

        with pytest.raises(ForbiddenException):
            authorize(make_principal(STUDENT, user_id="s2"), Notification, "delete", notification)

    def test_students_cannot_send(self):
        with pytest.raises(ForbiddenException):
            authorize(make_principal(STUDENT), Notification, "create")
