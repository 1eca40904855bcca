"""
Permission entry points built on the handler registry.
"""

from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from unistudious_backend.permissions.handlers import permission_registry
from unistudious_backend.permissions.handlers_impl import (
    UserPermissionHandler,
    ProfessorDirectoryPermissionHandler,
    CoursePermissionHandler,
    CalendarEventPermissionHandler,
    ResourcePermissionHandler,
    NotificationPermissionHandler,
)
from unistudious_backend.permissions.principal import Principal, CourseClaims

from unistudious_backend.model.auth import User
from unistudious_backend.model.course import Course, course_student
from unistudious_backend.model.calendar import CalendarEvent
from unistudious_backend.model.resource import Resource
from unistudious_backend.model.notification import Notification

PROFESSOR_DIRECTORY = "professor"


def initialize_permission_handlers():
    """Initialize and register all permission handlers"""

    permission_registry.register(User, UserPermissionHandler(User))
    permission_registry.register(PROFESSOR_DIRECTORY, ProfessorDirectoryPermissionHandler(User, PROFESSOR_DIRECTORY))

    permission_registry.register(Course, CoursePermissionHandler(Course))
    permission_registry.register(CalendarEvent, CalendarEventPermissionHandler(CalendarEvent))
    permission_registry.register(Resource, ResourcePermissionHandler(Resource))
    permission_registry.register(Notification, NotificationPermissionHandler(Notification))


def check_permissions(permissions: Principal, entity: Any, action: str, db: Session):
    """
    Main entry point for read permission checking.
    Returns a query restricted to what the principal may see.
    """
    return permission_registry.check_permissions(permissions, entity, action, db)


def authorize(permissions: Principal, entity: Any, action: str, resource: Optional[Any] = None, context: Optional[Dict[str, str]] = None):
    """Mutation guard: raises ForbiddenException unless the action is allowed"""
    permission_registry.authorize(permissions, entity, action, resource, context)


def db_get_course_claims(user_id: str, db: Session) -> CourseClaims:
    """Load the courses a user teaches and the courses they are enrolled in"""

    taught = db.query(Course.id).filter(Course.teacher_id == user_id).all()
    enrolled = (
        db.query(course_student.c.course_id)
        .filter(course_student.c.student_id == user_id)
        .all()
    )

    return CourseClaims(
        taught={str(row[0]) for row in taught},
        enrolled={str(row[0]) for row in enrolled}
    )


# Initialize handlers on module import
initialize_permission_handlers()
