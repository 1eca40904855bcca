from typing import Optional
from sqlalchemy.orm import Session, Query
from unistudious_backend.permissions.handlers import PermissionHandler
from unistudious_backend.permissions.policy import PROFESSOR
from unistudious_backend.permissions.query_builders import CoursePermissionQueryBuilder
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.model.auth import User

READ_ACTIONS = ["get", "list"]


class UserPermissionHandler(PermissionHandler):
    """Permission handler for User entity, administrators only"""

    def can_perform_action(self, principal: Principal, action: str, resource=None, context: Optional[dict] = None) -> bool:
        if self.check_admin(principal):
            return True

        return self.check_general_permission(principal, action)

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        if self.check_admin(principal):
            return db.query(self.entity)

        if self.check_general_permission(principal, action):
            return db.query(self.entity)

        raise self.forbidden(action)


class ProfessorDirectoryPermissionHandler(PermissionHandler):
    """Professor directory: readable by every principal, managed by administrators"""

    def can_perform_action(self, principal: Principal, action: str, resource=None, context: Optional[dict] = None) -> bool:
        if self.check_admin(principal):
            return True

        if not self.check_general_permission(principal, action):
            return False

        return resource is None or resource.role == PROFESSOR

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        if self.check_admin(principal) or self.check_general_permission(principal, action):
            return db.query(User).filter(User.role == PROFESSOR)

        raise self.forbidden(action)


class CoursePermissionHandler(PermissionHandler):
    """Permission handler for Course entity"""

    OWNER_ACTIONS = ["update", "delete", "assign_students", "remove_students"]

    def can_perform_action(self, principal: Principal, action: str, resource=None, context: Optional[dict] = None) -> bool:
        if self.check_admin(principal):
            return True

        if not self.check_general_permission(principal, action):
            return False

        if resource is None:
            return True

        if action in READ_ACTIONS:
            return principal.owns(resource.teacher_id) or principal.enrolled_in(resource.id)

        if action in self.OWNER_ACTIONS:
            return principal.owns(resource.teacher_id)

        return True

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        if self.check_admin(principal):
            return db.query(self.entity)

        if action in READ_ACTIONS:
            query = db.query(self.entity)

            if principal.is_professor:
                return query.filter(self.entity.teacher_id == principal.user_id)

            return CoursePermissionQueryBuilder.filter_by_enrollment(query, self.entity, principal.user_id)

        if action in self.OWNER_ACTIONS and self.check_general_permission(principal, action):
            return db.query(self.entity).filter(self.entity.teacher_id == principal.user_id)

        raise self.forbidden(action)


class CalendarEventPermissionHandler(PermissionHandler):
    """Permission handler for CalendarEvent entity.

    Events stay editable by their owner. Professors may edit any event.
    Events attached to a course are readable by its teacher and students.
    """

    def can_perform_action(self, principal: Principal, action: str, resource=None, context: Optional[dict] = None) -> bool:
        if self.check_admin(principal):
            return True

        if resource is not None and principal.owns(resource.owner_id):
            return True

        if action in READ_ACTIONS:
            if resource is None:
                return self.check_general_permission(principal, action)
            return principal.member_of(resource.course_id)

        if not self.check_general_permission(principal, action):
            return False

        if action == "create":
            course_id = (context or {}).get("course_id")
            return course_id is None or principal.teaches(course_id)

        return True

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        if self.check_admin(principal):
            return db.query(self.entity)

        if action in READ_ACTIONS:
            return CoursePermissionQueryBuilder.filter_owned_or_in_courses(
                db.query(self.entity), self.entity.owner_id, self.entity,
                principal.user_id, taught=principal.is_professor
            )

        if self.check_general_permission(principal, action):
            return db.query(self.entity)

        return db.query(self.entity).filter(self.entity.owner_id == principal.user_id)


class ResourcePermissionHandler(PermissionHandler):
    """Permission handler for Resource entity"""

    def can_perform_action(self, principal: Principal, action: str, resource=None, context: Optional[dict] = None) -> bool:
        if self.check_admin(principal):
            return True

        if not self.check_general_permission(principal, action):
            return False

        if action == "create":
            course_id = (context or {}).get("course_id")
            return course_id is None or principal.teaches(course_id)

        if resource is None:
            return True

        if action in READ_ACTIONS:
            return (
                principal.owns(resource.uploaded_by_professor_id)
                or principal.owns(resource.uploaded_by_user_id)
                or principal.member_of(resource.course_id)
            )

        return principal.owns(resource.uploaded_by_professor_id)

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        if self.check_admin(principal):
            return db.query(self.entity)

        if action in READ_ACTIONS:
            return CoursePermissionQueryBuilder.filter_owned_or_in_courses(
                db.query(self.entity), self.entity.uploaded_by_professor_id, self.entity,
                principal.user_id, taught=principal.is_professor
            )

        if self.check_general_permission(principal, action):
            return db.query(self.entity).filter(self.entity.uploaded_by_professor_id == principal.user_id)

        raise self.forbidden(action)


class NotificationPermissionHandler(PermissionHandler):
    """Permission handler for Notification entity"""

    def can_perform_action(self, principal: Principal, action: str, resource=None, context: Optional[dict] = None) -> bool:
        # Only the recipient flips the read flag
        if action == "mark_read":
            return resource is None or principal.owns(resource.recipient_id)

        if self.check_admin(principal):
            return True

        if not self.check_general_permission(principal, action):
            return False

        if resource is None:
            return True

        if action in READ_ACTIONS:
            return principal.owns(resource.recipient_id)

        if action == "delete":
            return principal.owns(resource.recipient_id) or principal.owns(resource.sender_id)

        return False

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        if self.check_admin(principal) and action != "mark_read":
            return db.query(self.entity)

        return db.query(self.entity).filter(self.entity.recipient_id == principal.user_id)
