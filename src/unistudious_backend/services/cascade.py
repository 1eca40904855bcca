"""
Removal of dependent records, run in the transaction of the parent delete.
"""

import logging
from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from unistudious_backend.api.exceptions import BadRequestException
from unistudious_backend.model.auth import User
from unistudious_backend.model.calendar import CalendarEvent
from unistudious_backend.model.course import Course, course_student
from unistudious_backend.model.notification import Notification
from unistudious_backend.model.resource import Resource

logger = logging.getLogger(__name__)


def delete_course_dependents(course: Course, db: Session):
    """Delete a course's events, resources and enrollments; detach its notifications"""

    events = db.execute(delete(CalendarEvent).where(CalendarEvent.course_id == course.id)).rowcount
    resources = db.execute(delete(Resource).where(Resource.course_id == course.id)).rowcount

    db.execute(
        update(Notification)
        .where(Notification.related_course_id == course.id)
        .values(related_course_id=None)
    )
    db.execute(delete(course_student).where(course_student.c.course_id == course.id))

    logger.info(f"Deleting course {course.id} with {events} events and {resources} resources")


def delete_user_dependents(user: User, db: Session):
    """Clean up everything referencing a user; refuses while the user still teaches"""

    teaching = db.query(Course.id).filter(Course.teacher_id == user.id).count()

    if teaching > 0:
        raise BadRequestException(
            detail=f"Cannot delete this user because they teach {teaching} course(s). Please delete or reassign those courses first."
        )

    db.execute(delete(CalendarEvent).where(CalendarEvent.owner_id == user.id))
    db.execute(delete(Notification).where(Notification.recipient_id == user.id))
    db.execute(
        update(Notification)
        .where(Notification.sender_id == user.id)
        .values(sender_id=None)
    )
    db.execute(
        update(Resource)
        .where(Resource.uploaded_by_professor_id == user.id)
        .values(uploaded_by_professor_id=None)
    )
    db.execute(
        update(Resource)
        .where(Resource.uploaded_by_user_id == user.id)
        .values(uploaded_by_user_id=None)
    )
    db.execute(delete(course_student).where(course_student.c.student_id == user.id))
