from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session

from unistudious_backend.interface.dashboard import ActivityItem, AdminStats, ProfessorStats
from unistudious_backend.model.auth import User
from unistudious_backend.model.calendar import CalendarEvent
from unistudious_backend.model.course import Course, course_student
from unistudious_backend.model.notification import Notification
from unistudious_backend.model.resource import Resource
from unistudious_backend.permissions.policy import PROFESSOR, STUDENT

# items fetched per source before merging
ACTIVITY_SOURCE_LIMIT = 5

ROLE_LABELS = {
    "student": "Student",
    "professor": "Professor",
    "admin": "Admin",
}


def admin_stats(db: Session) -> AdminStats:
    roles = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())

    return AdminStats(
        total_users=sum(roles.values()),
        total_students=roles.get(STUDENT, 0),
        total_professors=roles.get(PROFESSOR, 0),
        total_courses=db.query(func.count(Course.id)).scalar() or 0,
        total_resources=db.query(func.count(Resource.id)).scalar() or 0,
        total_notifications=db.query(func.count(Notification.id)).scalar() or 0,
        total_events=db.query(func.count(CalendarEvent.id)).scalar() or 0,
    )


def professor_stats(user_id: str, db: Session) -> ProfessorStats:
    total_students = (
        db.query(func.count())
        .select_from(course_student)
        .join(Course, Course.id == course_student.c.course_id)
        .filter(Course.teacher_id == user_id)
        .scalar()
    )

    return ProfessorStats(
        total_courses=db.query(func.count(Course.id)).filter(Course.teacher_id == user_id).scalar() or 0,
        total_students=total_students or 0,
        total_resources=db.query(func.count(Resource.id)).filter(Resource.uploaded_by_professor_id == user_id).scalar() or 0,
        total_notifications=db.query(func.count(Notification.id)).filter(Notification.recipient_id == user_id).scalar() or 0,
    )


def _full_name(user: User) -> str:
    return " ".join(p for p in (user.given_name, user.family_name) if p) or (user.username or user.email)


def recent_activity(db: Session, limit: int = 10) -> List[ActivityItem]:
    """Merged feed of the latest users, courses, resources and events, newest first"""

    activities: List[ActivityItem] = []

    for user in db.query(User).order_by(User.created_at.desc()).limit(ACTIVITY_SOURCE_LIMIT).all():
        activities.append(ActivityItem(
            type="user_created",
            title=f"New user registered: {_full_name(user)}",
            subtitle=ROLE_LABELS.get(user.role, user.role),
            timestamp=user.created_at
        ))

    for course in db.query(Course).order_by(Course.updated_at.desc()).limit(ACTIVITY_SOURCE_LIMIT).all():
        is_new = course.created_at == course.updated_at
        activities.append(ActivityItem(
            type="course_created" if is_new else "course_updated",
            title=f"New course created: {course.name}" if is_new else f"Course updated: {course.name}",
            subtitle="Course",
            timestamp=course.updated_at
        ))

    for resource in db.query(Resource).order_by(Resource.created_at.desc()).limit(ACTIVITY_SOURCE_LIMIT).all():
        uploader = resource.uploaded_by_professor or resource.uploaded_by_user
        activities.append(ActivityItem(
            type="resource_added",
            title=f"New resource: {resource.title}",
            subtitle=f"Added by {_full_name(uploader)}" if uploader else "Added by Professor",
            timestamp=resource.created_at
        ))

    for event in db.query(CalendarEvent).order_by(CalendarEvent.created_at.desc()).limit(ACTIVITY_SOURCE_LIMIT).all():
        activities.append(ActivityItem(
            type="event_created",
            title=f"Event created: {event.title}",
            subtitle=event.type,
            timestamp=event.created_at
        ))

    activities.sort(key=lambda a: a.timestamp.timestamp() if a.timestamp else 0, reverse=True)

    return activities[:limit]
