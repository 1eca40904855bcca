import logging
from typing import Optional
from sqlalchemy.orm import Session

from unistudious_backend.api.exceptions import BadRequestException
from unistudious_backend.interface.users import normalize_academic_profile, username_from_name
from unistudious_backend.model.auth import User
from unistudious_backend.model.course import Course, course_student
from unistudious_backend.permissions.policy import PROFESSOR, STUDENT

logger = logging.getLogger(__name__)


def ensure_email_available(db: Session, email: str, exclude_id: Optional[str] = None):
    query = db.query(User.id).filter(User.email == email.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)

    if query.first() is not None:
        raise BadRequestException(detail="Email already registered")


def ensure_username_available(db: Session, username: str, exclude_id: Optional[str] = None):
    query = db.query(User.id).filter(User.username == username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)

    if query.first() is not None:
        raise BadRequestException(detail="Username already taken")


def unique_username(db: Session, given_name: str, family_name: str, requested: Optional[str] = None) -> str:
    """Requested username if free, otherwise ``given.family`` with a numeric suffix when taken"""

    if requested:
        ensure_username_available(db, requested)
        return requested

    base = username_from_name(given_name, family_name)
    candidate = base
    suffix = 1

    while db.query(User.id).filter(User.username == candidate).first() is not None:
        suffix += 1
        candidate = f"{base}{suffix}"

    return candidate


def apply_academic_profile(user: User):
    """Re-check academic fields on a merged user record; raises ValueError"""
    fields = normalize_academic_profile(user.role, user.school_level, user.section, user.speciality)

    for key, value in fields.items():
        setattr(user, key, value)


def check_role_change(user: User, db: Session):
    """Refuse a role that no longer fits the user's courses; raises ValueError"""

    if user.role != PROFESSOR:
        teaching = db.query(Course.id).filter(Course.teacher_id == user.id).count()
        if teaching > 0:
            raise ValueError(f"User teaches {teaching} course(s) and must stay a professor")

    if user.role != STUDENT:
        enrolled = (
            db.query(course_student.c.course_id)
            .filter(course_student.c.student_id == user.id)
            .count()
        )
        if enrolled > 0:
            raise ValueError(f"User is enrolled in {enrolled} course(s) and must stay a student")
