"""
Course enrollment as set operations on the ``course_student`` table.

Membership changes are single statements so concurrent assign/remove
requests cannot lose each other's updates.
"""

import logging
from typing import Iterable, List
from sqlalchemy import delete
from sqlalchemy.orm import Session

from unistudious_backend.api.exceptions import BadRequestException
from unistudious_backend.model.auth import User
from unistudious_backend.model.course import course_student
from unistudious_backend.permissions.policy import PROFESSOR, STUDENT

logger = logging.getLogger(__name__)


def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Enrollment upsert is not supported for {dialect}")

    return insert


def require_role(db: Session, user_ids: Iterable[str], role: str, field: str) -> List[str]:
    """Check that every id references a user with ``role``"""
    user_ids = list(dict.fromkeys(str(u) for u in user_ids))

    if not user_ids:
        return []

    found = {
        row[0] for row in
        db.query(User.id).filter(User.id.in_(user_ids), User.role == role).all()
    }
    missing = [u for u in user_ids if u not in found]

    if missing:
        raise BadRequestException(detail={"message": f"{field} must reference {role}s", "invalid": missing})

    return user_ids


def require_students(db: Session, student_ids: Iterable[str]) -> List[str]:
    return require_role(db, student_ids, STUDENT, "student_ids")


def require_professor(db: Session, teacher_id: str) -> str:
    return require_role(db, [teacher_id], PROFESSOR, "teacher_id")[0]


def db_add_students(course_id: str, student_ids: List[str], db: Session):
    """Add students to a course; already enrolled students are left untouched"""
    if not student_ids:
        return

    insert = _dialect_insert(db)

    stmt = insert(course_student).values([
        {"course_id": course_id, "student_id": student_id}
        for student_id in student_ids
    ])

    stmt = stmt.on_conflict_do_nothing(
        index_elements=["course_id", "student_id"]
    )
    db.execute(stmt)


def db_remove_students(course_id: str, student_ids: List[str], db: Session):
    """Remove students from a course; ids that are not enrolled are ignored"""
    if not student_ids:
        return

    db.execute(
        delete(course_student).where(
            course_student.c.course_id == course_id,
            course_student.c.student_id.in_(student_ids)
        )
    )
