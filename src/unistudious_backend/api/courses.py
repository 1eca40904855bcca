import logging
from typing import Annotated
from fastapi import Depends, Response, status
from sqlalchemy import exc
from sqlalchemy.orm import Session

from unistudious_backend.api.api_builder import CrudRouter
from unistudious_backend.api.crud import create_db, list_db, load_db
from unistudious_backend.api.exceptions import BadRequestException, InternalServerException
from unistudious_backend.database import get_db
from unistudious_backend.interface.base import Result
from unistudious_backend.interface.courses import CourseCreate, CourseGet, CourseInterface, CourseList, CourseQuery, CourseStudents
from unistudious_backend.model.course import Course
from unistudious_backend.permissions.auth import get_current_permissions
from unistudious_backend.permissions.core import authorize
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.services.cascade import delete_course_dependents
from unistudious_backend.services.enrollment import db_add_students, db_remove_students, require_professor, require_students

logger = logging.getLogger(__name__)

course_router = CrudRouter(CourseInterface, exclude=["create"])
course_router.pre_delete = delete_course_dependents


@course_router.router.get("/my-courses", response_model=Result[list[CourseList]])
async def list_my_courses(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    params: CourseQuery = Depends(),
    db: Session = Depends(get_db),
):
    items, total = await list_db(permissions, db, params, CourseInterface)
    response.headers["X-Total-Count"] = str(total)
    return Result.ok(items)


@course_router.router.post("", response_model=Result[CourseGet], status_code=status.HTTP_201_CREATED)
async def create_course(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: CourseCreate,
    db: Session = Depends(get_db),
):
    authorize(permissions, Course, "create")

    model_dump = payload.model_dump(exclude={"student_ids"})

    # a professor always teaches the course they create
    if permissions.is_professor:
        model_dump["teacher_id"] = permissions.user_id
    elif model_dump.get("teacher_id") is None:
        raise BadRequestException(detail="teacher_id is required")
    else:
        model_dump["teacher_id"] = require_professor(db, model_dump["teacher_id"])

    student_ids = require_students(db, payload.student_ids)

    def enroll(course: Course, db: Session):
        db_add_students(course.id, student_ids, db)

    course = await create_db(permissions, db, model_dump, Course, CourseGet, enroll)

    logger.info(f"Course {course.id} created by {permissions.user_id}")

    return Result.ok(course)


def _change_students(permissions: Principal, db: Session, id: str, student_ids: list[str], action: str) -> CourseGet:

    course = load_db(db, Course, id)

    authorize(permissions, Course, action, course)

    try:
        if action == "assign_students":
            db_add_students(course.id, require_students(db, student_ids), db)
        else:
            db_remove_students(course.id, list(dict.fromkeys(student_ids)), db)

        db.commit()
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Updating students of course {id} failed: {e}")
        raise InternalServerException(detail="An unexpected database error occurred while updating students.")

    db.expire(course)

    return CourseGet.model_validate(course, from_attributes=True)


@course_router.router.post("/{id}/assign-students", response_model=Result[CourseGet])
async def assign_students(
    id: str,
    payload: CourseStudents,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return Result.ok(_change_students(permissions, db, id, payload.student_ids, "assign_students"))


@course_router.router.post("/{id}/remove-students", response_model=Result[CourseGet])
async def remove_students(
    id: str,
    payload: CourseStudents,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    return Result.ok(_change_students(permissions, db, id, payload.student_ids, "remove_students"))
