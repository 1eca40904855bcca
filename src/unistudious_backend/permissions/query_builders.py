from typing import Any, Type
from sqlalchemy import or_, select
from sqlalchemy.orm import Query
from unistudious_backend.model.course import Course, course_student


class CoursePermissionQueryBuilder:
    """Utility class for building course-related permission queries"""

    @classmethod
    def enrolled_courses_subquery(cls, user_id: str):
        """Courses the user is enrolled in as a student"""
        return select(course_student.c.course_id).where(course_student.c.student_id == user_id)

    @classmethod
    def taught_courses_subquery(cls, user_id: str):
        """Courses the user teaches"""
        return select(Course.id).where(Course.teacher_id == user_id)

    @classmethod
    def filter_by_enrollment(cls, query: Query, entity: Type[Any], user_id: str) -> Query:
        """Restrict query to records of courses the user is enrolled in"""
        subquery = cls.enrolled_courses_subquery(user_id)

        if entity.__tablename__ == Course.__tablename__:
            return query.filter(entity.id.in_(subquery))

        return query.filter(entity.course_id.in_(subquery))

    @classmethod
    def filter_owned_or_in_courses(cls, query: Query, owner_column, entity: Type[Any], user_id: str, taught: bool) -> Query:
        """Restrict query to records owned by the user or attached to the user's courses"""
        if taught:
            subquery = cls.taught_courses_subquery(user_id)
        else:
            subquery = cls.enrolled_courses_subquery(user_id)

        return query.filter(or_(owner_column == user_id, entity.course_id.in_(subquery)))
