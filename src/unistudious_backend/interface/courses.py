from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from unistudious_backend.interface.base import BaseEntityGet, BaseEntityList, EntityInterface, ListQuery
from unistudious_backend.model.course import Course, course_student

class CourseTeacher(BaseModel):
    id: str
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    email: Optional[str] = None
    speciality: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class CourseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255, description="Course name")
    description: Optional[str] = None
    teacher_id: Optional[str] = Field(None, description="Teaching professor; forced to the caller for professors")
    student_ids: List[str] = Field(default_factory=list, description="Initially enrolled students")
    progress: int = Field(0, ge=0, le=100, description="Completion in percent")
    next_lesson: Optional[datetime] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Course name cannot be empty')
        return v.strip()

    @field_validator('student_ids')
    @classmethod
    def unique_student_ids(cls, v):
        return list(dict.fromkeys(v))

class CourseGet(BaseEntityGet):
    name: str
    description: Optional[str] = None
    teacher_id: str
    teacher: Optional[CourseTeacher] = None
    student_ids: List[str] = Field(default_factory=list)
    progress: int
    next_lesson: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class CourseList(BaseEntityList):
    name: str
    description: Optional[str] = None
    teacher_id: str
    teacher: Optional[CourseTeacher] = None
    student_ids: List[str] = Field(default_factory=list)
    progress: int
    next_lesson: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    next_lesson: Optional[datetime] = None

    # teacher_id and student_ids are not editable here
    model_config = ConfigDict(extra='forbid')

class CourseStudents(BaseModel):
    student_ids: List[str] = Field(min_length=1, description="Students to add or remove")

class CourseQuery(ListQuery):
    id: Optional[str] = None
    name: Optional[str] = None
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None

def course_search(db: Session, query, params: Optional[CourseQuery]):
    query = query.options(selectinload(Course.teacher), selectinload(Course.students))
    if params.id != None:
        query = query.filter(Course.id == params.id)
    if params.name != None:
        query = query.filter(Course.name.ilike(f"%{params.name}%"))
    if params.teacher_id != None:
        query = query.filter(Course.teacher_id == params.teacher_id)
    if params.student_id != None:
        query = query.filter(Course.id.in_(
            select(course_student.c.course_id).where(course_student.c.student_id == params.student_id)
        ))
    return query.order_by(Course.created_at.desc())

class CourseInterface(EntityInterface):
    create = CourseCreate
    get = CourseGet
    list = CourseList
    update = CourseUpdate
    query = CourseQuery
    search = course_search
    endpoint = "courses"
    model = Course
