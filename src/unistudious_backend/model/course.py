from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Table, Text

from .base import Base, TimestampMixin

from sqlalchemy.orm import relationship

course_student = Table(
    'course_student',
    Base.metadata,
    Column('course_id', ForeignKey('course.id', ondelete='CASCADE'), primary_key=True),
    Column('student_id', ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
    Index('course_student_student_idx', 'student_id'),
)


class Course(TimestampMixin, Base):
    __tablename__ = 'course'
    __table_args__ = (
        CheckConstraint('progress >= 0 AND progress <= 100', name='course_progress_check'),
        Index('course_teacher_idx', 'teacher_id'),
    )

    name = Column(String(255), nullable=False)
    description = Column(Text)
    teacher_id = Column(ForeignKey('user.id', ondelete='RESTRICT', onupdate='RESTRICT'), nullable=False)
    progress = Column(Integer, nullable=False, default=0)
    next_lesson = Column(DateTime(True))

    # Relationships
    teacher = relationship('User', foreign_keys=[teacher_id], back_populates='taught_courses')
    students = relationship('User', secondary=course_student, back_populates='enrolled_courses', viewonly=True)

    @property
    def student_ids(self) -> list[str]:
        return [student.id for student in self.students]
