from sqlalchemy import CheckConstraint, Column, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = 'user'
    __table_args__ = (
        Index('user_email_key', 'email', unique=True),
        Index('user_username_key', 'username', unique=True),
        CheckConstraint("role IN ('student', 'professor', 'admin')", name='user_role_check'),
        CheckConstraint(
            "(school_level IS NULL AND section IS NULL) "
            "OR (school_level = '1st year' AND section IS NULL) "
            "OR (school_level <> '1st year' AND section IS NOT NULL)",
            name='user_section_check'
        ),
    )

    given_name = Column(String(255))
    family_name = Column(String(255))
    username = Column(String(255))
    email = Column(String(320), nullable=False)
    password = Column(String(1024), nullable=False)
    role = Column(String(32), nullable=False, default='student')

    # Student academic profile
    school_level = Column(String(64))
    section = Column(String(64))

    # Professor profile
    speciality = Column(String(64))
    department = Column(String(255))
    bio = Column(Text)

    # Relationships
    taught_courses = relationship('Course', back_populates='teacher', passive_deletes=True)
    enrolled_courses = relationship('Course', secondary='course_student', back_populates='students', viewonly=True)

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'
