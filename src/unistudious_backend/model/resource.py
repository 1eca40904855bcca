from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin


class Resource(TimestampMixin, Base):
    __tablename__ = 'resource'
    __table_args__ = (
        CheckConstraint("type IN ('file', 'link', 'video', 'image')", name='resource_type_check'),
        Index('resource_course_idx', 'course_id'),
        Index('resource_professor_idx', 'uploaded_by_professor_id'),
    )

    title = Column(String(255), nullable=False)
    description = Column(Text)
    url = Column(String(2048), nullable=False)
    type = Column(String(32), nullable=False, default='file')

    course_id = Column(ForeignKey('course.id', ondelete='CASCADE', onupdate='RESTRICT'))
    uploaded_by_professor_id = Column(ForeignKey('user.id', ondelete='SET NULL', onupdate='RESTRICT'))
    uploaded_by_user_id = Column(ForeignKey('user.id', ondelete='SET NULL', onupdate='RESTRICT'))

    course = relationship('Course', foreign_keys=[course_id])
    uploaded_by_professor = relationship('User', foreign_keys=[uploaded_by_professor_id])
    uploaded_by_user = relationship('User', foreign_keys=[uploaded_by_user_id])

    @property
    def uploader_id(self):
        return self.uploaded_by_professor_id or self.uploaded_by_user_id
