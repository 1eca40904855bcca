from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin


class CalendarEvent(TimestampMixin, Base):
    __tablename__ = 'calendar_event'
    __table_args__ = (
        CheckConstraint('"end" IS NULL OR "end" >= start', name='calendar_event_end_check'),
        CheckConstraint("type IN ('personal', 'class', 'project', 'exam')", name='calendar_event_type_check'),
        Index('calendar_event_owner_idx', 'owner_id'),
        Index('calendar_event_course_idx', 'course_id'),
    )

    title = Column(String(255), nullable=False)
    description = Column(Text)
    start = Column(DateTime(True), nullable=False)
    end = Column(DateTime(True))
    type = Column(String(32), nullable=False, default='personal')

    owner_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    course_id = Column(ForeignKey('course.id', ondelete='CASCADE', onupdate='RESTRICT'))

    owner = relationship('User', foreign_keys=[owner_id])
    course = relationship('Course', foreign_keys=[course_id])
