from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin


class Notification(TimestampMixin, Base):
    __tablename__ = 'notification'
    __table_args__ = (
        CheckConstraint(
            "type IN ('project_assigned', 'grade_posted', 'resource_added', 'general')",
            name='notification_type_check'
        ),
        Index('notification_recipient_idx', 'recipient_id', 'is_read'),
    )

    title = Column(String(255), nullable=False)
    link = Column(String(2048))
    type = Column(String(32), nullable=False, default='general')
    is_read = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    recipient_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    sender_id = Column(ForeignKey('user.id', ondelete='SET NULL', onupdate='RESTRICT'))
    related_course_id = Column(ForeignKey('course.id', ondelete='SET NULL', onupdate='RESTRICT'))

    recipient = relationship('User', foreign_keys=[recipient_id])
    sender = relationship('User', foreign_keys=[sender_id])
    related_course = relationship('Course', foreign_keys=[related_course_id])
