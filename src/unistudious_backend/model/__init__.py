from .base import Base, metadata
from .auth import User
from .course import Course, course_student
from .calendar import CalendarEvent
from .resource import Resource
from .notification import Notification

__all__ = [
    'Base',
    'metadata',
    'User',
    'Course',
    'course_student',
    'CalendarEvent',
    'Resource',
    'Notification',
]
