from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

class AdminStats(BaseModel):
    total_users: int = 0
    total_students: int = 0
    total_professors: int = 0
    total_courses: int = 0
    total_resources: int = 0
    total_notifications: int = 0
    total_events: int = 0

class ProfessorStats(BaseModel):
    total_courses: int = 0
    total_students: int = Field(0, description="Enrollments summed over the professor's courses")
    total_resources: int = 0
    total_notifications: int = 0

class ActivityItem(BaseModel):
    type: str
    title: str
    subtitle: Optional[str] = None
    timestamp: Optional[datetime] = None

class ActivityQuery(BaseModel):
    limit: int = Field(10, ge=1, le=100)
