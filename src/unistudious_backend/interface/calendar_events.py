from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from sqlalchemy.orm import Session
from unistudious_backend.interface.base import BaseEntityGet, EntityInterface, ListQuery
from unistudious_backend.model.calendar import CalendarEvent

class EventTypeEnum(str, Enum):
    personal = "personal"
    class_ = "class"
    project = "project"
    exam = "exam"

def _as_utc(value: datetime) -> datetime:
    # naive values are stored and compared as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def check_event_window(start: Optional[datetime], end: Optional[datetime]):
    if start is not None and end is not None and _as_utc(end) < _as_utc(start):
        raise ValueError("end must not be before start")

class CalendarEventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    start: datetime
    end: Optional[datetime] = None
    course_id: Optional[str] = None
    type: EventTypeEnum = EventTypeEnum.personal

    @model_validator(mode='after')
    def validate_window(self):
        check_event_window(self.start, self.end)
        return self

    model_config = ConfigDict(use_enum_values=True)

class CalendarEventGet(BaseEntityGet):
    title: str
    description: Optional[str] = None
    start: datetime
    end: Optional[datetime] = None
    owner_id: str
    course_id: Optional[str] = None
    type: EventTypeEnum

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class CalendarEventList(CalendarEventGet):
    pass

class CalendarEventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    course_id: Optional[str] = None
    type: Optional[EventTypeEnum] = None

    @model_validator(mode='after')
    def validate_window(self):
        check_event_window(self.start, self.end)
        return self

    model_config = ConfigDict(use_enum_values=True, extra='forbid')

class CalendarEventQuery(ListQuery):
    course_id: Optional[str] = None
    owner_id: Optional[str] = None
    type: Optional[EventTypeEnum] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None

def calendar_event_search(db: Session, query, params: Optional[CalendarEventQuery]):
    if params.course_id != None:
        query = query.filter(CalendarEvent.course_id == params.course_id)
    if params.owner_id != None:
        query = query.filter(CalendarEvent.owner_id == params.owner_id)
    if params.type != None:
        query = query.filter(CalendarEvent.type == params.type.value)
    if params.start_from != None:
        query = query.filter(CalendarEvent.start >= params.start_from)
    if params.start_to != None:
        query = query.filter(CalendarEvent.start <= params.start_to)
    return query.order_by(CalendarEvent.start.desc())

class CalendarEventInterface(EntityInterface):
    create = CalendarEventCreate
    get = CalendarEventGet
    list = CalendarEventList
    update = CalendarEventUpdate
    query = CalendarEventQuery
    search = calendar_event_search
    endpoint = "calendrier"
    model = CalendarEvent
