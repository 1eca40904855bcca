from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from sqlalchemy.orm import Session
from unistudious_backend.interface.base import BaseEntityGet, EntityInterface, ListQuery
from unistudious_backend.model.notification import Notification

class NotificationTypeEnum(str, Enum):
    project_assigned = "project_assigned"
    grade_posted = "grade_posted"
    resource_added = "resource_added"
    general = "general"

class NotificationCreate(BaseModel):
    # sender_id is always the current user; set in API
    title: str = Field(min_length=1, max_length=255)
    link: Optional[str] = Field(None, max_length=2048)
    type: NotificationTypeEnum = NotificationTypeEnum.general
    related_course_id: Optional[str] = None
    recipients: List[str] = Field(min_length=1, description="One notification is stored per recipient")

    @field_validator('recipients')
    @classmethod
    def unique_recipients(cls, v):
        return list(dict.fromkeys(v))

    model_config = ConfigDict(use_enum_values=True)

class NotificationGet(BaseEntityGet):
    title: str
    link: Optional[str] = None
    type: NotificationTypeEnum
    is_read: bool = False
    recipient_id: str
    sender_id: Optional[str] = None
    related_course_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class NotificationList(NotificationGet):
    pass

class NotificationQuery(ListQuery):
    is_read: Optional[bool] = None
    type: Optional[NotificationTypeEnum] = None
    related_course_id: Optional[str] = None

def notification_search(db: Session, query, params: Optional[NotificationQuery]):
    if params.is_read != None:
        query = query.filter(Notification.is_read == params.is_read)
    if params.type != None:
        query = query.filter(Notification.type == params.type.value)
    if params.related_course_id != None:
        query = query.filter(Notification.related_course_id == params.related_course_id)
    return query.order_by(Notification.created_at.desc())

class NotificationInterface(EntityInterface):
    create = NotificationCreate
    get = NotificationGet
    list = NotificationList
    query = NotificationQuery
    search = notification_search
    endpoint = "notifications"
    model = Notification
