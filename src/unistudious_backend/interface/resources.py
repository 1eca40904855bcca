from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from sqlalchemy.orm import Session
from unistudious_backend.interface.base import BaseEntityGet, EntityInterface, ListQuery
from unistudious_backend.model.resource import Resource

class ResourceTypeEnum(str, Enum):
    file = "file"
    link = "link"
    video = "video"
    image = "image"

class ResourceCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    url: str = Field(min_length=1, max_length=2048)
    type: ResourceTypeEnum = ResourceTypeEnum.file
    course_id: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

class ResourceGet(BaseEntityGet):
    title: str
    description: Optional[str] = None
    url: str
    type: ResourceTypeEnum
    course_id: Optional[str] = None
    uploaded_by_professor_id: Optional[str] = None
    uploaded_by_user_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class ResourceList(ResourceGet):
    pass

class ResourceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    url: Optional[str] = Field(None, min_length=1, max_length=2048)
    type: Optional[ResourceTypeEnum] = None
    course_id: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True, extra='forbid')

class ResourceQuery(ListQuery):
    course_id: Optional[str] = None
    type: Optional[ResourceTypeEnum] = None
    title: Optional[str] = None

def resource_search(db: Session, query, params: Optional[ResourceQuery]):
    if params.course_id != None:
        query = query.filter(Resource.course_id == params.course_id)
    if params.type != None:
        query = query.filter(Resource.type == params.type.value)
    if params.title != None:
        query = query.filter(Resource.title.ilike(f"%{params.title}%"))
    return query.order_by(Resource.created_at.desc())

class ResourceInterface(EntityInterface):
    create = ResourceCreate
    get = ResourceGet
    list = ResourceList
    update = ResourceUpdate
    query = ResourceQuery
    search = resource_search
    endpoint = "ressources"
    model = Resource
