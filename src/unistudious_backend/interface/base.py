from abc import ABC
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

class ListQuery(BaseModel):
    skip: Optional[int] = Field(0, ge=0)
    limit: Optional[int] = Field(100, ge=1, le=1000)

class ErrorInfo(BaseModel):
    code: int = Field(description="Mirrors the HTTP status code")
    message: str
    details: Optional[Any] = None

class Result(BaseModel, Generic[T]):
    """Uniform response envelope returned by every endpoint."""
    success: bool = True
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def ok(cls, data: Any = None) -> "Result":
        return cls(success=True, data=data)

class EntityInterface(ABC):
    create: BaseModel = None
    get: BaseModel = None
    list: BaseModel = None
    update: BaseModel = None
    query: BaseModel = None
    search: Any = None
    endpoint: str = None
    model: Any = None

    # registry key of the permission handler, defaults to the model
    permission_key: Any = None

    # hooks used by CrudRouter
    prepare_create: Any = None
    prepare_update: Any = None
    validate: Any = None
    post_create: Any = None
    post_update: Any = None
    pre_delete: Any = None

    @classmethod
    def permission_target(cls):
        return cls.permission_key if cls.permission_key is not None else cls.model

class BaseEntityList(BaseModel):
    id: str
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Update timestamp")

    model_config = ConfigDict(from_attributes=True)

class BaseEntityGet(BaseEntityList):
    pass
