from pydantic import ConfigDict, Field, EmailStr
from typing import Optional
from sqlalchemy.orm import Session
from unistudious_backend.interface.base import EntityInterface, ListQuery
from unistudious_backend.interface.users import SpecialityEnum, UserGet, UserList, UserFieldsBase
from unistudious_backend.model.auth import User
from unistudious_backend.permissions.core import PROFESSOR_DIRECTORY

class ProfessorUpdate(UserFieldsBase):
    given_name: Optional[str] = Field(None, min_length=1, max_length=255)
    family_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    speciality: Optional[SpecialityEnum] = None
    department: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True, extra='forbid')

class ProfessorQuery(ListQuery):
    speciality: Optional[SpecialityEnum] = None
    department: Optional[str] = None
    name: Optional[str] = None

def professor_search(db: Session, query, params: Optional[ProfessorQuery]):
    if params.speciality != None:
        query = query.filter(User.speciality == params.speciality.value)
    if params.department != None:
        query = query.filter(User.department == params.department)
    if params.name != None:
        pattern = f"%{params.name}%"
        query = query.filter((User.given_name.ilike(pattern)) | (User.family_name.ilike(pattern)))
    return query.order_by(User.family_name, User.given_name)

class ProfessorInterface(EntityInterface):
    get = UserGet
    list = UserList
    update = ProfessorUpdate
    query = ProfessorQuery
    search = professor_search
    endpoint = "profs"
    model = User
    permission_key = PROFESSOR_DIRECTORY
