from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator, model_validator
from typing import Optional
from sqlalchemy.orm import Session
from text_unidecode import unidecode
from unistudious_backend.interface.base import BaseEntityGet, BaseEntityList, EntityInterface, ListQuery
from unistudious_backend.model.auth import User

class RoleEnum(str, Enum):
    student = "student"
    professor = "professor"
    admin = "admin"

class SchoolLevelEnum(str, Enum):
    first_year = "1st year"
    second_year = "2nd year"
    third_year = "3rd year"
    baccalaureate = "Baccalaureate"

class SectionEnum(str, Enum):
    computer_science = "Computer Science"
    science = "Science"
    mathematics = "Mathematics"
    economics = "Economics"
    letters = "Letters"
    technology = "Technology"
    sport = "Sport"

class SpecialityEnum(str, Enum):
    mathematics = "Mathematics"
    physics = "Physics"
    chemistry = "Chemistry"
    biology = "Biology"
    computer_science = "Computer Science"
    french = "French"
    english = "English"
    arabic = "Arabic"
    history = "History"
    geography = "Geography"
    economics = "Economics"
    philosophy = "Philosophy"
    sport = "Sport"
    arts = "Arts"
    music = "Music"

DEFAULT_SECTION = SectionEnum.science.value

def _value(v):
    return v.value if isinstance(v, Enum) else v

def normalize_academic_profile(role, school_level=None, section=None, speciality=None) -> dict:
    """Return the academic fields a user of ``role`` is allowed to carry.

    Students: ``section`` is empty exactly when ``school_level`` is the entry
    level, and defaults to Science for later levels. Professors need a
    speciality. Fields that do not belong to the role are cleared.
    """
    role = _value(role)
    school_level = _value(school_level)
    section = _value(section)
    speciality = _value(speciality)

    if role == RoleEnum.student.value:
        if school_level is None:
            if section is not None:
                raise ValueError("section requires a school level")
        elif school_level == SchoolLevelEnum.first_year.value:
            if section is not None:
                raise ValueError("section must be empty for 1st year students")
        elif section is None:
            section = DEFAULT_SECTION
        return {"school_level": school_level, "section": section, "speciality": None}

    if role == RoleEnum.professor.value:
        if speciality is None:
            raise ValueError("speciality is required for professors")
        return {"school_level": None, "section": None, "speciality": speciality}

    return {"school_level": None, "section": None, "speciality": None}

def replace_special_chars(name: str) -> str:
    return unidecode(name.lower().replace("ö","oe").replace("ä","ae").replace("ü","ue").encode().decode("utf8"))

def username_from_name(given_name: str, family_name: str) -> str:
    given = replace_special_chars(given_name).replace(" ", "")
    family = replace_special_chars(family_name).replace(" ", "")
    return f"{given}.{family}"

class UserFieldsBase(BaseModel):

    @field_validator('username', check_fields=False)
    @classmethod
    def validate_username(cls, v):
        if v is not None:
            if not v.replace('_', '').replace('-', '').replace('.', '').isalnum():
                raise ValueError('Username can only contain alphanumeric characters, underscores, hyphens, and dots')
        return v

    @field_validator('given_name', 'family_name', check_fields=False)
    @classmethod
    def validate_names(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty or only whitespace')
        return v.strip() if v else v

    @field_validator('email', check_fields=False)
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v

class UserCreate(UserFieldsBase):
    given_name: str = Field(min_length=1, max_length=255, description="User's given name")
    family_name: str = Field(min_length=1, max_length=255, description="User's family name")
    email: EmailStr = Field(description="User's email address")
    password: str = Field(min_length=6, max_length=255, description="Plain password, stored encrypted")
    username: Optional[str] = Field(None, min_length=3, max_length=50, description="Unique username")
    role: RoleEnum = Field(RoleEnum.student, description="Principal role")
    school_level: Optional[SchoolLevelEnum] = Field(None, description="Student school level")
    section: Optional[SectionEnum] = Field(None, description="Student section, empty for 1st year")
    speciality: Optional[SpecialityEnum] = Field(None, description="Professor speciality")
    department: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None

    @model_validator(mode='after')
    def check_academic_profile(self):
        fields = normalize_academic_profile(self.role, self.school_level, self.section, self.speciality)
        for key, value in fields.items():
            setattr(self, key, value)
        return self

    model_config = ConfigDict(use_enum_values=True)

class StudentRegister(UserFieldsBase):
    given_name: str = Field(min_length=1, max_length=255)
    family_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=255)
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    school_level: SchoolLevelEnum
    section: Optional[SectionEnum] = None

    @model_validator(mode='after')
    def check_academic_profile(self):
        fields = normalize_academic_profile(RoleEnum.student, self.school_level, self.section)
        self.section = fields["section"]
        return self

    model_config = ConfigDict(use_enum_values=True)

class ProfessorRegister(UserFieldsBase):
    given_name: str = Field(min_length=1, max_length=255)
    family_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=255)
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    speciality: SpecialityEnum
    department: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

class UserGet(BaseEntityGet):
    given_name: Optional[str] = Field(None, description="User's given name")
    family_name: Optional[str] = Field(None, description="User's family name")
    username: Optional[str] = Field(None, description="Unique username")
    email: str = Field(description="User's email address")
    role: RoleEnum = Field(description="Principal role")
    school_level: Optional[str] = None
    section: Optional[str] = None
    speciality: Optional[str] = None
    department: Optional[str] = None
    bio: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class UserList(BaseEntityList):
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    username: Optional[str] = None
    email: str
    role: RoleEnum
    school_level: Optional[str] = None
    section: Optional[str] = None
    speciality: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class UserUpdate(UserFieldsBase):
    given_name: Optional[str] = Field(None, min_length=1, max_length=255)
    family_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    password: Optional[str] = Field(None, min_length=6, max_length=255)
    role: Optional[RoleEnum] = None
    school_level: Optional[SchoolLevelEnum] = None
    section: Optional[SectionEnum] = None
    speciality: Optional[SpecialityEnum] = None
    department: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

class ProfileUpdate(UserFieldsBase):
    """Fields a principal may change on their own account."""
    given_name: Optional[str] = Field(None, min_length=1, max_length=255)
    family_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    school_level: Optional[SchoolLevelEnum] = None
    section: Optional[SectionEnum] = None
    speciality: Optional[SpecialityEnum] = None
    department: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=255)

class UserQuery(ListQuery):
    id: Optional[str] = None
    role: Optional[RoleEnum] = None
    email: Optional[str] = None
    username: Optional[str] = None
    school_level: Optional[SchoolLevelEnum] = None
    section: Optional[SectionEnum] = None
    speciality: Optional[SpecialityEnum] = None

def user_search(db: Session, query, params: Optional[UserQuery]):

    if params.id != None:
        query = query.filter(User.id == params.id)
    if params.role != None:
        query = query.filter(User.role == _value(params.role))
    if params.email != None:
        query = query.filter(User.email == params.email.lower())
    if params.username != None:
        query = query.filter(User.username == params.username)
    if params.school_level != None:
        query = query.filter(User.school_level == _value(params.school_level))
    if params.section != None:
        query = query.filter(User.section == _value(params.section))
    if params.speciality != None:
        query = query.filter(User.speciality == _value(params.speciality))

    return query.order_by(User.created_at.desc())

class UserInterface(EntityInterface):
    create = UserCreate
    get = UserGet
    list = UserList
    update = UserUpdate
    query = UserQuery
    search = user_search
    endpoint = "users"
    model = User
