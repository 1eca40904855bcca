from pydantic import BaseModel, EmailStr, Field, field_validator
from unistudious_backend.interface.users import UserGet

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.lower()

class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserGet
