from typing import Optional, Set
from pydantic import BaseModel, Field, model_validator
from unistudious_backend.api.exceptions import NotFoundException
from unistudious_backend.permissions.policy import ADMIN, PROFESSOR, permitted_roles


class CourseClaims(BaseModel):
    """Course memberships of a principal, loaded once per request"""
    taught: Set[str] = Field(default_factory=set)
    enrolled: Set[str] = Field(default_factory=set)


class Principal(BaseModel):
    """Authenticated actor resolved from a credential and its user record"""

    is_admin: bool = False
    user_id: Optional[str] = None
    role: Optional[str] = None

    courses: CourseClaims = Field(default_factory=CourseClaims)

    @model_validator(mode='after')
    def set_is_admin_from_role(self):
        """Admin flag is derived from the role, never set independently"""
        self.is_admin = self.role == ADMIN
        return self

    @property
    def is_professor(self) -> bool:
        return self.role == PROFESSOR

    def get_user_id_or_throw(self) -> str:
        """Get user ID or raise exception"""
        if self.user_id is None:
            raise NotFoundException("User ID not found")
        return self.user_id

    def permitted(self, resource: str, action: str) -> bool:
        """Check the role policy table for resource and action"""
        if self.is_admin:
            return True
        return self.role in permitted_roles(resource, action)

    def owns(self, owner_id: Optional[str]) -> bool:
        return owner_id is not None and self.user_id is not None and str(owner_id) == str(self.user_id)

    def teaches(self, course_id: Optional[str]) -> bool:
        return course_id is not None and str(course_id) in self.courses.taught

    def enrolled_in(self, course_id: Optional[str]) -> bool:
        return course_id is not None and str(course_id) in self.courses.enrolled

    def member_of(self, course_id: Optional[str]) -> bool:
        return self.teaches(course_id) or self.enrolled_in(course_id)
