import logging
from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from unistudious_backend.api.auth import issue_token, register_user
from unistudious_backend.api.crud import delete_db, list_db, update_db
from unistudious_backend.api.exceptions import NotFoundException, UnauthorizedException
from unistudious_backend.database import get_db
from unistudious_backend.interface.auth import LoginRequest, TokenResponse
from unistudious_backend.interface.base import Result
from unistudious_backend.interface.profs import ProfessorInterface, ProfessorQuery, ProfessorUpdate
from unistudious_backend.interface.users import ProfessorRegister, UserGet, UserList
from unistudious_backend.model.auth import User
from unistudious_backend.permissions.auth import AuthenticationService, get_current_permissions
from unistudious_backend.permissions.core import PROFESSOR_DIRECTORY, authorize, check_permissions
from unistudious_backend.permissions.policy import PROFESSOR
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.services.accounts import apply_academic_profile, ensure_email_available, ensure_username_available
from unistudious_backend.services.cascade import delete_user_dependents

logger = logging.getLogger(__name__)

profs_router = APIRouter()


def load_professor(db: Session, id: str) -> User:
    """Directory lookup: only professor records are addressable here"""
    professor = db.query(User).filter(User.id == id, User.role == PROFESSOR).first()

    if professor is None:
        raise NotFoundException(detail=f"Professor with id [{id}] not found")

    return professor


@profs_router.post("", response_model=Result[TokenResponse], status_code=status.HTTP_201_CREATED)
async def register_professor(payload: ProfessorRegister, response: Response, db: Session = Depends(get_db)):

    values = payload.model_dump()
    values["role"] = PROFESSOR

    user = register_user(db, values)

    return Result.ok(issue_token(response, user))


@profs_router.post("/login", response_model=Result[TokenResponse])
async def login_professor(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):

    user = AuthenticationService.authenticate_password(payload.email, payload.password, db)

    if user.role != PROFESSOR:
        logger.warning(f"Non-professor {user.id} used the professor login")
        raise UnauthorizedException("Invalid credentials")

    return Result.ok(issue_token(response, user))


@profs_router.get("", response_model=Result[list[UserList]])
async def list_professors(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    response: Response,
    params: ProfessorQuery = Depends(),
    db: Session = Depends(get_db),
):
    items, total = await list_db(permissions, db, params, ProfessorInterface)
    response.headers["X-Total-Count"] = str(total)
    return Result.ok(items)


@profs_router.get("/{id}", response_model=Result[UserGet])
async def get_professor(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    professor = check_permissions(permissions, PROFESSOR_DIRECTORY, "get", db).filter(User.id == id).first()

    if professor is None:
        raise NotFoundException(detail=f"Professor with id [{id}] not found")

    authorize(permissions, PROFESSOR_DIRECTORY, "get", professor)

    return Result.ok(UserGet.model_validate(professor, from_attributes=True))


@profs_router.put("/{id}", response_model=Result[UserGet])
async def update_professor(
    id: str,
    payload: ProfessorUpdate,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    professor = load_professor(db, id)

    authorize(permissions, PROFESSOR_DIRECTORY, "update", professor)

    values = payload.model_dump(exclude_unset=True)

    if values.get("email") is not None:
        ensure_email_available(db, values["email"], exclude_id=professor.id)
    if values.get("username") is not None:
        ensure_username_available(db, values["username"], exclude_id=professor.id)

    updated = update_db(permissions, db, id, values, User, UserGet, db_item=professor, validate=apply_academic_profile, permission_key=PROFESSOR_DIRECTORY)

    return Result.ok(updated)


@profs_router.delete("/{id}", response_model=Result[dict])
async def delete_professor(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    professor = load_professor(db, id)

    delete_db(permissions, db, id, User, delete_user_dependents, PROFESSOR_DIRECTORY, db_item=professor)

    return Result.ok({"id": id})
