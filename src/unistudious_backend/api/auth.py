"""
Account endpoints mounted under ``/api/users``: registration, login, logout
and self-service profile management.
"""

import logging
from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import exc
from sqlalchemy.orm import Session

from unistudious_backend.api.crud import load_db
from unistudious_backend.api.exceptions import BadRequestException, InternalServerException
from unistudious_backend.database import get_db
from unistudious_backend.interface.auth import LoginRequest, TokenResponse
from unistudious_backend.interface.base import Result
from unistudious_backend.interface.tokens import encrypt_secret, verify_password
from unistudious_backend.interface.users import PasswordChange, ProfileUpdate, StudentRegister, UserGet
from unistudious_backend.model.auth import User
from unistudious_backend.permissions.auth import AuthenticationService, create_access_token, get_current_permissions
from unistudious_backend.permissions.policy import STUDENT
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.services.accounts import apply_academic_profile, ensure_email_available, ensure_username_available, unique_username
from unistudious_backend.settings import settings

logger = logging.getLogger(__name__)

auth_router = APIRouter()


def issue_token(response: Response, user: User) -> TokenResponse:
    """Sign an access token for ``user`` and mirror it into the auth cookie"""

    token = create_access_token(user.id, user.role)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax"
    )

    return TokenResponse(token=token, user=UserGet.model_validate(user, from_attributes=True))


def register_user(db: Session, values: dict) -> User:
    """Insert a self-registered account; email and username must be free"""

    ensure_email_available(db, values["email"])
    values["username"] = unique_username(db, values["given_name"], values["family_name"], values.get("username"))
    values["password"] = encrypt_secret(values["password"])

    user = User(**values)

    try:
        db.add(user)
        db.commit()
    except exc.IntegrityError as e:
        db.rollback()
        raise BadRequestException(detail=str(e.orig) if hasattr(e, 'orig') else str(e))
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Registration failed: {e}")
        raise InternalServerException(detail="An unexpected database error occurred while registering.")

    db.refresh(user)

    logger.info(f"Registered {user.role} {user.id}")

    return user


@auth_router.post("/register", response_model=Result[TokenResponse], status_code=status.HTTP_201_CREATED)
async def register_student(payload: StudentRegister, response: Response, db: Session = Depends(get_db)):

    values = payload.model_dump()
    values["role"] = STUDENT

    user = register_user(db, values)

    return Result.ok(issue_token(response, user))


@auth_router.post("/login", response_model=Result[TokenResponse])
async def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):

    user = AuthenticationService.authenticate_password(payload.email, payload.password, db)

    return Result.ok(issue_token(response, user))


@auth_router.post("/logout", response_model=Result[dict])
async def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return Result.ok({"logged_out": True})


@auth_router.get("/me", response_model=Result[UserGet])
async def get_me(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    user = load_db(db, User, permissions.get_user_id_or_throw())
    return Result.ok(UserGet.model_validate(user, from_attributes=True))


@auth_router.put("/profile", response_model=Result[UserGet])
async def update_profile(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
):
    user = load_db(db, User, permissions.get_user_id_or_throw())

    values = payload.model_dump(exclude_unset=True)

    if values.get("email") is not None:
        ensure_email_available(db, values["email"], exclude_id=user.id)
    if values.get("username") is not None:
        ensure_username_available(db, values["username"], exclude_id=user.id)

    for key, value in values.items():
        setattr(user, key, value)

    try:
        # the role never changes here, academic fields follow it
        apply_academic_profile(user)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise BadRequestException(detail=str(e))
    except exc.IntegrityError as e:
        db.rollback()
        raise BadRequestException(detail=str(e.orig) if hasattr(e, 'orig') else str(e))

    db.refresh(user)

    return Result.ok(UserGet.model_validate(user, from_attributes=True))


@auth_router.put("/security", response_model=Result[dict])
async def change_password(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: PasswordChange,
    db: Session = Depends(get_db),
):
    user = load_db(db, User, permissions.get_user_id_or_throw())

    if not verify_password(payload.current_password, user.password):
        raise BadRequestException(detail="Current password is incorrect")

    user.password = encrypt_secret(payload.new_password)
    db.commit()

    logger.info(f"Password changed for user {user.id}")

    return Result.ok({"updated": True})
