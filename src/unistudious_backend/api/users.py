from sqlalchemy.orm import Session, object_session

from unistudious_backend.api.api_builder import CrudRouter
from unistudious_backend.interface.tokens import encrypt_secret
from unistudious_backend.interface.users import UserCreate, UserInterface, UserUpdate
from unistudious_backend.model.auth import User
from unistudious_backend.permissions.core import authorize
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.services.accounts import apply_academic_profile, check_role_change, ensure_email_available, ensure_username_available, unique_username
from unistudious_backend.services.cascade import delete_user_dependents

user_router = CrudRouter(UserInterface)


def prepare_user_create(entity: UserCreate, permissions: Principal, db: Session) -> dict:
    authorize(permissions, User, "create")

    model_dump = entity.model_dump()

    ensure_email_available(db, model_dump["email"])
    model_dump["username"] = unique_username(db, model_dump["given_name"], model_dump["family_name"], model_dump.get("username"))
    model_dump["password"] = encrypt_secret(model_dump["password"])

    return model_dump


def prepare_user_update(entity: UserUpdate, permissions: Principal, db: Session) -> dict:
    model_dump = entity.model_dump(exclude_unset=True)

    if model_dump.get("password") is not None:
        model_dump["password"] = encrypt_secret(model_dump["password"])

    return model_dump


def validate_user(user: User):
    db = object_session(user)

    ensure_email_available(db, user.email, exclude_id=user.id)
    if user.username:
        ensure_username_available(db, user.username, exclude_id=user.id)

    apply_academic_profile(user)
    check_role_change(user, db)


user_router.prepare_create = prepare_user_create
user_router.prepare_update = prepare_user_update
user_router.validate = validate_user
user_router.pre_delete = delete_user_dependents
