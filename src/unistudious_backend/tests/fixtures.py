from unistudious_backend.model.auth import User
from unistudious_backend.permissions.auth import create_access_token
from unistudious_backend.permissions.principal import CourseClaims, Principal

DEFAULT_PASSWORD = "secret123"


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


def make_principal(role: str, user_id: str = "user-1", taught=(), enrolled=()) -> Principal:
    return Principal(
        user_id=user_id,
        role=role,
        courses=CourseClaims(taught=set(taught), enrolled=set(enrolled))
    )


def data(response) -> dict:
    body = response.json()
    assert body["success"] is True, body
    assert body["error"] is None
    return body["data"]


def error(response) -> dict:
    body = response.json()
    assert body["success"] is False, body
    assert body["data"] is None
    assert body["error"]["code"] == response.status_code
    return body["error"]
