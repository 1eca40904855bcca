"""
Identity resolution: credentials to Principal.

A request carries a signed access token either as ``Authorization: Bearer``
header or in the auth cookie. The token only identifies the user; the role is
always read from the user record.
"""

import datetime
import logging
from typing import Annotated, Optional
from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from unistudious_backend.api.exceptions import InternalServerException, UnauthorizedException
from unistudious_backend.database import get_db
from unistudious_backend.interface.tokens import verify_password
from unistudious_backend.model.auth import User
from unistudious_backend.settings import settings

from unistudious_backend.permissions.principal import Principal
from unistudious_backend.permissions.core import db_get_course_claims

logger = logging.getLogger(__name__)

class AuthenticationResult:
    """Result of authentication containing user info and role"""

    def __init__(self, user_id: str, role: str, provider: str = "unknown"):
        self.user_id = user_id
        self.role = role
        self.provider = provider

def _signing_key() -> str:
    if not settings.JWT_SECRET_KEY:
        logger.error("JWT_SECRET_KEY is not configured")
        raise InternalServerException("Authentication is not configured")
    return settings.JWT_SECRET_KEY

def create_access_token(user_id: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """Issue a signed access token for a user"""
    now = datetime.datetime.now(datetime.timezone.utc)
    lifetime = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES

    claims = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + datetime.timedelta(minutes=lifetime),
    }
    return jwt.encode(claims, _signing_key(), algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; raise Unauthorized on any failure"""
    try:
        payload = jwt.decode(token, _signing_key(), algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise UnauthorizedException("Invalid or expired token")

    if not payload.get("sub"):
        raise UnauthorizedException("Invalid token payload")

    return payload

class AuthenticationService:
    """Service for handling the supported authentication methods"""

    @staticmethod
    def authenticate_password(email: str, password: str, db: Session) -> User:
        """Authenticate using email and password"""

        user = db.query(User).filter(User.email == email.lower()).first()

        if user is None or not verify_password(password, user.password):
            logger.warning("Failed login attempt")
            raise UnauthorizedException("Invalid credentials")

        return user

    @staticmethod
    def authenticate_token(token: str, db: Session) -> AuthenticationResult:
        """Authenticate using a bearer access token"""

        payload = decode_access_token(token)

        row = db.query(User.id, User.role).filter(User.id == payload["sub"]).first()

        if row is None:
            logger.warning(f"Token subject {payload['sub']} does not exist")
            raise UnauthorizedException("Invalid credentials")

        return AuthenticationResult(row[0], row[1], "bearer")

class PrincipalBuilder:
    """Builder for creating Principal objects with course claims"""

    @staticmethod
    def build(auth_result: AuthenticationResult, db: Session) -> Principal:
        """Build a Principal from authentication result"""

        return Principal(
            user_id=auth_result.user_id,
            role=auth_result.role,
            courses=db_get_course_claims(auth_result.user_id, db)
        )

def parse_authorization_header(request: Request) -> str:
    """Extract the access token from the Authorization header or the auth cookie"""

    authorization = request.headers.get("Authorization")

    if authorization:
        scheme, param = get_authorization_scheme_param(authorization)

        if scheme.lower() != "bearer" or not param:
            raise UnauthorizedException("Invalid authorization format")

        return param

    token = request.cookies.get(settings.AUTH_COOKIE_NAME)

    if not token:
        raise UnauthorizedException("No authorization provided")

    return token

async def get_current_principal(
    token: Annotated[str, Depends(parse_authorization_header)],
    db: Session = Depends(get_db)
) -> Principal:
    """
    Main dependency for getting the current authenticated principal.
    """

    auth_result = AuthenticationService.authenticate_token(token, db)

    return PrincipalBuilder.build(auth_result, db)

get_current_permissions = get_current_principal
