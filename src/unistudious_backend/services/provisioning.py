"""
Provisioning of the administrator account.

The administrator is an ordinary user row with role ``admin``. Its
credentials come from configuration, never from code.
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from unistudious_backend.interface.tokens import encrypt_secret
from unistudious_backend.model.auth import User
from unistudious_backend.permissions.policy import ADMIN
from unistudious_backend.settings import settings

logger = logging.getLogger(__name__)


class ProvisioningError(Exception):
    pass


def init_admin_user(db: Session, email: Optional[str] = None, password: Optional[str] = None, username: Optional[str] = None) -> User:
    """Create the administrator account if it does not exist yet.

    Falls back to ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_USERNAME. An existing
    account with the same email is promoted to admin but its password is kept.
    """

    email = (email or settings.ADMIN_EMAIL or "").strip().lower()
    password = password or settings.ADMIN_PASSWORD
    username = username or settings.ADMIN_USERNAME

    if not email or not password:
        raise ProvisioningError("ADMIN_EMAIL and ADMIN_PASSWORD must be set to provision the administrator")

    admin = db.query(User).filter(User.email == email).first()

    if admin != None:
        if admin.role != ADMIN:
            logger.info(f"Promoting existing user {admin.id} to administrator")
            admin.role = ADMIN
            admin.school_level = None
            admin.section = None
            admin.speciality = None
            db.commit()
        return admin

    admin = User(
        given_name="Admin",
        family_name="System",
        username=username,
        email=email,
        password=encrypt_secret(password),
        role=ADMIN
    )

    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.info(f"Administrator account {admin.id} created")

    return admin
