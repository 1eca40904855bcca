import logging
from typing import Annotated
from fastapi import Depends, status
from sqlalchemy import exc
from sqlalchemy.orm import Session

from unistudious_backend.api.api_builder import CrudRouter
from unistudious_backend.api.crud import load_db
from unistudious_backend.api.exceptions import BadRequestException, InternalServerException
from unistudious_backend.database import get_db
from unistudious_backend.interface.base import Result
from unistudious_backend.interface.notifications import NotificationCreate, NotificationGet, NotificationInterface
from unistudious_backend.model.auth import User
from unistudious_backend.model.notification import Notification
from unistudious_backend.permissions.auth import get_current_permissions
from unistudious_backend.permissions.core import authorize
from unistudious_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)

notification_router = CrudRouter(NotificationInterface, exclude=["create", "update"])


@notification_router.router.post("", response_model=Result[list[NotificationGet]], status_code=status.HTTP_201_CREATED)
async def create_notification(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    payload: NotificationCreate,
    db: Session = Depends(get_db),
):
    authorize(permissions, Notification, "create", None, {"related_course_id": payload.related_course_id} if payload.related_course_id else None)

    found = {row[0] for row in db.query(User.id).filter(User.id.in_(payload.recipients)).all()}
    missing = [r for r in payload.recipients if r not in found]

    if missing:
        raise BadRequestException(detail={"message": "Unknown recipients", "invalid": missing})

    # one row per recipient, sender_id is always the current user
    notifications = [
        Notification(
            title=payload.title,
            link=payload.link,
            type=payload.type,
            related_course_id=payload.related_course_id,
            recipient_id=recipient_id,
            sender_id=permissions.user_id,
        )
        for recipient_id in payload.recipients
    ]

    try:
        db.add_all(notifications)
        db.commit()
    except exc.IntegrityError as e:
        db.rollback()
        raise BadRequestException(detail=str(e.orig) if hasattr(e, 'orig') else str(e))
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Creating notifications failed: {e}")
        raise InternalServerException(detail="An unexpected database error occurred while creating.")

    for notification in notifications:
        db.refresh(notification)

    logger.info(f"Notification sent by {permissions.user_id} to {len(notifications)} recipient(s)")

    return Result.ok([NotificationGet.model_validate(n, from_attributes=True) for n in notifications])


@notification_router.router.put("/{id}/read", response_model=Result[NotificationGet])
async def mark_notification_read(
    id: str,
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    notification = load_db(db, Notification, id)

    authorize(permissions, Notification, "mark_read", notification)

    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)

    return Result.ok(NotificationGet.model_validate(notification, from_attributes=True))
