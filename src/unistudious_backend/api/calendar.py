from sqlalchemy.orm import Session

from unistudious_backend.api.api_builder import CrudRouter
from unistudious_backend.api.exceptions import ForbiddenException
from unistudious_backend.interface.calendar_events import CalendarEventCreate, CalendarEventInterface, CalendarEventUpdate, check_event_window
from unistudious_backend.model.calendar import CalendarEvent
from unistudious_backend.permissions.principal import Principal

calendar_router = CrudRouter(CalendarEventInterface)


def prepare_event_create(entity: CalendarEventCreate, permissions: Principal, db: Session) -> dict:
    model_dump = entity.model_dump()
    model_dump["owner_id"] = permissions.user_id
    return model_dump


def prepare_event_update(entity: CalendarEventUpdate, permissions: Principal, db: Session) -> dict:
    model_dump = entity.model_dump(exclude_unset=True)

    course_id = model_dump.get("course_id")
    if course_id is not None and not permissions.is_admin and not permissions.teaches(course_id):
        raise ForbiddenException(detail={"entity": CalendarEvent.__tablename__, "course_id": course_id})

    return model_dump


def validate_event(event: CalendarEvent):
    check_event_window(event.start, event.end)


calendar_router.prepare_create = prepare_event_create
calendar_router.prepare_update = prepare_event_update
calendar_router.validate = validate_event
