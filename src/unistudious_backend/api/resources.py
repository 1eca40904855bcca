from sqlalchemy.orm import Session

from unistudious_backend.api.api_builder import CrudRouter
from unistudious_backend.api.exceptions import ForbiddenException
from unistudious_backend.interface.resources import ResourceCreate, ResourceInterface, ResourceUpdate
from unistudious_backend.model.resource import Resource
from unistudious_backend.permissions.principal import Principal

resource_router = CrudRouter(ResourceInterface)


def prepare_resource_create(entity: ResourceCreate, permissions: Principal, db: Session) -> dict:
    model_dump = entity.model_dump()

    if permissions.is_professor:
        model_dump["uploaded_by_professor_id"] = permissions.user_id
    else:
        model_dump["uploaded_by_user_id"] = permissions.user_id

    return model_dump


def prepare_resource_update(entity: ResourceUpdate, permissions: Principal, db: Session) -> dict:
    model_dump = entity.model_dump(exclude_unset=True)

    course_id = model_dump.get("course_id")
    if course_id is not None and not permissions.is_admin and not permissions.teaches(course_id):
        raise ForbiddenException(detail={"entity": Resource.__tablename__, "course_id": course_id})

    return model_dump


resource_router.prepare_create = prepare_resource_create
resource_router.prepare_update = prepare_resource_update
