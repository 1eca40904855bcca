import logging
from enum import Enum
from typing import Any, Callable, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
from sqlalchemy import exc
from unistudious_backend.api.exceptions import BadRequestException, NotFoundException, InternalServerException
from unistudious_backend.permissions.core import check_permissions, authorize
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.interface.base import EntityInterface, ListQuery

logger = logging.getLogger(__name__)

def _clean_integrity_error(e: exc.IntegrityError) -> str:
    error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
    if 'DETAIL:' in error_msg:
        main_error = error_msg.split('\n')[0]
        detail_part = error_msg.split('DETAIL:')[1].split('\n')[0].strip()
        return f"{main_error}. {detail_part}"
    return error_msg.split('\n')[0]

def _dump(entity: Any) -> dict:
    if isinstance(entity, BaseModel):
        return entity.model_dump(exclude_unset=True)
    return dict(entity or {})

def load_db(db: Session, db_type: Any, id: str):
    """Fetch a record by primary key or raise NotFound"""
    item = db.get(db_type, str(id))
    if item is None:
        raise NotFoundException(detail=f"{db_type.__name__} with id [{id}] not found")
    return item

async def create_db(permissions: Principal, db: Session, entity: BaseModel | dict, db_type: Any, response_type: BaseModel, post_create: Callable = None, permission_key: Any = None):

    model_dump = _dump(entity)

    # Build a simple context dict of *_id keys for handler use
    context = {k: str(v) for k, v in model_dump.items() if k.endswith("_id") and v is not None}

    authorize(permissions, permission_key or db_type, "create", None, context)

    try:
        db_item = db_type(**model_dump)

        db.add(db_item)
        db.flush()

        # runs inside the same transaction as the insert
        if post_create != None:
            post_create(db_item, db)

        db.commit()
        db.refresh(db_item)

        return response_type.model_validate(db_item, from_attributes=True)

    except exc.IntegrityError as e:
        db.rollback()
        raise BadRequestException(detail=_clean_integrity_error(e))

    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error(f"SQLAlchemyError in create_db: {e}")
        raise InternalServerException(detail="An unexpected database error occurred while creating.")

    except Exception:
        db.rollback()
        raise

async def get_id_db(permissions: Principal, db: Session, id: str, interface: EntityInterface, scope: str = "get"):

    db_type = interface.model

    item = load_db(db, db_type, id)

    authorize(permissions, interface.permission_target(), scope, item)

    return interface.get.model_validate(item, from_attributes=True)

async def list_db(permissions: Principal, db: Session, params: ListQuery, interface: EntityInterface):

    query_func = interface.search

    query = check_permissions(permissions, interface.permission_target(), "list", db)

    if query_func != None:
        query = query_func(db, query, params)

    total = query.order_by(None).count()

    if params.limit != None:
        query = query.limit(params.limit)
    if params.skip != None:
        query = query.offset(params.skip)

    query_result = [interface.list.model_validate(entity, from_attributes=True) for entity in query.all()]

    return query_result, total

def update_db(permissions: Principal, db: Session, id: str | None, entity: Any, db_type: Any, response_type: BaseModel, db_item = None, post_update: Callable = None, validate: Optional[Callable] = None, action: str = "update", permission_key: Any = None):

    if db_item == None:
        db_item = load_db(db, db_type, id)

    authorize(permissions, permission_key or db_type, action, db_item)

    entity = _dump(entity)

    try:
        for key in entity.keys():
            attr = entity.get(key)
            if isinstance(attr, Enum):
                attr = attr.value
            setattr(db_item, key, attr)

        # invariants are checked on the merged record
        if validate != None:
            validate(db_item)

        db.commit()
        db.refresh(db_item)

        if post_update != None:
            post_update(db_item, db)

        return response_type.model_validate(db_item, from_attributes=True)

    except ValueError as e:
        db.rollback()
        raise BadRequestException(detail=str(e))

    except exc.IntegrityError as e:
        db.rollback()
        raise BadRequestException(detail=_clean_integrity_error(e))

    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error(f"SQLAlchemyError in update_db: {e}")
        raise InternalServerException(detail="An unexpected database error occurred while updating.")

def delete_db(permissions: Principal, db: Session, id: str, db_type: Any, pre_delete: Callable = None, permission_key: Any = None, db_item = None):

    entity = db_item if db_item != None else load_db(db, db_type, id)

    authorize(permissions, permission_key or db_type, "delete", entity)

    try:
        # dependents are removed in the same transaction
        if pre_delete != None:
            pre_delete(entity, db)

        db.delete(entity)
        db.commit()
    except exc.IntegrityError as e:
        db.rollback()
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
        logger.warning(f"Integrity error deleting {db_type.__tablename__}: {error_msg}")
        raise BadRequestException(
            detail=f"Cannot delete this {db_type.__tablename__.replace('_', ' ')} because other records depend on it. Please remove all references to this item first."
        )
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error(f"SQLAlchemyError in delete_db: {e}")
        raise InternalServerException(detail="An unexpected database error occurred while deleting.")
    except Exception:
        db.rollback()
        raise

    return {"ok": True}
