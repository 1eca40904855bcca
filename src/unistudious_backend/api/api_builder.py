from fastapi import APIRouter, Depends, FastAPI, Response, status
from sqlalchemy.orm import Session
from typing import Annotated, Optional
from unistudious_backend.api.crud import create_db, get_id_db, list_db, update_db, delete_db
from unistudious_backend.permissions.auth import get_current_permissions
from unistudious_backend.database import get_db
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.interface.base import EntityInterface, Result

class CrudRouter:

    id_type = "id"

    path: str
    dto: EntityInterface

    def __init__(self, dto, endpoint: Optional[str] = None, exclude: Optional[list[str]] = None):
        self.dto = dto
        if endpoint == None:
            self.path = self.dto.endpoint
        else:
            self.path = endpoint

        self.exclude = set(exclude or [])

        self.prepare_create = dto.prepare_create
        self.prepare_update = dto.prepare_update
        self.validate = dto.validate
        self.post_create = dto.post_create
        self.post_update = dto.post_update
        self.pre_delete = dto.pre_delete

        self.router = APIRouter()

    def create(self):
        prepare_create = self.prepare_create
        post_create = self.post_create

        async def route(permissions: Annotated[Principal, Depends(get_current_permissions)], entity: self.dto.create, db: Session = Depends(get_db)) -> Result[self.dto.get]:
            if prepare_create != None:
                values = prepare_create(entity, permissions, db)
            else:
                values = entity

            entity_created = await create_db(permissions, db, values, self.dto.model, self.dto.get, post_create, self.dto.permission_key)

            return Result.ok(entity_created)
        return route

    def get(self):
        async def route(permissions: Annotated[Principal, Depends(get_current_permissions)], id: str, db: Session = Depends(get_db)) -> Result[self.dto.get]:
            return Result.ok(await get_id_db(permissions, db, id, self.dto))
        return route

    def list(self):
        async def route(permissions: Annotated[Principal, Depends(get_current_permissions)], response: Response, params: self.dto.query = Depends(), db: Session = Depends(get_db)) -> Result[list[self.dto.list]]:
            list_result, total = await list_db(permissions, db, params, self.dto)
            response.headers["X-Total-Count"] = str(total)
            return Result.ok(list_result)
        return route

    def update(self):
        prepare_update = self.prepare_update
        validate = self.validate
        post_update = self.post_update

        async def route(permissions: Annotated[Principal, Depends(get_current_permissions)], id: str, entity: self.dto.update, db: Session = Depends(get_db)) -> Result[self.dto.get]:
            if prepare_update != None:
                values = prepare_update(entity, permissions, db)
            else:
                values = entity

            entity_updated = update_db(permissions, db, id, values, self.dto.model, self.dto.get, None, post_update, validate, permission_key=self.dto.permission_key)

            return Result.ok(entity_updated)
        return route

    def delete(self):
        pre_delete = self.pre_delete

        async def route(permissions: Annotated[Principal, Depends(get_current_permissions)], id: str, db: Session = Depends(get_db)) -> Result[dict]:
            delete_db(permissions, db, id, self.dto.model, pre_delete, self.dto.permission_key)
            return Result.ok({"id": id})
        return route

    def register_routes(self, app: FastAPI, prefix: str = "/api"):

        scope_name = self.path.replace("/","").replace("_"," ")

        if "create" not in self.exclude:
            self.router.add_api_route("", self.create(), methods=["POST"],
                        status_code=status.HTTP_201_CREATED, name=f"create {scope_name}")
        if "get" not in self.exclude:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.get(), methods=["GET"],
                        status_code=status.HTTP_200_OK, name=f"get {scope_name}")
        if "list" not in self.exclude:
            self.router.add_api_route("", self.list(), methods=["GET"],
                        status_code=status.HTTP_200_OK, name=f"list {scope_name}")
        if "update" not in self.exclude:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.update(), methods=["PUT"],
                        status_code=status.HTTP_200_OK, name=f"update {scope_name}")
        if "delete" not in self.exclude:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.delete(), methods=["DELETE"],
                        status_code=status.HTTP_200_OK, name=f"delete {scope_name}")

        app.include_router(
            self.router,
            prefix=f"{prefix}/{self.path}",
            tags=[scope_name]
        )

        return self
