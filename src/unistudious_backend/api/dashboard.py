from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from unistudious_backend.api.exceptions import ForbiddenException
from unistudious_backend.database import get_db
from unistudious_backend.interface.base import Result
from unistudious_backend.interface.dashboard import ActivityItem, ActivityQuery, AdminStats, ProfessorStats
from unistudious_backend.permissions.auth import get_current_permissions
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.services.dashboard import admin_stats, professor_stats, recent_activity

dashboard_router = APIRouter()


def require_dashboard(permissions: Principal, action: str):
    if not permissions.permitted("dashboard", action):
        raise ForbiddenException(detail={"entity": "dashboard", "action": action})


@dashboard_router.get("/admin", response_model=Result[AdminStats])
async def get_admin_stats(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    require_dashboard(permissions, "admin")
    return Result.ok(admin_stats(db))


@dashboard_router.get("/prof", response_model=Result[ProfessorStats])
async def get_professor_stats(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    db: Session = Depends(get_db),
):
    require_dashboard(permissions, "professor")
    return Result.ok(professor_stats(permissions.user_id, db))


@dashboard_router.get("/activity", response_model=Result[list[ActivityItem]])
async def get_recent_activity(
    permissions: Annotated[Principal, Depends(get_current_permissions)],
    params: ActivityQuery = Depends(),
    db: Session = Depends(get_db),
):
    require_dashboard(permissions, "activity")
    return Result.ok(recent_activity(db, params.limit))
