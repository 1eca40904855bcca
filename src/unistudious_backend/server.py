import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unistudious_backend.api.auth import auth_router
from unistudious_backend.api.calendar import calendar_router
from unistudious_backend.api.courses import course_router
from unistudious_backend.api.dashboard import dashboard_router
from unistudious_backend.api.exceptions import register_exception_handlers
from unistudious_backend.api.notifications import notification_router
from unistudious_backend.api.profs import profs_router
from unistudious_backend.api.resources import resource_router
from unistudious_backend.api.users import user_router
from unistudious_backend.database import get_db, init_db
from unistudious_backend.services.provisioning import ProvisioningError, init_admin_user
from unistudious_backend.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

async def startup_logic():

    init_db()

    with next(get_db()) as db:
        try:
            init_admin_user(db)
        except ProvisioningError as e:
            logger.warning(f"Administrator not provisioned: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):

    if settings.DEBUG_MODE == "production":
        await startup_logic()
    else:
        init_db()

    yield

app = FastAPI(title="Unistudious", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)

register_exception_handlers(app)

# account routes share the /api/users prefix and must win over /{id}
app.include_router(
    auth_router,
    prefix="/api/users",
    tags=["users", "auth"]
)

user_router.register_routes(app)

app.include_router(
    profs_router,
    prefix="/api/profs",
    tags=["profs"]
)

course_router.register_routes(app)
calendar_router.register_routes(app)
resource_router.register_routes(app)
notification_router.register_routes(app)

app.include_router(
    dashboard_router,
    prefix="/api/dashboard",
    tags=["dashboard"]
)

@app.head("/", status_code=204)
def get_status_head():
    return
