from fastapi import APIRouter

from tasklink.api.v1.logs import router as logs_router
from tasklink.api.v1.options import router as options_router
from tasklink.api.v1.session import router as session_router
from tasklink.api.v1.tasks import router as tasks_router
from tasklink.api.v1.users import router as users_router
from tasklink.api.v1.workspaces import router as workspaces_router

api_router = APIRouter()
api_router.include_router(options_router)
api_router.include_router(session_router)
api_router.include_router(users_router)
api_router.include_router(workspaces_router)
api_router.include_router(tasks_router)
api_router.include_router(logs_router)
