from __future__ import annotations

from fastapi import APIRouter, Depends

from tasklink.api.v1.deps import get_server_model
from tasklink.schemas.tasks import TaskUrlOut
from tasklink.services.server_model import ServerModel

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/{task_id}/url", response_model=TaskUrlOut)
async def get_task_url(task_id: str, model: ServerModel = Depends(get_server_model)) -> TaskUrlOut:
    return TaskUrlOut(task_id=task_id, url=model.task_view_url({"id": task_id}))
