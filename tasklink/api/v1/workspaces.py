from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from tasklink.api.v1.deps import await_response, get_server_model
from tasklink.schemas.tasks import TaskCreate
from tasklink.schemas.user import DirectoryOut, UserOut
from tasklink.services.patterns import build_pattern
from tasklink.services.server_model import ServerModel

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get("")
async def list_workspaces(
    fresh: bool = Query(default=False),
    model: ServerModel = Depends(get_server_model),
) -> list[dict[str, Any]]:
    return await await_response(lambda ok, err: model.workspaces(ok, err, miss_cache=fresh))


@router.get("/{workspace_id}/users", response_model=list[UserOut])
async def list_users(
    workspace_id: str,
    fresh: bool = Query(default=False),
    model: ServerModel = Depends(get_server_model),
) -> list[UserOut]:
    users = await await_response(lambda ok, err: model.users(workspace_id, ok, err, miss_cache=fresh))
    return [UserOut.from_user(u) for u in users]


@router.get("/{workspace_id}/directory", response_model=DirectoryOut)
async def read_directory(
    workspace_id: str,
    q: str = Query(default="", max_length=200),
    model: ServerModel = Depends(get_server_model),
) -> DirectoryOut:
    users = model.directory.filter(workspace_id, build_pattern(q))
    return DirectoryOut(workspace_id=workspace_id, query=q, users=[UserOut.from_user(u) for u in users])


@router.post("/{workspace_id}/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    workspace_id: str,
    payload: TaskCreate,
    model: ServerModel = Depends(get_server_model),
) -> dict[str, Any]:
    task = payload.model_dump(exclude_none=True)
    return await await_response(lambda ok, err: model.create_task(workspace_id, task, ok, err))
