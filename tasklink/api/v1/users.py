from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from tasklink.api.v1.deps import await_response, get_server_model
from tasklink.services.server_model import ServerModel

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
async def get_me(
    fresh: bool = Query(default=False),
    model: ServerModel = Depends(get_server_model),
) -> dict[str, Any]:
    user = await await_response(lambda ok, err: model.me(ok, err, miss_cache=fresh))
    return user.model_dump()
