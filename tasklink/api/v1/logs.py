from __future__ import annotations

from fastapi import APIRouter, Depends, status

from tasklink.api.v1.deps import get_server_model
from tasklink.schemas.tasks import LogEventIn
from tasklink.services.server_model import ServerModel

router = APIRouter(prefix="/logs", tags=["logs"])


@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def post_log_event(payload: LogEventIn, model: ServerModel = Depends(get_server_model)) -> dict[str, str]:
    model.log_event(payload.model_dump())
    return {"status": "accepted"}
