from __future__ import annotations

from fastapi import APIRouter, Depends

from tasklink.api.v1.deps import get_server_model
from tasklink.schemas.tasks import SessionOut
from tasklink.services.server_model import ServerModel

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionOut)
async def get_session(model: ServerModel = Depends(get_server_model)) -> SessionOut:
    return SessionOut(logged_in=model.is_logged_in())
