from __future__ import annotations

from fastapi import APIRouter, Depends

from tasklink.api.v1.deps import get_server_model
from tasklink.schemas.options import ExtensionOptions, OptionsPatch
from tasklink.services.server_model import ServerModel

router = APIRouter(prefix="/options", tags=["options"])


@router.get("", response_model=ExtensionOptions)
async def get_options(model: ServerModel = Depends(get_server_model)) -> ExtensionOptions:
    return model.options()


@router.put("", response_model=ExtensionOptions)
async def put_options(
    payload: OptionsPatch,
    model: ServerModel = Depends(get_server_model),
) -> ExtensionOptions:
    return model.options_store.update_options(payload.model_dump())


@router.delete("", response_model=ExtensionOptions)
async def reset_options(model: ServerModel = Depends(get_server_model)) -> ExtensionOptions:
    return model.options_store.reset_options()
