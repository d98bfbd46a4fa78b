from __future__ import annotations

import asyncio
from typing import Any, Callable

from fastapi import HTTPException, Request

from tasklink.services.api_bridge import RequestHandle
from tasklink.services.dispatch import Payload
from tasklink.services.server_model import ServerModel

StartCall = Callable[[Callable[[Any], None], Callable[[Payload], None]], RequestHandle]


def get_server_model(request: Request) -> ServerModel:
    model = getattr(request.app.state, "server_model", None)
    if model is None:
        raise HTTPException(status_code=503, detail="Server model is not ready")
    return model


async def await_response(start: StartCall) -> Any:
    """Run a callback-style ServerModel call and wait for its outcome."""
    future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

    def on_success(data: Any) -> None:
        if not future.done():
            future.set_result(data)

    def on_error(response: Payload) -> None:
        if not future.done():
            future.set_exception(HTTPException(status_code=502, detail=response.get("errors") or []))

    handle = start(on_success, on_error)
    try:
        return await future
    except asyncio.CancelledError:
        handle.abort()
        raise
