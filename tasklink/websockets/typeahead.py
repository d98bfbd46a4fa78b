from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from tasklink.schemas.user import User, UserOut
from tasklink.services.dispatch import Payload

logger = logging.getLogger(__name__)

typeahead_ws_router = APIRouter(tags=["ws-typeahead"])


def _users_message(kind: str, workspace_id: str, query: str, users: list[User]) -> dict[str, Any]:
    return {
        "type": kind,
        "workspace_id": workspace_id,
        "query": query,
        "users": [UserOut.from_user(u).model_dump() for u in users],
    }


async def _drain(websocket: WebSocket, outbox: asyncio.Queue[dict[str, Any]]) -> None:
    while True:
        message = await outbox.get()
        await websocket.send_json(message)


@typeahead_ws_router.websocket("/typeahead/{workspace_id}")
async def ws_user_typeahead(websocket: WebSocket, workspace_id: str) -> None:
    await websocket.accept()

    model = getattr(websocket.app.state, "server_model", None)
    if model is None:
        await websocket.close(code=1013)
        return

    outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
    sender_task = asyncio.create_task(_drain(websocket, outbox))

    try:
        while True:
            msg = await websocket.receive_text()
            if msg.lower().strip() == "ping":
                outbox.put_nowait({"type": "pong"})
                continue

            query = msg

            def on_users(users: list[User], query: str = query) -> None:
                outbox.put_nowait(_users_message("typeahead.refined", workspace_id, query, users))

            def on_error(response: Payload, query: str = query) -> None:
                outbox.put_nowait(
                    {
                        "type": "typeahead.error",
                        "workspace_id": workspace_id,
                        "query": query,
                        "errors": response.get("errors") or [],
                    }
                )

            cached = model.user_typeahead(workspace_id, query, on_users, on_error)
            outbox.put_nowait(_users_message("typeahead.cached", workspace_id, query, cached))

    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Type-ahead socket for workspace %s failed", workspace_id)
        await websocket.close(code=1011)
    finally:
        sender_task.cancel()
