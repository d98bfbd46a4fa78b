from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Protocol

from pydantic import ValidationError

from tasklink.core.config import settings
from tasklink.schemas.user import User
from tasklink.services.directory import UserDirectory
from tasklink.services.dispatch import ErrorCallback, Payload, ResponseDispatcher
from tasklink.services.patterns import build_pattern

logger = logging.getLogger(__name__)

UsersCallback = Callable[[list[User]], None]


class AbortableRequest(Protocol):
    def abort(self) -> None: ...


class Transport(Protocol):
    """Issues API requests; ``on_response`` runs only after ``request`` has returned."""

    def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        on_response: Callable[[Payload], None],
        options: Mapping[str, Any] | None = None,
    ) -> AbortableRequest: ...


def coerce_users(rows: Any) -> list[User]:
    users: list[User] = []
    if rows is not None and not isinstance(rows, list):
        logger.warning("Expected a list of users, got %s", type(rows).__name__)
        return users
    for row in rows or []:
        try:
            users.append(row if isinstance(row, User) else User.model_validate(row))
        except ValidationError:
            logger.warning("Skipping malformed user record: %r", row)
    return users


class TypeAheadSearch:
    """
    User type-ahead over the local directory, refined by the remote API.

    Each call answers at once from the directory and asks the server for
    better matches. Only the latest call's request is kept in flight; older
    ones are aborted and never call back.
    """

    def __init__(
        self,
        transport: Transport,
        directory: UserDirectory,
        dispatcher: ResponseDispatcher | None = None,
        *,
        count: int | None = None,
        opt_fields: str | None = None,
    ) -> None:
        self.transport = transport
        self.directory = directory
        self.dispatcher = dispatcher or ResponseDispatcher()
        self.count = settings.typeahead_count if count is None else count
        self.opt_fields = opt_fields or settings.user_opt_fields
        self._current_request: AbortableRequest | None = None

    @property
    def pending(self) -> bool:
        return self._current_request is not None

    def cancel(self) -> None:
        if self._current_request is not None:
            self._current_request.abort()
            self._current_request = None

    def search(
        self,
        workspace_id: str | int,
        query: str | None,
        on_success: UsersCallback,
        on_error: ErrorCallback | None = None,
    ) -> list[User]:
        self.cancel()

        workspace_id = str(workspace_id)
        query = query or ""
        immediate = self.directory.filter(workspace_id, build_pattern(query))

        request: AbortableRequest | None = None

        def on_response(response: Payload) -> None:
            if request is None or request is not self._current_request:
                logger.debug("Dropping superseded type-ahead response for %r", query)
                return
            self._current_request = None
            self.dispatcher.dispatch(response, lambda data: self._merge(workspace_id, data, on_success), on_error)

        request = self.transport.request(
            "GET",
            f"/workspaces/{workspace_id}/typeahead",
            {
                "type": "user",
                "query": query,
                "count": self.count,
                "opt_fields": self.opt_fields,
            },
            on_response,
            {"miss_cache": True},
        )
        self._current_request = request
        return immediate

    def _merge(self, workspace_id: str, data: Any, on_success: UsersCallback) -> None:
        users = coerce_users(data)
        for user in users:
            self.directory.upsert(workspace_id, user)
        on_success(users)
