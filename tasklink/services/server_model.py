from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from tasklink.core.config import settings
from tasklink.schemas.options import ExtensionOptions
from tasklink.schemas.user import User
from tasklink.services.api_bridge import ApiBridge, RequestHandle
from tasklink.services.directory import PhotoPrefetcher, UserDirectory
from tasklink.services.dispatch import ErrorCallback, Payload, ResponseDispatcher, error_payload
from tasklink.services.options import OptionsStore
from tasklink.services.typeahead import TypeAheadSearch, UsersCallback, coerce_users

logger = logging.getLogger(__name__)

MALFORMED_USER_MESSAGE = "Malformed user record from Asana server"


def _ignore(_: Any) -> None:
    return None


class ServerModel:
    """
    Everything the popup page needs from the task API.

    Requests are asynchronous: each API method takes a success callback and an
    optional error callback, and returns the abortable request handle. Any
    response carrying user records also feeds the shared user directory.
    """

    def __init__(
        self,
        bridge: ApiBridge,
        options_store: OptionsStore,
        *,
        directory: UserDirectory | None = None,
        dispatcher: ResponseDispatcher | None = None,
        cache_refresh_interval_seconds: float | None = None,
    ) -> None:
        self.bridge = bridge
        self.options_store = options_store
        self.dispatcher = dispatcher or ResponseDispatcher()
        self.directory = directory if directory is not None else UserDirectory(PhotoPrefetcher(bridge.load_image))
        self.typeahead = TypeAheadSearch(bridge, self.directory, self.dispatcher)
        self.cache_refresh_interval_seconds = (
            settings.cache_refresh_interval_seconds
            if cache_refresh_interval_seconds is None
            else cache_refresh_interval_seconds
        )
        self._refresh_task: asyncio.Task[None] | None = None

    def options(self) -> ExtensionOptions:
        return self.options_store.load_options()

    def save_options(self, options: ExtensionOptions | Mapping[str, Any]) -> ExtensionOptions:
        return self.options_store.save_options(options)

    def is_logged_in(self) -> bool:
        return self.bridge.is_logged_in()

    def task_view_url(self, task: Mapping[str, Any] | str | int) -> str:
        # No project is known here, so the task id doubles as the container id
        # and the web app picks a default view.
        task_id = task.get("id") if isinstance(task, Mapping) else task
        options = self.options_store.load_options()
        return f"https://{options.asana_host_port}/0/{task_id}/{task_id}"

    def _request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        callback: Callable[[Any], None],
        errback: ErrorCallback | None,
        *,
        miss_cache: bool = False,
    ) -> RequestHandle:
        def on_response(response: Payload) -> None:
            self.dispatcher.dispatch(response, callback, errback)

        return self.bridge.request(method, path, params, on_response, {"miss_cache": miss_cache})

    def workspaces(
        self,
        callback: Callable[[list[dict[str, Any]]], None],
        errback: ErrorCallback | None = None,
        *,
        miss_cache: bool = False,
    ) -> RequestHandle:
        return self._request(
            "GET",
            "/workspaces",
            {},
            lambda data: callback(list(data or [])),
            errback,
            miss_cache=miss_cache,
        )

    def users(
        self,
        workspace_id: str | int,
        callback: UsersCallback,
        errback: ErrorCallback | None = None,
        *,
        miss_cache: bool = False,
    ) -> RequestHandle:
        workspace_id = str(workspace_id)

        def on_users(data: Any) -> None:
            users = coerce_users(data)
            for user in users:
                self.directory.upsert(workspace_id, user)
            callback(users)

        return self._request(
            "GET",
            f"/workspaces/{workspace_id}/users",
            {"opt_fields": settings.user_opt_fields},
            on_users,
            errback,
            miss_cache=miss_cache,
        )

    def me(
        self,
        callback: Callable[[User], None],
        errback: ErrorCallback | None = None,
        *,
        miss_cache: bool = False,
    ) -> RequestHandle:
        def on_me(data: Any) -> None:
            try:
                user = User.model_validate(data)
            except ValidationError:
                logger.warning("Malformed current user record: %r", data)
                (errback or self.dispatcher.on_error)(error_payload(MALFORMED_USER_MESSAGE))
                return
            for workspace in data.get("workspaces") or []:
                if isinstance(workspace, Mapping) and workspace.get("id") is not None:
                    self.directory.upsert(str(workspace["id"]), user)
            callback(user)

        return self._request("GET", "/users/me", {}, on_me, errback, miss_cache=miss_cache)

    def create_task(
        self,
        workspace_id: str | int,
        task: Mapping[str, Any],
        callback: Callable[[dict[str, Any]], None],
        errback: ErrorCallback | None = None,
    ) -> RequestHandle:
        return self._request("POST", f"/workspaces/{workspace_id}/tasks", dict(task), callback, errback)

    def user_typeahead(
        self,
        workspace_id: str | int,
        query: str | None,
        callback: UsersCallback,
        errback: ErrorCallback | None = None,
    ) -> list[User]:
        return self.typeahead.search(workspace_id, query, callback, errback)

    def log_event(self, event: Mapping[str, Any]) -> RequestHandle:
        def on_error(response: Payload) -> None:
            logger.debug("Dropping failed event log: %s", response.get("errors"))

        return self._request("POST", "/logs", dict(event), _ignore, on_error)

    def refresh_cache(self) -> RequestHandle:
        def on_me(user: User) -> None:
            logger.debug("Refreshed current user %s", user.id)
            self.workspaces(_ignore, miss_cache=True)

        return self.me(on_me, miss_cache=True)

    def start_priming_cache(self) -> asyncio.Task[None]:
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.get_running_loop().create_task(self._prime_cache_forever())
        return self._refresh_task

    async def _prime_cache_forever(self) -> None:
        while True:
            self.refresh_cache()
            await asyncio.sleep(self.cache_refresh_interval_seconds)

    async def stop_priming_cache(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        if task is None:
            return
        task.cancel()
        await asyncio.wait({task})
