from __future__ import annotations

import asyncio
import copy
import json
import logging
import time
from typing import Any, Callable, Coroutine, Mapping

import httpx

from tasklink.core.config import settings
from tasklink.services.dispatch import Payload, error_payload
from tasklink.services.options import OptionsStore

logger = logging.getLogger(__name__)

CONNECT_ERROR_MESSAGE = "Could not connect to Asana server"
INVALID_RESPONSE_MESSAGE = "Invalid response from Asana server"

ResponseCallback = Callable[[Payload], None]


class RequestHandle:
    """An in-flight API request that can be aborted.

    Once aborted, the request's response callback never runs.
    """

    def __init__(self) -> None:
        self.aborted = False
        self._task: asyncio.Task[None] | None = None

    def start(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        self._task = asyncio.get_running_loop().create_task(coro)
        return self._task

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def abort(self) -> None:
        if self.aborted:
            return
        self.aborted = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.wait({self._task})


class ApiBridge:
    """Authenticated access to the task API with a short-lived GET cache."""

    API_HEADERS = {
        "Accept": "application/json",
        "X-Requested-With": "XMLHttpRequest",
        "X-Allow-Asana-Client": "1",
    }

    def __init__(
        self,
        options_store: OptionsStore,
        *,
        client: httpx.AsyncClient | None = None,
        api_version: str | None = None,
        cache_ttl_seconds: float | None = None,
        max_cache_entries: int | None = None,
        session_cookie: str | None = None,
        session_ticket: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.options_store = options_store
        self.api_version = api_version or settings.asana_api_version
        self.cache_ttl_seconds = settings.response_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        self.max_cache_entries = settings.response_cache_max_entries if max_cache_entries is None else max_cache_entries
        self.session_cookie = session_cookie or settings.asana_session_cookie
        self._clock = clock
        self._owns_client = client is None
        self.client = client if client is not None else httpx.AsyncClient(
            timeout=settings.http_timeout_seconds,
            headers={"User-Agent": "TaskLink/1.0"},
        )
        self._cache: dict[str, tuple[float, Payload]] = {}
        self._inflight: set[asyncio.Task[Any]] = set()

        ticket = session_ticket if session_ticket is not None else settings.asana_session_ticket
        if ticket:
            self.client.cookies.set(self.session_cookie, ticket, domain=self._host())

    def _host(self) -> str:
        return self.options_store.load_options().asana_host_port.split(":", 1)[0]

    def base_api_url(self) -> str:
        options = self.options_store.load_options()
        return f"https://{options.asana_host_port}/api/{self.api_version}"

    def is_logged_in(self) -> bool:
        host = self._host()
        for cookie in self.client.cookies.jar:
            if cookie.name != self.session_cookie or not cookie.value:
                continue
            domain = (cookie.domain or "").lstrip(".")
            if not domain or host == domain or host.endswith("." + domain):
                return True
        return False

    def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        on_response: ResponseCallback,
        options: Mapping[str, Any] | None = None,
    ) -> RequestHandle:
        miss_cache = bool((options or {}).get("miss_cache"))
        handle = RequestHandle()
        task = handle.start(self._complete(handle, method, path, params, on_response, miss_cache))
        self._track(task)
        return handle

    async def _complete(
        self,
        handle: RequestHandle,
        method: str,
        path: str,
        params: Mapping[str, Any] | None,
        on_response: ResponseCallback,
        miss_cache: bool,
    ) -> None:
        payload = await self.fetch(method, path, params, miss_cache=miss_cache)
        if handle.aborted:
            return
        try:
            on_response(payload)
        except Exception:
            logger.exception("Response handler for %s %s failed", method, path)

    async def fetch(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        miss_cache: bool = False,
    ) -> Payload:
        method = method.upper()
        url = self.base_api_url() + path
        params = dict(params or {})
        cache_key = self._cache_key(url, params) if method == "GET" else None

        if cache_key is not None and not miss_cache:
            cached = self._read_cache(cache_key)
            if cached is not None:
                return cached

        try:
            if method == "GET":
                resp = await self.client.request(method, url, params=params, headers=self.API_HEADERS)
            else:
                resp = await self.client.request(method, url, json={"data": params}, headers=self.API_HEADERS)
        except httpx.HTTPError:
            logger.exception("Task API %s %s failed", method, path)
            return error_payload(CONNECT_ERROR_MESSAGE)

        payload = self._parse(resp)
        if cache_key is not None and payload.get("errors") is None:
            self._write_cache(cache_key, payload)
        return payload

    def _parse(self, resp: httpx.Response) -> Payload:
        try:
            payload = resp.json()
        except ValueError:
            logger.warning("Task API returned a non-JSON body (status %s)", resp.status_code)
            return error_payload(INVALID_RESPONSE_MESSAGE, status=resp.status_code)
        if not isinstance(payload, dict):
            return error_payload(INVALID_RESPONSE_MESSAGE, status=resp.status_code)
        if resp.is_error and payload.get("errors") is None:
            return error_payload(f"HTTP {resp.status_code}", status=resp.status_code)
        return payload

    @staticmethod
    def _cache_key(url: str, params: Mapping[str, Any]) -> str:
        return f"{url}?{json.dumps(params, sort_keys=True, default=str)}"

    def _read_cache(self, key: str) -> Payload | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, payload = entry
        if self._clock() - stored_at > self.cache_ttl_seconds:
            self._cache.pop(key, None)
            return None
        return copy.deepcopy(payload)

    def _write_cache(self, key: str, payload: Payload) -> None:
        now = self._clock()
        for stale in [k for k, (stored_at, _) in self._cache.items() if now - stored_at > self.cache_ttl_seconds]:
            del self._cache[stale]
        self._cache.pop(key, None)
        while self._cache and len(self._cache) >= self.max_cache_entries:
            del self._cache[next(iter(self._cache))]
        self._cache[key] = (now, copy.deepcopy(payload))

    def clear_cache(self) -> None:
        self._cache.clear()

    def load_image(self, url: str) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._load_image(url))
        self._track(task)
        return task

    async def _load_image(self, url: str) -> None:
        # The body is discarded; the request only warms the HTTP cache and the
        # pooled connection to the image host.
        try:
            resp = await self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.debug("Photo prefetch failed for %s: %s", url, exc)

    def _track(self, task: asyncio.Task[Any]) -> None:
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def aclose(self) -> None:
        for task in list(self._inflight):
            task.cancel()
        if self._owns_client:
            await self.client.aclose()
