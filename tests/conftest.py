from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import pytest

from tasklink.core.config import settings
from tasklink.services.directory import PhotoPrefetcher, UserDirectory
from tasklink.services.options import OptionsStore


@dataclass
class FakeRequest:
    method: str
    path: str
    params: dict[str, Any]
    on_response: Callable[[dict[str, Any]], None]
    options: dict[str, Any]
    aborted: bool = False
    answered: bool = False

    def abort(self) -> None:
        self.aborted = True

    def respond(self, payload: dict[str, Any]) -> None:
        if self.aborted:
            return
        self.force_respond(payload)

    def force_respond(self, payload: dict[str, Any]) -> None:
        self.answered = True
        self.on_response(payload)


@dataclass
class FakeTransport:
    requests: list[FakeRequest] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    logged_in: bool = False
    closed: bool = False
    # (method, path) -> payload answered on the next loop iteration
    scripted: dict[tuple[str, str], dict[str, Any]] = field(default_factory=dict)

    def request(self, method, path, params, on_response, options=None) -> FakeRequest:
        req = FakeRequest(method, path, dict(params or {}), on_response, dict(options or {}))
        self.requests.append(req)
        payload = self.scripted.get((method, path))
        if payload is not None:
            asyncio.get_running_loop().call_soon(req.respond, payload)
        return req

    def load_image(self, url: str) -> str:
        self.images.append(url)
        return url

    def is_logged_in(self) -> bool:
        return self.logged_in

    @property
    def last(self) -> FakeRequest:
        return self.requests[-1]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def directory(transport: FakeTransport) -> UserDirectory:
    return UserDirectory(PhotoPrefetcher(transport.load_image))


@pytest.fixture
def options_store(tmp_path: Path) -> OptionsStore:
    return OptionsStore(tmp_path / "options.json")


@pytest.fixture(autouse=True)
def no_cache_priming(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "prime_cache_on_startup", False)
