from __future__ import annotations

import logging
import re
from typing import Any, Callable, Mapping

from tasklink.schemas.user import User
from tasklink.services.patterns import name_matches

logger = logging.getLogger(__name__)

ImageLoader = Callable[[str], Any]


class PhotoPrefetcher:
    """Starts one image load per photo URL to warm the image cache downstream."""

    def __init__(self, loader: ImageLoader | None = None) -> None:
        self.loader = loader
        self._url_to_cached_image: dict[str, Any] = {}

    def __contains__(self, url: object) -> bool:
        return url in self._url_to_cached_image

    def __len__(self) -> int:
        return len(self._url_to_cached_image)

    def prefetch(self, url: str | None) -> None:
        if not url or url in self._url_to_cached_image:
            return
        handle = self.loader(url) if self.loader is not None else None
        self._url_to_cached_image[url] = handle
        logger.debug("Prefetching user photo %s", url)


class UserDirectory:
    """
    Every user seen so far, keyed by workspace and then by user id.

    Buckets keep first-seen order; overwriting a user keeps its position.
    Nothing is ever evicted.
    """

    def __init__(self, prefetcher: PhotoPrefetcher | None = None) -> None:
        self.prefetcher = prefetcher if prefetcher is not None else PhotoPrefetcher()
        self._known_users: dict[str, dict[str, User]] = {}

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._known_users.values())

    def upsert(self, workspace_id: str | int, user: User | Mapping[str, Any]) -> User:
        record = user if isinstance(user, User) else User.model_validate(user)
        bucket = self._known_users.setdefault(str(workspace_id), {})
        bucket[record.id] = record
        self.prefetcher.prefetch(record.photo_url)
        return record

    def get(self, workspace_id: str | int, user_id: str | int) -> User | None:
        return self._known_users.get(str(workspace_id), {}).get(str(user_id))

    def workspaces(self) -> list[str]:
        return list(self._known_users)

    def snapshot(self, workspace_id: str | int) -> list[User]:
        return list(self._known_users.get(str(workspace_id), {}).values())

    def filter(self, workspace_id: str | int, pattern: re.Pattern[str] | None) -> list[User]:
        return [user for user in self.snapshot(workspace_id) if name_matches(pattern, user.name)]
