from tasklink.schemas.user import User
from tasklink.services.directory import PhotoPrefetcher, UserDirectory
from tasklink.services.patterns import build_pattern


def _ann(**extra) -> dict:
    return {"id": 1, "name": "Ann", **extra}


def test_snapshot_of_unknown_workspace_is_empty(directory) -> None:
    assert directory.snapshot("nope") == []
    assert directory.filter("nope", build_pattern("a")) == []


def test_upsert_creates_bucket_and_coerces_ids(directory) -> None:
    user = directory.upsert(5, _ann())
    assert isinstance(user, User)
    assert user.id == "1"
    assert directory.workspaces() == ["5"]
    assert directory.get("5", 1) == user


def test_upsert_is_idempotent(directory) -> None:
    photo = {"image_60x60": "https://img.example/ann.png"}
    directory.upsert("ws1", _ann(photo=photo))
    directory.upsert("ws1", _ann(photo=photo))
    snapshot = directory.snapshot("ws1")
    assert len(snapshot) == 1
    assert snapshot[0].name == "Ann"
    assert snapshot[0].photo_url == "https://img.example/ann.png"


def test_later_observation_overwrites_in_place(directory) -> None:
    directory.upsert("ws1", {"id": "1", "name": "Ann"})
    directory.upsert("ws1", {"id": "2", "name": "Bob"})
    directory.upsert("ws1", {"id": "1", "name": "Annie"})
    assert [u.name for u in directory.snapshot("ws1")] == ["Annie", "Bob"]
    assert len(directory) == 2


def test_workspaces_are_isolated(directory) -> None:
    directory.upsert("ws1", _ann())
    assert directory.snapshot("ws2") == []


def test_filter_without_pattern_drops_blank_names(directory) -> None:
    directory.upsert("ws1", {"id": "1", "name": "Ann"})
    directory.upsert("ws1", {"id": "2", "name": "   "})
    directory.upsert("ws1", {"id": "3"})
    assert [u.id for u in directory.filter("ws1", None)] == ["1"]


def test_filter_matches_anywhere_in_name(directory) -> None:
    directory.upsert("ws1", {"id": "1", "name": "Mary Ann Smith"})
    directory.upsert("ws1", {"id": "2", "name": "Joanne"})
    assert [u.id for u in directory.filter("ws1", build_pattern("ann"))] == ["1"]


def test_photo_prefetched_once_per_url(directory, transport) -> None:
    photo = {"image_60x60": "https://img.example/ann.png"}
    directory.upsert("ws1", _ann(photo=photo))
    directory.upsert("ws2", _ann(photo=photo))
    directory.upsert("ws1", {"id": "2", "name": "No Photo"})
    directory.upsert("ws1", {"id": "3", "name": "Empty", "photo": {"image_60x60": ""}})
    assert transport.images == ["https://img.example/ann.png"]


def test_prefetcher_without_loader_still_records_urls() -> None:
    prefetcher = PhotoPrefetcher()
    prefetcher.prefetch("https://img.example/a.png")
    prefetcher.prefetch("https://img.example/a.png")
    prefetcher.prefetch(None)
    assert len(prefetcher) == 1
    assert "https://img.example/a.png" in prefetcher


def test_prefetch_same_url_starts_one_load() -> None:
    started: list[str] = []
    prefetcher = PhotoPrefetcher(started.append)
    prefetcher.prefetch("https://img.example/a.png")
    prefetcher.prefetch("https://img.example/a.png")
    assert started == ["https://img.example/a.png"]


def test_injected_empty_prefetcher_is_kept() -> None:
    started: list[str] = []
    prefetcher = PhotoPrefetcher(started.append)
    directory = UserDirectory(prefetcher)
    assert directory.prefetcher is prefetcher

    directory.upsert("ws1", _ann(photo={"image_60x60": "https://img.example/ann.png"}))
    assert started == ["https://img.example/ann.png"]
