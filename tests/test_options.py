import json

from tasklink.schemas.options import ExtensionOptions
from tasklink.services.options import OptionsStore


def test_missing_file_yields_defaults(options_store) -> None:
    options = options_store.load_options()
    assert options.asana_host_port == "app.asana.com"
    assert options.default_workspace_id == "0"
    assert not options_store.path.exists()


def test_save_and_reload_from_disk(tmp_path) -> None:
    path = tmp_path / "nested" / "options.json"
    OptionsStore(path).save_options({"asana_host_port": "localhost:8180", "default_workspace_id": 42})

    reloaded = OptionsStore(path).load_options()
    assert reloaded.asana_host_port == "localhost:8180"
    assert reloaded.default_workspace_id == "42"


def test_update_keeps_unchanged_and_extra_keys(options_store) -> None:
    options_store.save_options({"asana_host_port": "a.example", "theme": "dark"})
    updated = options_store.update_options({"default_workspace_id": "9", "asana_host_port": None})
    assert updated.asana_host_port == "a.example"
    assert updated.default_workspace_id == "9"
    assert updated.model_dump()["theme"] == "dark"


def test_corrupt_file_falls_back_to_defaults(tmp_path, caplog) -> None:
    path = tmp_path / "options.json"
    path.write_text("{not json", encoding="utf-8")
    assert OptionsStore(path).load_options() == ExtensionOptions()
    assert "Ignoring unreadable options file" in caplog.text

    path.write_text(json.dumps(["list"]), encoding="utf-8")
    assert OptionsStore(path).load_options() == ExtensionOptions()


def test_loaded_options_are_copies(options_store) -> None:
    options = options_store.load_options()
    options.asana_host_port = "mutated.example"
    assert options_store.load_options().asana_host_port == "app.asana.com"


def test_reset_restores_defaults(options_store) -> None:
    options_store.save_options({"asana_host_port": "a.example"})
    assert options_store.reset_options() == ExtensionOptions()
    assert json.loads(options_store.path.read_text())["asana_host_port"] == "app.asana.com"
