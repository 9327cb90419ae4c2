from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from talescape.data.errors import DataLoadError
from talescape.data.save_store import SaveStore
from talescape.services.narrative_engine import NarrativeEngine
from talescape.services.save_service import SaveService
from tests.helpers.stories import build_demo_story


def _payload(service: SaveService, name: str, hours_ago: int) -> dict:
    engine = NarrativeEngine()
    engine.load_story(build_demo_story())
    engine.start_new_game("Hero")
    save = service.create_save(name, engine.save_game(name))
    save.save_time = datetime(2024, 6, 1, tzinfo=timezone.utc) - timedelta(hours=hours_ago)
    return service.serialize_save(save)


def test_write_read_delete(tmp_path: Path) -> None:
    service = SaveService()
    store = SaveStore(tmp_path)
    payload = _payload(service, "first", 0)
    store.write(payload)
    assert store.exists(payload["id"])
    restored = service.deserialize_save(store.read(payload["id"]))
    assert restored.name == "first"
    store.delete(payload["id"])
    assert not store.exists(payload["id"])
    with pytest.raises(DataLoadError):
        store.read(payload["id"])
    with pytest.raises(DataLoadError):
        store.delete(payload["id"])


def test_list_saves_newest_first_and_flags_corrupt(tmp_path: Path) -> None:
    service = SaveService()
    store = SaveStore(tmp_path)
    store.write(_payload(service, "old", 5))
    store.write(_payload(service, "new", 1))
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    saves = store.list_saves()
    assert [meta.name for meta in saves[:2]] == ["new", "old"]
    assert saves[0].story_id == "demo"
    assert saves[0].player_name == "Hero"
    assert saves[-1].is_corrupt
    assert saves[-1].id == "broken"
    assert store.count() == 3


def test_missing_directory_lists_nothing(tmp_path: Path) -> None:
    store = SaveStore(tmp_path / "nothing_here")
    assert store.list_saves() == []
    assert store.count() == 0


def test_cleanup_keeps_newest(tmp_path: Path) -> None:
    service = SaveService()
    store = SaveStore(tmp_path)
    for index, name in enumerate(("a", "b", "c")):
        store.write(_payload(service, name, index))
    assert store.cleanup_old_saves(1) == 2
    assert [meta.name for meta in store.list_saves()] == ["a"]
    assert store.cleanup_old_saves(5) == 0


def test_export_then_import_creates_copy(tmp_path: Path) -> None:
    service = SaveService()
    store = SaveStore(tmp_path / "saves")
    payload = _payload(service, "hero run", 0)
    store.write(payload)
    exported = store.export_save(payload["id"], tmp_path / "exports" / "run.json")
    imported = store.import_save(exported)
    assert imported["id"] != payload["id"]
    assert imported["name"] == "hero run (Imported)"
    assert store.count() == 2
    assert service.deserialize_save(store.read(imported["id"])).game_state.story_id == "demo"


def test_write_prunes_oldest_saves_of_same_story(tmp_path: Path) -> None:
    service = SaveService()
    store = SaveStore(tmp_path, max_saves_per_story=2)
    other = _payload(service, "other story", 10)
    other["game_state"]["story_id"] = "sequel"
    store.write(other)
    for name, hours_ago in (("oldest", 3), ("middle", 2), ("newest", 1)):
        store.write(_payload(service, name, hours_ago))
    names = sorted(meta.name for meta in store.list_saves())
    assert names == ["middle", "newest", "other story"]


def test_naive_save_time_sorts_with_aware_ones(tmp_path: Path) -> None:
    service = SaveService()
    store = SaveStore(tmp_path)
    naive = _payload(service, "naive", 0)
    naive["save_time"] = "2024-06-02T00:00:00"
    store.write(naive)
    store.write(_payload(service, "aware", 1))
    assert [meta.name for meta in store.list_saves()] == ["naive", "aware"]


def test_rejects_non_positive_save_limit(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        SaveStore(tmp_path, max_saves_per_story=0)
