import json
import threading

from make10_store import Prefs


def test_defaults_without_file(prefs_path):
    prefs = Prefs(prefs_path)
    assert prefs.get("player_name") == ""
    assert prefs.get("bgm_volume") == 0.5
    assert prefs.get("missing", "x") == "x"
    assert not prefs_path.exists()


def test_set_writes_through(prefs_path):
    Prefs(prefs_path).set("player_name", "Ann")
    assert Prefs(prefs_path).get("player_name") == "Ann"


def test_corrupt_file_falls_back_to_defaults(prefs_path):
    prefs_path.write_text("{not json", encoding="utf-8")
    assert Prefs(prefs_path).get("sfx_volume") == 0.5


def test_non_object_file_is_ignored(prefs_path):
    prefs_path.write_text("[1, 2]", encoding="utf-8")
    prefs = Prefs(prefs_path)
    assert prefs.get("leaderboard_cache") == []


def test_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "prefs.json"
    Prefs(path).set("bgm_volume", 0.2)
    assert path.exists()


def test_concurrent_writers_leave_valid_json(prefs_path):
    prefs = Prefs(prefs_path)

    def writer(key):
        for i in range(50):
            prefs.set(key, i)

    threads = [threading.Thread(target=writer, args=(f"k{n}",)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    data = json.loads(prefs_path.read_text(encoding="utf-8"))
    assert all(data[f"k{n}"] == 49 for n in range(4))
