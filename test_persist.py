import json
import sqlite3

from omni_mount import MountedPage, RegistryStore


def _make_db(path):
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE t (x)")
    conn.commit()
    conn.close()
    return path


def test_missing_store_loads_empty_seed(tmp_path):
    seed = RegistryStore(tmp_path / "config.json").load()

    assert seed.folders == []
    assert seed.pages == []
    assert seed.databases == []


def test_corrupt_or_wrong_shaped_store_loads_empty_seed(tmp_path):
    path = tmp_path / "config.json"
    for content in ("{not json", "[1, 2, 3]", '"text"', ""):
        path.write_text(content, encoding="utf-8")
        seed = RegistryStore(path).load()
        assert (seed.folders, seed.pages, seed.databases) == ([], [], [])


def test_malformed_fields_are_treated_as_empty(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "mountedPaths": ["/docs", 42, None],
                "mountedUrls": [
                    {"url": "https://example.com"},
                    {"title": "no url"},
                    "https://not-an-object.com",
                ],
                "mountedDatabases": {"not": "a list"},
            }
        ),
        encoding="utf-8",
    )

    seed = RegistryStore(path).load()

    assert seed.folders == ["/docs"]
    assert seed.pages == [
        MountedPage(url="https://example.com", title="", content="", fetched_at="")
    ]
    assert seed.databases == []


def test_save_writes_three_arrays_and_round_trips(tmp_path):
    path = tmp_path / "nested" / "config.json"
    store = RegistryStore(path)
    page = MountedPage(
        url="https://example.com",
        title="Example",
        content="# Example\n\nBody",
        fetched_at="2026-01-01T00:00:00.000Z",
    )

    ok, error = store.save(
        {
            "mountedPaths": ["/docs"],
            "mountedUrls": [page.to_dict()],
            "mountedDatabases": [],
        }
    )

    assert (ok, error) == (True, None)
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert set(raw) == {"mountedPaths", "mountedUrls", "mountedDatabases"}
    assert raw["mountedUrls"][0]["fetchedAt"] == "2026-01-01T00:00:00.000Z"

    seed = RegistryStore(path).load()
    assert seed.folders == ["/docs"]
    assert seed.pages == [page]


def test_database_reconnect_is_partial(tmp_path):
    good = _make_db(tmp_path / "good.db")
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "mountedDatabases": [str(good), str(tmp_path / "removed.db"), str(good)],
            }
        ),
        encoding="utf-8",
    )
    store = RegistryStore(path)

    seed = store.load()

    assert [d.path for d in seed.databases] == [str(good)]
    failures = [ev for ev in store.trace if ev.op == "reconnect" and not ev.payload["ok"]]
    assert [ev.payload["path"] for ev in failures] == [str(tmp_path / "removed.db")]


def test_save_failure_is_returned_not_raised(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    store = RegistryStore(blocker / "config.json")

    ok, error = store.save({"mountedPaths": [], "mountedUrls": [], "mountedDatabases": []})

    assert ok is False
    assert error
    assert store.trace[-1].op == "save"
    assert store.trace[-1].payload["ok"] is False


def test_failed_replace_leaves_no_temp_file(tmp_path, monkeypatch):
    import omni_mount.persist as persist

    def refuse(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(persist.os, "replace", refuse)
    store = RegistryStore(tmp_path / "config.json")

    ok, error = store.save({"mountedPaths": [], "mountedUrls": [], "mountedDatabases": []})

    assert (ok, error) == (False, "disk full")
    assert list(tmp_path.iterdir()) == []
