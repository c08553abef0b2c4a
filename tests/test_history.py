"""Tests for cmdshell.history module."""

from cmdshell.history import HistoryStore, home_dir


def _make_store(path: str = ".hist", **kwargs) -> tuple[HistoryStore, list, list]:
    """HistoryStore with recorded sink output and reports."""
    sunk: list[str] = []
    reports: list[str] = []
    store = HistoryStore(path, sink=sunk.append, report=reports.append, **kwargs)
    return store, sunk, reports


class TestHomeDir:
    """Tests for home_dir."""

    def test_uses_home_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert home_dir() == tmp_path


class TestResolve:
    """Tests for current-directory then $HOME resolution."""

    def test_disabled_without_path(self):
        store, _, _ = _make_store("")
        assert store.resolve() is None
        assert store.load() == 0
        assert store.save() is False

    def test_prefers_current_directory(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        work = tmp_path / "work"
        home.mkdir()
        work.mkdir()
        (home / ".hist").write_text("from home\n")
        (work / ".hist").write_text("from work\n")
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.chdir(work)

        store, sunk, _ = _make_store()
        store.load()
        assert sunk == ["from work"]
        assert store.path == ".hist"

    def test_falls_back_to_home_and_keeps_path(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        work = tmp_path / "work"
        home.mkdir()
        work.mkdir()
        (home / ".hist").write_text("from home\n")
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.chdir(work)

        store, sunk, _ = _make_store()
        assert store.load() == 1
        assert sunk == ["from home"]
        assert store.path == str(home / ".hist")

        store.append("new")
        store.save()
        assert (home / ".hist").read_text() == "from home\nnew\n"
        assert not (work / ".hist").exists()

    def test_missing_everywhere_keeps_configured_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.chdir(tmp_path)

        store, sunk, reports = _make_store()
        assert store.load() == 0
        assert sunk == []
        assert reports == []
        assert store.path == ".hist"

    def test_resolved_only_once(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        home.mkdir()
        (home / ".hist").write_text("x\n")
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.chdir(tmp_path)

        store, _, _ = _make_store()
        store.resolve()
        (tmp_path / ".hist").write_text("local\n")
        assert store.resolve() == home / ".hist"

    def test_setting_path_resets_resolution(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        store, _, _ = _make_store()
        store.resolve()
        store.path = "other"
        (tmp_path / "other").write_text("y\n")
        assert store.resolve() == tmp_path / "other"


class TestLoad:
    """Tests for HistoryStore.load."""

    def test_skips_blank_lines(self, tmp_path):
        path = tmp_path / "h"
        path.write_text("a\n\nb\n")
        store, sunk, _ = _make_store(str(path))
        assert store.load() == 2
        assert store.entries == ["a", "b"]
        assert sunk == ["a", "b"]

    def test_loads_once(self, tmp_path):
        path = tmp_path / "h"
        path.write_text("a\n")
        store, sunk, _ = _make_store(str(path))
        store.load()
        store.load()
        assert sunk == ["a"]

    def test_new_path_loaded_after_change(self, tmp_path):
        first = tmp_path / "a.hist"
        second = tmp_path / "b.hist"
        first.write_text("a1\n")
        second.write_text("b1\nb2\n")
        store, sunk, _ = _make_store(str(first))
        store.load()
        store.path = second
        assert store.load() == 2
        assert sunk == ["a1", "b1", "b2"]

    def test_read_failure_reported(self, tmp_path):
        directory = tmp_path / "adir"
        directory.mkdir()
        store, sunk, reports = _make_store(str(directory))
        assert store.load() == 0
        assert len(reports) == 1
        assert "cannot read history file" in reports[0]

    def test_works_without_sink(self, tmp_path):
        path = tmp_path / "h"
        path.write_text("a\n")
        store = HistoryStore(path)
        assert store.load() == 1
        assert store.entries == ["a"]


class TestAppend:
    """Tests for HistoryStore.append."""

    def test_entries_bounded_by_limit(self):
        store, sunk, _ = _make_store(limit=2)
        for line in ["a", "b", "c"]:
            store.append(line)
        assert store.entries == ["b", "c"]
        assert sunk == ["a", "b", "c"]

    def test_zero_limit_unbounded(self):
        store, _, _ = _make_store(limit=0)
        for line in ["a", "b", "c"]:
            store.append(line)
        assert store.entries == ["a", "b", "c"]


class TestSave:
    """Tests for HistoryStore.save."""

    def test_overwrites(self, tmp_path):
        path = tmp_path / "h"
        path.write_text("stale\n")
        store, _, _ = _make_store(str(path))
        store.append("one")
        store.append("two")
        assert store.save() is True
        assert path.read_text() == "one\ntwo\n"

    def test_limit_keeps_newest(self, tmp_path):
        path = tmp_path / "h"
        store, _, _ = _make_store(str(path), limit=2)
        for line in ("a", "b", "c"):
            store.append(line)
        store.save()
        assert path.read_text() == "b\nc\n"

    def test_zero_limit_keeps_all(self, tmp_path):
        path = tmp_path / "h"
        store, _, _ = _make_store(str(path), limit=0)
        for line in ("a", "b", "c"):
            store.append(line)
        store.save()
        assert path.read_text() == "a\nb\nc\n"

    def test_write_failure_reported(self, tmp_path):
        store, _, reports = _make_store(str(tmp_path / "missing" / "h"))
        store.append("a")
        assert store.save() is False
        assert "Error writing history file" in reports[0]
