import json

import pytest

from fakes import FakeContext
from session_store import SnapshotError, apply_snapshot, load_snapshot, save_snapshot


def test_load_missing_snapshot(tmp_path):
    with pytest.raises(SnapshotError, match="No saved session"):
        load_snapshot(tmp_path / "nope.json")


def test_load_corrupt_snapshot(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{")
    with pytest.raises(SnapshotError, match="Unreadable"):
        load_snapshot(path)


def test_load_snapshot_without_cookies(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"origins": []}))
    with pytest.raises(SnapshotError, match="no cookie list"):
        load_snapshot(path)


@pytest.mark.asyncio
async def test_apply_restores_cookies_and_local_storage():
    context = FakeContext()
    snapshot = {
        "cookies": [{"name": "sid", "value": "abc", "domain": "app.test", "path": "/"}],
        "origins": [
            {"origin": "https://app.test", "localStorage": [{"name": "token", "value": "t1"}]},
            {"origin": "https://cdn.test", "localStorage": []},
        ],
    }

    await apply_snapshot(context, snapshot)

    assert context.cookies == snapshot["cookies"]
    assert len(context.init_scripts) == 1
    assert '"token"' in context.init_scripts[0]
    assert "cdn.test" not in context.init_scripts[0]


@pytest.mark.asyncio
async def test_apply_without_local_storage_adds_no_script():
    context = FakeContext()
    await apply_snapshot(context, {"cookies": []})
    assert context.init_scripts == []


@pytest.mark.asyncio
async def test_save_creates_parent_directory(tmp_path):
    path = tmp_path / ".auth" / "state.json"

    assert await save_snapshot(FakeContext(), path)
    assert load_snapshot(path)["cookies"]


@pytest.mark.asyncio
async def test_save_failure_reports_and_returns_false(tmp_path, capsys):
    assert not await save_snapshot(FakeContext(fail_save=True), tmp_path / "state.json")
    assert "Failed to save authentication state" in capsys.readouterr().out
