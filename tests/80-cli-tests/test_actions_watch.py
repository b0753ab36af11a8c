# tests/80-cli-tests/test_actions_watch.py
"""Tests for the watch loop and the other helpers in lua_inline.actions."""

# we import `_` private for testing purposes only
# pyright: reportPrivateUsage=false

from __future__ import annotations

from pathlib import Path

import pytest

import lua_inline.actions as mod_actions
import lua_inline.cli as mod_cli
from lua_inline.bundler import bundle
from tests.utils import bump_mtime, make_bundle_cfg, make_lua_project

PROJECT = {
    "main.lua": 'local m = require("lib/m.lua")\nreturn m\n',
    "lib/m.lua": 'return require("leaf.lua")\n',
    "lib/leaf.lua": "return 1\n",
    "unused.lua": "return 0\n",
}


def _stop_after(ticks: int, on_tick: dict[int, object] | None = None):  # noqa: ANN202
    """Return a fake sleep that runs per-tick callbacks, then interrupts."""
    count = 0

    def fake_sleep(_seconds: float) -> None:
        nonlocal count
        count += 1
        action = (on_tick or {}).get(count)
        if callable(action):
            action()
        if count >= ticks:
            raise KeyboardInterrupt

    return fake_sleep


def test_collect_watched_files_follows_requires(tmp_path: Path) -> None:
    # --- setup ---
    files = make_lua_project(tmp_path, PROJECT)
    cfg = make_bundle_cfg(tmp_path)

    # --- execute ---
    watched = mod_actions._collect_watched_files([cfg])

    # --- verify ---
    assert watched == sorted(
        files[name].resolve() for name in ("main.lua", "lib/m.lua", "lib/leaf.lua")
    )


def test_collect_watched_files_skips_missing_entry(tmp_path: Path) -> None:
    # --- setup ---
    cfg = make_bundle_cfg(tmp_path, entry="nope.lua")

    # --- execute and verify ---
    assert mod_actions._collect_watched_files([cfg]) == []


def test_watch_rebuilds_when_a_module_changes(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    files = make_lua_project(tmp_path, PROJECT)
    cfg = make_bundle_cfg(tmp_path)
    calls: list[int] = []

    sleep = _stop_after(3, {1: lambda: bump_mtime(files["lib/leaf.lua"])})
    monkeypatch.setattr(mod_actions.time, "sleep", sleep)

    # --- execute ---
    mod_actions.watch_for_changes(lambda: calls.append(1), [cfg], interval=0.01)

    # --- verify ---
    assert len(calls) == 2  # initial build + one rebuild
    out = capsys.readouterr().out
    assert "Detected 1 modified file(s)" in out
    assert "Watch stopped" in out


def test_watch_ignores_unrelated_files_and_output(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # --- setup ---
    files = make_lua_project(tmp_path, PROJECT)
    cfg = make_bundle_cfg(tmp_path)
    out_file = tmp_path / "bundled.lua"
    calls: list[int] = []

    def rebuild() -> None:
        calls.append(1)
        out_file.write_text("-- rebuilt\n")
        bump_mtime(out_file, len(calls) * 2.0)

    sleep = _stop_after(3, {1: lambda: bump_mtime(files["unused.lua"])})
    monkeypatch.setattr(mod_actions.time, "sleep", sleep)

    # --- execute ---
    mod_actions.watch_for_changes(rebuild, [cfg], interval=0.01)

    # --- verify ---
    assert len(calls) == 1


def test_watch_picks_up_newly_required_module(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # --- setup ---
    files = make_lua_project(tmp_path, PROJECT)
    cfg = make_bundle_cfg(tmp_path)
    calls: list[int] = []

    def add_require() -> None:
        files["main.lua"].write_text('require("unused.lua")\n')
        bump_mtime(files["main.lua"])

    sleep = _stop_after(
        4, {1: add_require, 2: lambda: bump_mtime(files["unused.lua"], 4.0)}
    )
    monkeypatch.setattr(mod_actions.time, "sleep", sleep)

    # --- execute ---
    mod_actions.watch_for_changes(lambda: calls.append(1), [cfg], interval=0.01)

    # --- verify ---
    assert len(calls) == 3


def test_watch_survives_failing_rebuild(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    files = make_lua_project(tmp_path, PROJECT)
    cfg = make_bundle_cfg(tmp_path)
    calls: list[int] = []

    def rebuild() -> None:
        calls.append(1)
        if len(calls) == 2:
            xmsg = "broken module"
            raise ValueError(xmsg)

    sleep = _stop_after(
        4,
        {
            1: lambda: bump_mtime(files["main.lua"]),
            2: lambda: bump_mtime(files["main.lua"], 4.0),
        },
    )
    monkeypatch.setattr(mod_actions.time, "sleep", sleep)

    # --- execute ---
    mod_actions.watch_for_changes(rebuild, [cfg], interval=0.01)

    # --- verify ---
    assert len(calls) == 3
    assert "Rebundle failed: broken module" in capsys.readouterr().err


def test_cli_watch_uses_configured_interval(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Bare --watch falls back to the environment interval."""
    # --- setup ---
    make_lua_project(tmp_path, {"main.lua": "return 1\n"})
    seen: dict[str, object] = {}

    def fake_watch(rebuild, bundles, interval):  # noqa: ANN001, ANN202
        seen["interval"] = interval
        seen["bundles"] = len(bundles)
        rebuild()

    monkeypatch.setattr(mod_cli, "watch_for_changes", fake_watch)
    monkeypatch.setenv("WATCH_INTERVAL", "0.25")
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main(["--entry", "main.lua", "--watch"])

    # --- verify ---
    assert code == 0
    assert seen == {"interval": 0.25, "bundles": 1}
    assert (tmp_path / "bundled.lua").exists()


def test_cli_watch_explicit_interval_wins(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # --- setup ---
    make_lua_project(tmp_path, {"main.lua": "return 1\n"})
    seen: dict[str, float] = {}

    def fake_watch(_rebuild, _bundles, interval):  # noqa: ANN001, ANN202
        seen["interval"] = interval

    monkeypatch.setattr(mod_cli, "watch_for_changes", fake_watch)
    monkeypatch.setenv("WATCH_INTERVAL", "0.25")
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main(["--entry", "main.lua", "--watch", "3"])

    # --- verify ---
    assert code == 0
    assert seen["interval"] == 3.0


def test_get_metadata_reads_pyproject_version() -> None:
    # --- execute ---
    meta = mod_actions.get_metadata()

    # --- verify ---
    assert meta.version == "0.1.0"
    assert meta.commit


def test_selftest_project_forwards_identifiers(tmp_path: Path) -> None:
    """Forwarded arguments become the closure's parameter names."""
    # --- setup ---
    files = make_lua_project(tmp_path, mod_actions.SELFTEST_FILES)
    out = tmp_path / "bundled.lua"

    # --- execute ---
    bundle(files["main.lua"], out, skip_processing=True)

    # --- verify ---
    text = out.read_text()
    assert "local greet = (function(name)\n" in text
    assert "end)(name)\nreturn greet\n" in text
    assert '(function("world")' not in text
