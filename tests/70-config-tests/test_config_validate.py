# tests/70-config-tests/test_config_validate.py
"""Tests for lua_inline.config_validate."""

from typing import Any

import lua_inline.config_validate as mod_validate


def test_validate_config_accepts_minimal_bundle() -> None:
    # --- execute ---
    summary = mod_validate.validate_config({"bundles": [{"entry": "main.lua"}]})

    # --- verify ---
    assert summary.valid
    assert summary.errors == []
    assert summary.warnings == []


def test_validate_config_reports_wrong_types() -> None:
    # --- setup ---
    cfg: dict[str, Any] = {
        "minify": "yes",
        "bundles": [{"entry": "main.lua", "process": 1}],
    }

    # --- execute ---
    summary = mod_validate.validate_config(cfg)

    # --- verify ---
    assert not summary.valid
    assert any("`minify` expected bool" in e for e in summary.errors)
    assert any("bundle #1" in e and "`process`" in e for e in summary.errors)


def test_validate_config_unknown_key_hint_is_fatal_when_strict() -> None:
    # --- execute ---
    summary = mod_validate.validate_config(
        {"bundles": [{"entry": "a.lua", "minfy": True}]}
    )

    # --- verify ---
    assert not summary.valid
    assert summary.strict
    (msg,) = summary.strict_warnings
    assert "`minfy`" in msg
    assert "'minfy' → 'minify'" in msg


def test_validate_config_unknown_key_only_warns_when_lenient() -> None:
    # --- setup ---
    cfg: dict[str, Any] = {
        "strict_config": False,
        "bundles": [{"entry": "a.lua", "extra": 1}],
    }

    # --- execute ---
    summary = mod_validate.validate_config(cfg)

    # --- verify ---
    assert summary.valid
    assert len(summary.warnings) == 1


def test_validate_config_bundle_can_relax_strictness() -> None:
    # --- setup ---
    cfg: dict[str, Any] = {
        "bundles": [{"entry": "a.lua", "strict_config": False, "extra": 1}],
    }

    # --- execute ---
    summary = mod_validate.validate_config(cfg)

    # --- verify ---
    assert summary.valid
    assert summary.warnings


def test_validate_config_dry_run_keys_are_aggregated() -> None:
    # --- setup ---
    cfg: dict[str, Any] = {
        "strict_config": False,
        "dry_run": True,
        "bundles": [{"entry": "a.lua", "dry-run": True}, {"entry": "b.lua"}],
    }

    # --- execute ---
    summary = mod_validate.validate_config(cfg)

    # --- verify ---
    assert summary.valid
    (msg,) = summary.warnings
    assert "--dry-run" in msg
    assert "top-level configuration" in msg
    assert "bundle #1" in msg


def test_validate_config_root_only_keys_in_bundle() -> None:
    # --- execute ---
    summary = mod_validate.validate_config(
        {"bundles": [{"entry": "a.lua", "watch_interval": 3}]}
    )

    # --- verify ---
    assert not summary.valid
    assert any("root level" in w for w in summary.strict_warnings)


def test_validate_config_unknown_processor() -> None:
    # --- execute ---
    summary = mod_validate.validate_config(
        {"processor": "luamin", "bundles": [{"entry": "a.lua"}]}
    )

    # --- verify ---
    assert not summary.valid
    assert any("unknown processor `luamin`" in e for e in summary.errors)


def test_validate_config_rejects_empty_or_malformed_bundles() -> None:
    # --- execute ---
    empty = mod_validate.validate_config({"bundles": []})
    not_list = mod_validate.validate_config({"bundles": "main.lua"})
    not_obj = mod_validate.validate_config({"bundles": ["main.lua"]})

    # --- verify ---
    assert not empty.valid
    assert not not_list.valid
    assert not not_obj.valid
    assert any("Bundle #1 must be an object" in e for e in not_obj.errors)
