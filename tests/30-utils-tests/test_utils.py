# tests/30-utils-tests/test_utils.py
"""Tests for lua_inline.utils."""

from pathlib import Path

import pytest

import lua_inline.utils as mod_utils
import lua_inline.utils_types as mod_utils_types


def test_load_jsonc_strips_comments_but_keeps_urls(tmp_path: Path) -> None:
    # --- setup ---
    cfg = tmp_path / "c.jsonc"
    cfg.write_text(
        '{\n  // comment\n  "url": "http://example.com",\n  "n": 1, # hash\n}\n'
    )

    # --- execute ---
    data = mod_utils.load_jsonc(cfg)

    # --- verify ---
    assert data == {"url": "http://example.com", "n": 1}


def test_load_jsonc_keeps_comment_markers_inside_strings(tmp_path: Path) -> None:
    # --- setup ---
    cfg = tmp_path / "c.jsonc"
    cfg.write_text(
        "/* header\n   block */\n"
        '{"entry": "src/#main.lua", "out": "a//b.lua", "x": "q\\"/*",\n'
        ' "list": [1, 2,],}\n'
    )

    # --- execute ---
    data = mod_utils.load_jsonc(cfg)

    # --- verify ---
    assert data == {
        "entry": "src/#main.lua",
        "out": "a//b.lua",
        "x": 'q"/*',
        "list": [1, 2],
    }


def test_load_jsonc_comment_only_file_is_empty(tmp_path: Path) -> None:
    # --- setup ---
    cfg = tmp_path / "c.jsonc"
    cfg.write_text("// nothing here\n# nor here\n")

    # --- execute and verify ---
    assert mod_utils.load_jsonc(cfg) is None


def test_load_jsonc_rejects_scalar_root(tmp_path: Path) -> None:
    # --- setup ---
    cfg = tmp_path / "c.jsonc"
    cfg.write_text("42")

    # --- execute and verify ---
    with pytest.raises(ValueError, match="root type"):
        mod_utils.load_jsonc(cfg)


def test_load_jsonc_missing_file(tmp_path: Path) -> None:
    # --- execute and verify ---
    with pytest.raises(FileNotFoundError):
        mod_utils.load_jsonc(tmp_path / "none.jsonc")


def test_remove_path_in_error_message_normalizes_output(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "config.jsonc"
    msg = f"Invalid JSONC syntax in {path}: Expecting value (line 1, column 2)"

    # --- execute ---
    result = mod_utils.remove_path_in_error_message(msg, path)

    # --- verify ---
    assert result == "Invalid JSONC syntax: Expecting value (line 1, column 2)"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, "s"), (1, ""), (2, "s"), ([1], ""), ([1, 2], "s"), (None, "s")],
)
def test_plural_behavior(value: object, expected: str) -> None:
    # --- execute and verify ---
    assert mod_utils.plural(value) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0.0123, "12.30ms"), (0.5, "500.00ms"), (1.0, "1.00s"), (75.25, "75.25s")],
)
def test_format_elapsed(seconds: float, expected: str) -> None:
    # --- execute and verify ---
    assert mod_utils.format_elapsed(seconds) == expected


def test_make_pathresolved_anchors_relative_paths(tmp_path: Path) -> None:
    # --- execute ---
    rel = mod_utils_types.make_pathresolved("src/main.lua", tmp_path, "config")
    absolute = mod_utils_types.make_pathresolved(
        tmp_path / "x.lua", tmp_path / "elsewhere", "cli"
    )

    # --- verify ---
    assert rel["path"] == (tmp_path / "src" / "main.lua").resolve()
    assert rel["root"] == tmp_path.resolve()
    assert rel["origin"] == "config"
    assert absolute["path"] == (tmp_path / "x.lua").resolve()


def test_schema_from_typeddict_reads_field_types() -> None:
    # --- execute ---
    from lua_inline.types import BundleConfig

    schema = mod_utils_types.schema_from_typeddict(BundleConfig)

    # --- verify ---
    assert schema["entry"] is str
    assert schema["minify"] is bool
    assert set(schema) == {
        "entry",
        "out",
        "minify",
        "process",
        "processor",
        "log_level",
        "strict_config",
    }
