# tests/40-core-tests/test_comments.py
"""Tests for lua_inline.comments."""

import pytest

import lua_inline.comments as mod_comments


COMMENTED = [
    ("local x = 1 -- note\n", "local x = 1 \n"),
    ("-- header\nprint(1)\n", "\nprint(1)\n"),
    ("a()\n--[[ block\ncomment ]]\nb()\n", "a()\n\nb()\n"),
    ("a() --[==[ has ]] inside ]==] b()", "a()  b()"),
    ("x = 1 --", "x = 1 "),
    ('s = "-- kept" -- dropped\n', 's = "-- kept" \n'),
]


@pytest.mark.parametrize(("source", "expected"), COMMENTED)
def test_strip_comments_removes_line_and_block_comments(
    source: str, expected: str
) -> None:
    # --- execute and verify ---
    assert mod_comments.strip_comments(source) == expected


def test_strip_comments_keeps_comment_markers_inside_strings() -> None:
    # --- setup ---
    source = (
        'local a = "-- not a comment"\n'
        "local b = '--[[ nor this ]]'\n"
        "local c = [[ -- or this ]]\n"
        "local d = [==[ ]] -- still string ]==]\n"
    )

    # --- execute ---
    result = mod_comments.strip_comments(source)

    # --- verify ---
    assert result == source


def test_strip_comments_honours_escaped_quotes() -> None:
    # --- setup ---
    source = 'print("say \\"hi\\" -- ok") -- gone\n'

    # --- execute ---
    result = mod_comments.strip_comments(source)

    # --- verify ---
    assert result == 'print("say \\"hi\\" -- ok") \n'


def test_unterminated_block_comment_runs_to_end() -> None:
    # --- execute ---
    result = mod_comments.strip_comments("keep()\n--[[ never closed\nlost()\n")

    # --- verify ---
    assert result == "keep()\n"


def test_strip_comments_leaves_index_brackets_alone() -> None:
    # --- setup ---
    source = "t[1] = t[ 2 ] -- trailing\n"

    # --- execute and verify ---
    assert mod_comments.strip_comments(source) == "t[1] = t[ 2 ] \n"


def test_iter_segments_concatenates_back_to_input() -> None:
    # --- setup ---
    source = 'x = "a" -- c\ny = [[b]] --[[d]] z = 1\n'

    # --- execute ---
    segments = list(mod_comments.iter_segments(source))

    # --- verify ---
    assert "".join(chunk for _, chunk in segments) == source
    kinds = [kind for kind, _ in segments]
    assert kinds.count("comment") == 2
    assert ("string", '"a"') in segments
    assert ("string", "[[b]]") in segments


@pytest.mark.parametrize(("source", "_expected"), COMMENTED)
def test_strip_comments_is_idempotent(source: str, _expected: str) -> None:
    # --- setup ---
    once = mod_comments.strip_comments(source)

    # --- execute and verify ---
    assert once != source
    assert mod_comments.strip_comments(once) == once
