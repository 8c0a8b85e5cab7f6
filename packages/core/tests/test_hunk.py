"""Tests for diff hunk line classification."""

from prfeedback_core.utils.hunk import ADDITION, CONTEXT, DELETION, HUNK_HEADER, HunkLine, render_hunk


def test_classifies_by_first_character():
    hunk = "@@ -1,3 +1,3 @@\n context\n-old line\n+new line"
    assert render_hunk(hunk) == [
        HunkLine(HUNK_HEADER, "@@ -1,3 +1,3 @@"),
        HunkLine(CONTEXT, " context"),
        HunkLine(DELETION, "-old line"),
        HunkLine(ADDITION, "+new line"),
    ]


def test_empty_lines_dropped():
    assert render_hunk("+a\n\n\n-b\n") == [HunkLine(ADDITION, "+a"), HunkLine(DELETION, "-b")]


def test_empty_hunk():
    assert render_hunk("") == []


def test_text_is_unchanged():
    lines = render_hunk("+    indented = True")
    assert lines[0].text == "+    indented = True"
