"""Tests for the human-readable and JSON reports."""

import json
from datetime import datetime, timezone

import pytest

from prfeedback_core.errors import EncodingError
from prfeedback_core.models import Anchor, Comment, Feedback, StatusCheck
from prfeedback_core.report import STYLES, dumps_structured, render_human, render_structured

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
RULE = "─" * 100


def _anchored(id=1, outdated=False, association="MEMBER", line=42, diff_hunk="@@ -40,2 +40,2 @@\n-old\n+new"):
    return Comment(
        id=id,
        body="Please rename this\nand add a test",
        author="alice",
        author_association=association,
        anchor=Anchor(path="src/main.go", line=line, original_line=42, diff_hunk=diff_hunk),
        created_at="2024-06-01T09:00:00Z",
        updated_at="2024-06-01T09:00:00Z",
        outdated=outdated,
        subject_type="line",
    )


def _general(id=10, association="OWNER"):
    return Comment(
        id=id,
        body="Overall looks good",
        author="bob",
        author_association=association,
        created_at="2024-05-31T12:00:00Z",
        updated_at="2024-05-31T12:00:00Z",
    )


def _check(name="Shellcheck", conclusion="FAILURE", run_id="16637926739"):
    return StatusCheck(
        name=name,
        status="COMPLETED",
        conclusion=conclusion,
        details_url=f"https://github.com/o/r/actions/runs/{run_id}/job/123" if run_id else "https://ci.example.com",
        workflow_name="CI",
        run_id=run_id,
        started_at="2024-06-01T10:00:00Z",
        completed_at="2024-06-01T10:02:05Z",
        check_command=f"gh run view {run_id}" if run_id else None,
    )


def _feedback(comments=(), general=(), checks=()):
    return Feedback(
        pr_number=7,
        title="Fix bug",
        url="https://github.com/o/r/pull/7",
        comments=list(comments),
        general_issues=list(general),
        status_checks=list(checks),
    )


def _plain(feedback):
    return [line.plain for line in render_human(feedback, NOW)]


# ---------------------------------------------------------------------------
# Human report
# ---------------------------------------------------------------------------


class TestRenderHuman:
    def test_header(self):
        lines = _plain(_feedback())
        assert lines[0] == "Fix bug #7"
        assert lines[1] == "Open • https://github.com/o/r/pull/7"

    def test_empty_feedback_has_no_sections(self):
        lines = _plain(_feedback())
        assert lines == ["Fix bug #7", "Open • https://github.com/o/r/pull/7", ""]
        assert not any("Found" in line for line in lines)
        assert RULE not in lines
        assert "Failed Checks" not in lines

    def test_end_to_end_comment_and_check(self):
        lines = _plain(_feedback(comments=[_anchored()], checks=[_check()]))
        assert "! Found 1 unresolved comment(s) and 1 failing check(s)" in lines
        assert "Failed Checks" in lines
        check_line = next(line for line in lines if "Shellcheck" in line)
        assert "16637926739" in check_line
        assert check_line == "✗ Shellcheck (took 2m 5s) → gh run view 16637926739"

    def test_summary_comments_only(self):
        lines = _plain(_feedback(general=[_general()], comments=[_anchored()]))
        assert "! Found 2 unresolved comment(s)" in lines

    def test_summary_checks_only(self):
        lines = _plain(_feedback(checks=[_check(), _check(name="lint")]))
        assert "X Found 2 failing check(s)" in lines

    def test_general_comment_block(self):
        lines = _plain(_feedback(general=[_general()]))
        assert "bob commented (Owner) • 1 day ago" in lines
        idx = lines.index("bob commented (Owner) • 1 day ago")
        assert lines[idx + 1] == ""
        assert lines[idx + 2] == "Overall looks good"

    def test_general_association_capitalised_like_a_title(self):
        lines = _plain(_feedback(general=[_general(association="FIRST_TIME_CONTRIBUTOR")]))
        assert any("(First_time_contributor)" in line for line in lines)

    def test_anchored_comment_block(self):
        lines = _plain(_feedback(comments=[_anchored()]))
        assert "alice • member • 3 hours ago" in lines
        assert "Please rename this" in lines
        assert "and add a test" in lines
        assert "src/main.go on line 42" in lines
        assert "    @@ -40,2 +40,2 @@" in lines
        assert "    -old" in lines
        assert "    +new" in lines

    def test_none_association_omitted(self):
        lines = _plain(_feedback(comments=[_anchored(association="NONE")]))
        assert "alice • 3 hours ago" in lines

    def test_outdated_marker_suppresses_hunk(self):
        lines = _plain(_feedback(comments=[_anchored(outdated=True)]))
        assert "alice • member • 3 hours ago • Outdated" in lines
        assert "src/main.go on line 42" in lines
        assert "    +new" not in lines

    def test_file_level_comment_has_no_line(self):
        lines = _plain(_feedback(comments=[_anchored(line=None, diff_hunk="")]))
        assert "src/main.go" in lines

    def test_rules_between_anchored_comments_but_not_after_last(self):
        lines = _plain(_feedback(comments=[_anchored(id=1), _anchored(id=2), _anchored(id=3)]))
        # One rule opening the section plus one between each pair.
        assert lines.count(RULE) == 3
        assert lines[-1] == "    +new"

    def test_general_comments_come_before_anchored(self):
        lines = _plain(_feedback(general=[_general()], comments=[_anchored()]))
        assert lines.index("Overall looks good") < lines.index(RULE) < lines.index("Please rename this")

    def test_cancelled_check_glyph_and_no_command(self):
        lines = _plain(_feedback(checks=[_check(name="deploy", conclusion="CANCELLED", run_id=None)]))
        assert "⊘ deploy (took 2m 5s)" in lines

    def test_check_without_timestamps(self):
        check = StatusCheck(name="ext", status="COMPLETED", conclusion="ERROR", started_at="0001-01-01T00:00:00Z")
        lines = _plain(_feedback(checks=[check]))
        assert lines[-1] == "✗ ext"

    def test_styles_applied(self):
        lines = render_human(_feedback(comments=[_anchored()]), NOW)
        addition = next(line for line in lines if line.plain == "    +new")
        assert any(span.style == STYLES["addition"] for span in addition.spans)

    def test_rendering_is_repeatable(self):
        feedback = _feedback(general=[_general()], comments=[_anchored()], checks=[_check()])
        assert _plain(feedback) == _plain(feedback)

    def test_rule_width(self):
        lines = [line.plain for line in render_human(_feedback(comments=[_anchored()]), NOW, rule_width=10)]
        assert "─" * 10 in lines


# ---------------------------------------------------------------------------
# Structured report
# ---------------------------------------------------------------------------


class TestRenderStructured:
    def test_top_level_shape(self):
        doc = render_structured(_feedback())
        assert doc == {
            "pr_number": 7,
            "title": "Fix bug",
            "url": "https://github.com/o/r/pull/7",
            "comments": [],
            "general_issues": [],
            "status_checks": [],
        }

    def test_anchored_comment_fields(self):
        doc = render_structured(_feedback(comments=[_anchored()]))
        c = doc["comments"][0]
        assert c["path"] == "src/main.go"
        assert c["line"] == 42
        assert c["start_line"] is None
        assert c["original_line"] == 42
        assert c["in_reply_to_id"] is None
        assert c["state"] == "unresolved"
        assert c["author_association"] == "MEMBER"
        assert c["subject_type"] == "line"
        assert "outdated" not in c

    def test_optional_fields_omitted(self):
        comment = Comment(id=1, body="x", author="a", created_at="", updated_at="", anchor=Anchor(path="f.py"))
        c = render_structured(_feedback(comments=[comment]))["comments"][0]
        assert "original_line" not in c
        assert "diff_hunk" not in c
        assert "author_association" not in c
        assert "subject_type" not in c
        # Nullable integers are always present.
        assert c["line"] is None and c["start_line"] is None

    def test_outdated_emitted_when_true(self):
        c = render_structured(_feedback(comments=[_anchored(outdated=True)]))["comments"][0]
        assert c["outdated"] is True

    def test_general_issue_fields(self):
        g = render_structured(_feedback(general=[_general()]))["general_issues"][0]
        assert set(g) == {"id", "body", "author", "author_association", "state", "created_at", "updated_at"}

    def test_status_check_fields(self):
        s = render_structured(_feedback(checks=[_check()]))["status_checks"][0]
        assert s["run_id"] == "16637926739"
        assert s["check_command"] == "gh run view 16637926739"
        assert s["workflow_name"] == "CI"

    def test_status_check_without_run_id(self):
        s = render_structured(_feedback(checks=[_check(run_id=None)]))["status_checks"][0]
        assert "run_id" not in s
        assert "check_command" not in s


class TestDumpsStructured:
    def test_round_trips_as_json(self):
        feedback = _feedback(comments=[_anchored()], checks=[_check()])
        assert json.loads(dumps_structured(feedback)) == render_structured(feedback)

    def test_byte_identical_across_calls(self):
        feedback = _feedback(general=[_general()], comments=[_anchored()], checks=[_check()])
        assert dumps_structured(feedback) == dumps_structured(feedback)

    def test_non_ascii_preserved(self):
        comment = Comment(id=1, body="naïve → ✓", author="a", created_at="", updated_at="")
        assert "naïve → ✓" in dumps_structured(_feedback(general=[comment]))

    def test_unserialisable_value_raises_encoding_error(self):
        comment = Comment(id=object(), body="x", author="a", created_at="", updated_at="")
        with pytest.raises(EncodingError):
            dumps_structured(_feedback(general=[comment]))
