"""Unified feedback model shared by the fetcher and the reporters.

Upstream payloads are decoded into the narrow types in
``prfeedback_core.gh.payloads`` first and mapped into these afterwards, so
nothing here mirrors a particular endpoint's field names or optionality.
"""

from __future__ import annotations

from dataclasses import dataclass, field

UNRESOLVED = "unresolved"

# Rollup conclusions that count as a failing check.
FAILING_CONCLUSIONS = frozenset({"FAILURE", "ERROR", "CANCELLED"})


@dataclass(frozen=True)
class Anchor:
    """Where a review comment is attached in the diff.

    ``line`` is None for file-level comments and for comments whose line no
    longer exists in the current diff; ``original_line`` then still points at
    the line the comment was written against.
    """

    path: str
    line: int | None = None
    start_line: int | None = None
    original_line: int | None = None
    diff_hunk: str = ""


@dataclass(frozen=True)
class Comment:
    """A unit of feedback: a line-anchored review comment or a PR-level item."""

    id: int
    body: str
    author: str
    created_at: str  # RFC 3339, as returned by GitHub
    updated_at: str
    author_association: str = ""
    state: str = UNRESOLVED
    anchor: Anchor | None = None
    in_reply_to_id: int | None = None
    outdated: bool = False
    subject_type: str = ""


@dataclass(frozen=True)
class StatusCheck:
    """A single failing CI check from the PR's status rollup."""

    name: str
    status: str
    conclusion: str
    details_url: str = ""
    workflow_name: str = ""
    run_id: str | None = None
    started_at: str = ""
    completed_at: str = ""
    check_command: str | None = None


@dataclass(frozen=True)
class Feedback:
    """Everything reported for one pull request.

    Built once by ``get_pr_feedback`` and only read afterwards.
    """

    pr_number: int
    title: str
    url: str
    comments: list[Comment] = field(default_factory=list)
    general_issues: list[Comment] = field(default_factory=list)
    status_checks: list[StatusCheck] = field(default_factory=list)

    @property
    def comment_count(self) -> int:
        return len(self.comments) + len(self.general_issues)

    @property
    def check_count(self) -> int:
        return len(self.status_checks)
