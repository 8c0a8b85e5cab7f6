"""Narrow decoding types, one per upstream resource.

Each endpoint names and nests its fields differently (``user.login`` vs a flat
``author``, ``submitted_at`` vs ``created_at``, camelCase from gh). These
types only pick out what the report needs; the fetcher maps them into the
shared model. ``from_payload`` raises KeyError/TypeError/ValueError on
malformed input and the fetcher turns those into FetchError.
"""

from __future__ import annotations

from dataclasses import dataclass


def _login(data: dict) -> str:
    user = data.get("user") or {}
    return user.get("login") or ""


def _opt_int(value) -> int | None:
    if value is None:
        return None
    return int(value)


@dataclass
class PullPayload:
    """``GET repos/{repo}/pulls/{number}``"""

    number: int
    title: str
    html_url: str

    @classmethod
    def from_payload(cls, data: dict) -> PullPayload:
        return cls(number=int(data["number"]), title=data.get("title") or "", html_url=data.get("html_url") or "")


@dataclass
class ReviewCommentPayload:
    """One item of ``GET repos/{repo}/pulls/{number}/comments``."""

    id: int
    body: str
    path: str
    line: int | None
    start_line: int | None
    original_line: int | None
    diff_hunk: str
    login: str
    author_association: str
    in_reply_to_id: int | None
    created_at: str
    updated_at: str
    outdated: bool
    subject_type: str

    @classmethod
    def from_payload(cls, data: dict) -> ReviewCommentPayload:
        # GitHub nulls out ``position`` once the commented line is gone from the diff.
        subject_type = data.get("subject_type") or ""
        outdated = bool(data.get("outdated")) or (
            subject_type != "file" and "position" in data and data["position"] is None
        )
        return cls(
            id=int(data["id"]),
            body=data.get("body") or "",
            path=data.get("path") or "",
            line=_opt_int(data.get("line")),
            start_line=_opt_int(data.get("start_line")),
            original_line=_opt_int(data.get("original_line")),
            diff_hunk=data.get("diff_hunk") or "",
            login=_login(data),
            author_association=data.get("author_association") or "",
            in_reply_to_id=_opt_int(data.get("in_reply_to_id")),
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
            outdated=outdated,
            subject_type=subject_type,
        )


@dataclass
class IssueCommentPayload:
    """One item of ``GET repos/{repo}/issues/{number}/comments``."""

    id: int
    body: str
    login: str
    author_association: str
    created_at: str
    updated_at: str

    @classmethod
    def from_payload(cls, data: dict) -> IssueCommentPayload:
        return cls(
            id=int(data["id"]),
            body=data.get("body") or "",
            login=_login(data),
            author_association=data.get("author_association") or "",
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
        )


@dataclass
class ReviewPayload:
    """One item of ``GET repos/{repo}/pulls/{number}/reviews``."""

    id: int
    body: str
    state: str
    login: str
    author_association: str
    submitted_at: str

    @classmethod
    def from_payload(cls, data: dict) -> ReviewPayload:
        return cls(
            id=int(data["id"]),
            body=data.get("body") or "",
            state=data.get("state") or "",
            login=_login(data),
            author_association=data.get("author_association") or "",
            submitted_at=data.get("submitted_at") or "",
        )


@dataclass
class RollupEntryPayload:
    """One entry of ``gh pr view --json statusCheckRollup``.

    The rollup mixes check runs (``name``/``conclusion``/``detailsUrl``) with
    legacy commit statuses (``context``/``state``/``targetUrl``); both are
    folded into the check-run shape.
    """

    name: str
    status: str
    conclusion: str
    details_url: str
    workflow_name: str
    started_at: str
    completed_at: str

    @classmethod
    def from_payload(cls, data: dict) -> RollupEntryPayload:
        if data.get("__typename") == "StatusContext":
            return cls(
                name=data.get("context") or "",
                status="COMPLETED",
                conclusion=data.get("state") or "",
                details_url=data.get("targetUrl") or "",
                workflow_name="",
                started_at=data.get("startedAt") or "",
                completed_at="",
            )
        return cls(
            name=data.get("name") or "",
            status=data.get("status") or "",
            conclusion=data.get("conclusion") or "",
            details_url=data.get("detailsUrl") or "",
            workflow_name=data.get("workflowName") or "",
            started_at=data.get("startedAt") or "",
            completed_at=data.get("completedAt") or "",
        )
