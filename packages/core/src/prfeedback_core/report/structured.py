"""JSON projection of a Feedback aggregate for automation.

Optional string fields are omitted when empty; line numbers and the reply id
are always present and may be null.
"""

from __future__ import annotations

import json

from prfeedback_core.errors import EncodingError
from prfeedback_core.models import Comment, Feedback, StatusCheck


def _comment_to_dict(c: Comment) -> dict:
    anchor = c.anchor
    d: dict = {
        "id": c.id,
        "body": c.body,
        "path": anchor.path if anchor else "",
        "line": anchor.line if anchor else None,
        "start_line": anchor.start_line if anchor else None,
    }
    if anchor and anchor.original_line is not None:
        d["original_line"] = anchor.original_line
    if anchor and anchor.diff_hunk:
        d["diff_hunk"] = anchor.diff_hunk
    d["author"] = c.author
    if c.author_association:
        d["author_association"] = c.author_association
    d["state"] = c.state
    d["in_reply_to_id"] = c.in_reply_to_id
    d["created_at"] = c.created_at
    d["updated_at"] = c.updated_at
    if c.outdated:
        d["outdated"] = True
    if c.subject_type:
        d["subject_type"] = c.subject_type
    return d


def _general_to_dict(c: Comment) -> dict:
    d: dict = {"id": c.id, "body": c.body, "author": c.author}
    if c.author_association:
        d["author_association"] = c.author_association
    d["state"] = c.state
    d["created_at"] = c.created_at
    d["updated_at"] = c.updated_at
    return d


def _check_to_dict(s: StatusCheck) -> dict:
    d: dict = {
        "name": s.name,
        "status": s.status,
        "conclusion": s.conclusion,
        "details_url": s.details_url,
    }
    if s.workflow_name:
        d["workflow_name"] = s.workflow_name
    if s.run_id:
        d["run_id"] = s.run_id
    d["started_at"] = s.started_at
    d["completed_at"] = s.completed_at
    if s.check_command:
        d["check_command"] = s.check_command
    return d


def render_structured(feedback: Feedback) -> dict:
    return {
        "pr_number": feedback.pr_number,
        "title": feedback.title,
        "url": feedback.url,
        "comments": [_comment_to_dict(c) for c in feedback.comments],
        "general_issues": [_general_to_dict(c) for c in feedback.general_issues],
        "status_checks": [_check_to_dict(s) for s in feedback.status_checks],
    }


def dumps_structured(feedback: Feedback) -> str:
    """Serialise the report as indented JSON, raising EncodingError on failure."""
    try:
        return json.dumps(render_structured(feedback), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"failed to encode JSON: {e}")
