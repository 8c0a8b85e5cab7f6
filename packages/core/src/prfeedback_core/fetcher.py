"""Gather a PR's unresolved feedback into a single Feedback aggregate.

Steps run sequentially: PR metadata -> review comments -> issue comments ->
review summaries -> failing checks. Every step except the last is fatal and
raises FetchError; a failing check rollup is logged and reported as empty.

"Unresolved" is approximated: an anchored comment is unresolved when it is not
a reply (the thread's root); issue comments and COMMENTED review bodies are
included as they are, since the REST API has no resolution flag for them.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

from github import GithubException

from prfeedback_core.errors import ChecksFetchWarning, FetchError, NoActivePR, ToolError
from prfeedback_core.gh.payloads import (
    IssueCommentPayload,
    PullPayload,
    ReviewCommentPayload,
    ReviewPayload,
    RollupEntryPayload,
)
from prfeedback_core.models import FAILING_CONCLUSIONS, UNRESOLVED, Anchor, Comment, Feedback, StatusCheck

if TYPE_CHECKING:
    from prfeedback_core.gh.client import GhCli, GitHubClient

logger = logging.getLogger(__name__)

_RUN_ID_RE = re.compile(r"/actions/runs/(\d+)(?:[/?#]|$)")

# requests' transport errors derive from OSError.
_TRANSPORT_ERRORS = (GithubException, OSError, ValueError)
_DECODE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)

_NO_PR_HINTS = [
    "Make sure you're in a git repository with an open PR.",
    "You can check PR status with: gh pr status",
    "Or specify a PR number: gh pr-feedback 123 --repo owner/name",
]


# --------------------------------------------------------------------------- #
# Context resolution                                                          #
# --------------------------------------------------------------------------- #


def _parse_tool_json(raw: str, what: str) -> dict:
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise NoActivePR(f"failed to parse {what}: {e}", hints=_NO_PR_HINTS)
    if not isinstance(data, dict):
        raise NoActivePR(f"failed to parse {what}: expected a JSON object", hints=_NO_PR_HINTS)
    return data


def resolve_repo(gh: GhCli) -> str:
    """Return ``owner/name`` of the repository in the current directory."""
    try:
        raw = gh.run(["repo", "view", "--json", "nameWithOwner"])
    except ToolError as e:
        raise NoActivePR(
            f"couldn't determine repository: {e}",
            hints=["Use --repo to specify the repository (e.g., --repo owner/name)"],
        )
    repo = _parse_tool_json(raw, "repository data").get("nameWithOwner")
    if not isinstance(repo, str) or "/" not in repo:
        raise NoActivePR("failed to parse repository data", hints=_NO_PR_HINTS)
    return repo


def resolve_pr(gh: GhCli) -> tuple[int, str]:
    """Return (PR number, ``owner/name``) for the current branch's pull request."""
    try:
        raw = gh.run(["pr", "view", "--json", "number"])
    except ToolError as e:
        logger.debug("gh pr view failed: %s", e)
        raise NoActivePR("no PR found for current branch", hints=_NO_PR_HINTS)
    number = _parse_tool_json(raw, "PR data").get("number")
    if not isinstance(number, int) or isinstance(number, bool) or number <= 0:
        raise NoActivePR("failed to parse PR data", hints=_NO_PR_HINTS)
    return number, resolve_repo(gh)


# --------------------------------------------------------------------------- #
# REST sources                                                                #
# --------------------------------------------------------------------------- #


def _get(client: GitHubClient, endpoint: str, what: str, paginated: bool = True):
    try:
        return client.get_list(endpoint) if paginated else client.get_json(endpoint)
    except _TRANSPORT_ERRORS as e:
        raise FetchError(f"failed to fetch {what}: {e}")


def _decode(payload_cls, items, what: str) -> list:
    try:
        return [payload_cls.from_payload(item) for item in items]
    except _DECODE_ERRORS as e:
        raise FetchError(f"failed to decode {what}: {type(e).__name__}: {e}")


def fetch_pr_meta(client: GitHubClient, repo: str, pr_number: int) -> PullPayload:
    data = _get(client, f"repos/{repo}/pulls/{pr_number}", "PR details", paginated=False)
    return _decode(PullPayload, [data], "PR details")[0]


def fetch_anchored_comments(client: GitHubClient, repo: str, pr_number: int) -> list[Comment]:
    """Return top-level review comments; replies belong to an already-started thread."""
    items = _get(client, f"repos/{repo}/pulls/{pr_number}/comments", "review comments")
    comments = []
    for c in _decode(ReviewCommentPayload, items, "review comments"):
        if c.in_reply_to_id is not None:
            continue
        comments.append(
            Comment(
                id=c.id,
                body=c.body,
                author=c.login,
                author_association=c.author_association,
                state=UNRESOLVED,
                anchor=Anchor(
                    path=c.path,
                    line=c.line,
                    start_line=c.start_line,
                    original_line=c.original_line,
                    diff_hunk=c.diff_hunk,
                )
                if c.path
                else None,
                in_reply_to_id=c.in_reply_to_id,
                created_at=c.created_at,
                updated_at=c.updated_at,
                outdated=c.outdated,
                subject_type=c.subject_type,
            )
        )
    return comments


def fetch_general_comments(client: GitHubClient, repo: str, pr_number: int) -> list[Comment]:
    items = _get(client, f"repos/{repo}/issues/{pr_number}/comments", "issue comments")
    return [
        Comment(
            id=c.id,
            body=c.body,
            author=c.login,
            author_association=c.author_association,
            state=UNRESOLVED,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )
        for c in _decode(IssueCommentPayload, items, "issue comments")
    ]


def fetch_review_summaries(client: GitHubClient, repo: str, pr_number: int) -> list[Comment]:
    """Return the bodies of plain COMMENTED reviews.

    Approvals and change requests are verdicts, not discussion, and are skipped
    even when they carry a body.
    """
    items = _get(client, f"repos/{repo}/pulls/{pr_number}/reviews", "reviews")
    return [
        Comment(
            id=r.id,
            body=r.body,
            author=r.login,
            author_association=r.author_association,
            state=UNRESOLVED,
            created_at=r.submitted_at,
            updated_at=r.submitted_at,
        )
        for r in _decode(ReviewPayload, items, "reviews")
        if r.body and r.state == "COMMENTED"
    ]


# --------------------------------------------------------------------------- #
# CI rollup                                                                   #
# --------------------------------------------------------------------------- #


def extract_run_id(details_url: str) -> str | None:
    """Return the Actions run id from ``.../actions/runs/{id}/...``, or None."""
    match = _RUN_ID_RE.search(details_url or "")
    return match.group(1) if match else None


def fetch_failing_checks(gh: GhCli, repo: str, pr_number: int) -> list[StatusCheck]:
    """Return the failed, errored or cancelled checks from the PR's status rollup."""
    try:
        raw = gh.run(["pr", "view", str(pr_number), "--repo", repo, "--json", "statusCheckRollup"])
    except ToolError as e:
        raise ChecksFetchWarning(f"failed to get status checks: {e}")

    try:
        rollup = json.loads(raw).get("statusCheckRollup") or []
        entries = [RollupEntryPayload.from_payload(entry) for entry in rollup]
    except _DECODE_ERRORS as e:
        raise ChecksFetchWarning(f"failed to parse status checks: {e}")

    checks = []
    for entry in entries:
        if entry.conclusion not in FAILING_CONCLUSIONS:
            continue
        run_id = extract_run_id(entry.details_url)
        checks.append(
            StatusCheck(
                name=entry.name,
                status=entry.status,
                conclusion=entry.conclusion,
                details_url=entry.details_url,
                workflow_name=entry.workflow_name,
                run_id=run_id,
                started_at=entry.started_at,
                completed_at=entry.completed_at,
                check_command=f"gh run view {run_id}" if run_id else None,
            )
        )
    return checks


# --------------------------------------------------------------------------- #
# Orchestration                                                               #
# --------------------------------------------------------------------------- #


def get_pr_feedback(client: GitHubClient, gh: GhCli, repo: str, pr_number: int) -> Feedback:
    """Fetch and assemble the feedback report for ``repo``#``pr_number``.

    Raises FetchError if any REST source fails; nothing partial is returned.
    """
    pr = fetch_pr_meta(client, repo, pr_number)
    comments = fetch_anchored_comments(client, repo, pr_number)
    general = fetch_general_comments(client, repo, pr_number)
    general.extend(fetch_review_summaries(client, repo, pr_number))

    try:
        checks = fetch_failing_checks(gh, repo, pr_number)
    except ChecksFetchWarning as e:
        logger.warning("Failed to fetch status checks: %s", e)
        checks = []

    logger.debug(
        "PR #%d: %d anchored comment(s), %d general item(s), %d failing check(s)",
        pr.number,
        len(comments),
        len(general),
        len(checks),
    )
    return Feedback(
        pr_number=pr.number,
        title=pr.title,
        url=pr.html_url,
        comments=comments,
        general_issues=general,
        status_checks=checks,
    )
