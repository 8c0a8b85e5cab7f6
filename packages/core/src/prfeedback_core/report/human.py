"""Terminal report, laid out like a PR conversation on github.com.

``render_human`` returns rich ``Text`` lines styled with the semantic names
in ``STYLES``; printing them (and deciding whether colour is used at all) is
the caller's job.
"""

from __future__ import annotations

from datetime import datetime

from rich.text import Text

from prfeedback_core.models import Comment, Feedback, StatusCheck
from prfeedback_core.utils.hunk import render_hunk
from prfeedback_core.utils.timefmt import format_duration, format_relative, parse_timestamp

STYLES: dict[str, str] = {
    "title": "bold",
    "author": "bold",
    "open": "green",
    "muted": "bright_black",
    "warning": "yellow",
    "error": "red",
    "path": "blue",
    "command": "cyan",
    "addition": "green",
    "deletion": "red",
    "hunk_header": "cyan",
    "context": "",
}

_HUNK_INDENT = "    "


def _rule(width: int) -> Text:
    return Text("─" * width)


def _ago(now: datetime, timestamp: str) -> str | None:
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return None
    return format_relative(now, parsed)


def _body(body: str) -> list[Text]:
    return [Text(line) for line in body.split("\n")]


def _summary(feedback: Feedback) -> Text | None:
    comments, checks = feedback.comment_count, feedback.check_count
    if comments and checks:
        return Text.assemble(
            ("!", STYLES["warning"]), f" Found {comments} unresolved comment(s) and {checks} failing check(s)"
        )
    if comments:
        return Text.assemble(("!", STYLES["warning"]), f" Found {comments} unresolved comment(s)")
    if checks:
        return Text.assemble(("X", STYLES["error"]), f" Found {checks} failing check(s)")
    return None


def _general_block(c: Comment, now: datetime) -> list[Text]:
    header = Text.assemble((c.author, STYLES["author"]), " commented ")
    if c.author_association:
        header.append(f"({c.author_association.lower().capitalize()})", STYLES["muted"])
        header.append(" ")
    header.append("• " + (_ago(now, c.created_at) or ""), STYLES["muted"])
    return [header, Text(), *_body(c.body), Text()]


def _anchored_block(c: Comment, now: datetime) -> list[Text]:
    header = Text(c.author, STYLES["author"])
    if c.author_association and c.author_association != "NONE":
        header.append(" • ")
        header.append(c.author_association.lower(), STYLES["muted"])
    ago = _ago(now, c.created_at)
    if ago:
        header.append(" • ")
        header.append(ago, STYLES["muted"])
    if c.outdated:
        header.append(" • Outdated", STYLES["warning"])

    lines = [header, Text(), *_body(c.body), Text()]
    anchor = c.anchor
    if anchor is not None and anchor.path:
        location = anchor.path
        if anchor.line is not None and anchor.line > 0:
            location += f" on line {anchor.line}"
        lines.append(Text(location, STYLES["path"]))
        if anchor.diff_hunk and not c.outdated:
            lines.append(Text())
            for hunk_line in render_hunk(anchor.diff_hunk):
                lines.append(Text.assemble(_HUNK_INDENT, (hunk_line.text, STYLES[hunk_line.kind])))
    return lines


def _check_line(check: StatusCheck) -> Text:
    if check.conclusion == "CANCELLED":
        line = Text("⊘", STYLES["warning"])
    else:
        line = Text("✗", STYLES["error"])
    line.append(f" {check.name}")

    started = parse_timestamp(check.started_at)
    completed = parse_timestamp(check.completed_at)
    if started is not None and completed is not None:
        line.append(f" (took {format_duration(completed - started)})", STYLES["muted"])

    if check.check_command:
        line.append(" → ")
        line.append(check.check_command, STYLES["command"])
    return line


def render_human(feedback: Feedback, now: datetime, rule_width: int = 100) -> list[Text]:
    """Render the report as styled lines.

    ``now`` anchors every relative time, so the output depends only on the
    arguments. Sections with nothing in them are left out.
    """
    lines: list[Text] = [
        Text(f"{feedback.title} #{feedback.pr_number}", STYLES["title"]),
        Text.assemble(("Open", STYLES["open"]), " • ", (feedback.url, STYLES["muted"])),
    ]

    summary = _summary(feedback)
    if summary is not None:
        lines.extend([Text(), summary])
    lines.append(Text())

    for item in feedback.general_issues:
        lines.extend(_general_block(item, now))

    if feedback.comments:
        lines.extend([_rule(rule_width), Text()])
        last = len(feedback.comments) - 1
        for i, comment in enumerate(feedback.comments):
            lines.extend(_anchored_block(comment, now))
            if i < last:
                lines.extend([Text(), _rule(rule_width), Text()])

    if feedback.status_checks:
        lines.extend([Text(), _rule(rule_width), Text(), Text("Failed Checks", STYLES["title"]), Text()])
        lines.extend(_check_line(check) for check in feedback.status_checks)

    return lines
