from __future__ import annotations

from typing import NamedTuple

ADDITION = "addition"
DELETION = "deletion"
HUNK_HEADER = "hunk_header"
CONTEXT = "context"

_KIND_BY_PREFIX = {"+": ADDITION, "-": DELETION, "@": HUNK_HEADER}


class HunkLine(NamedTuple):
    kind: str
    text: str


def render_hunk(diff_hunk: str) -> list[HunkLine]:
    """Split a unified-diff fragment into lines tagged by their first character.

    Empty lines are dropped. The tags are semantic; mapping them to colours is
    left to the reporter.
    """
    return [HunkLine(_KIND_BY_PREFIX.get(line[0], CONTEXT), line) for line in diff_hunk.split("\n") if line]
