"""Exception types raised while gathering PR feedback.

- FeedbackError: base for everything below
- NoActivePR: the PR number / repository could not be inferred from context
- FetchError: a required resource could not be fetched or decoded (fatal)
- ChecksFetchWarning: the CI rollup could not be fetched (non-fatal)
- EncodingError: the structured report could not be serialised
- ToolError: the gh CLI failed to run or exited non-zero
"""

from __future__ import annotations

__all__ = [
    "FeedbackError",
    "NoActivePR",
    "FetchError",
    "ChecksFetchWarning",
    "EncodingError",
    "ToolError",
]


class FeedbackError(Exception):
    """Base exception for pr-feedback errors."""


class ToolError(FeedbackError):
    """Raised when an external ``gh`` invocation fails."""

    def __init__(self, args: list[str], message: str):
        self.tool_args = list(args)
        super().__init__(f"gh {' '.join(args)}: {message}")


class NoActivePR(FeedbackError):
    """Raised when no PR or repository can be inferred from the working directory.

    ``hints`` holds remediation lines the CLI prints after the error.
    """

    def __init__(self, message: str, hints: list[str] | None = None):
        self.hints = list(hints or [])
        super().__init__(message)


class FetchError(FeedbackError):
    """Raised when PR metadata, comments or reviews cannot be fetched."""


class ChecksFetchWarning(FeedbackError):
    """Raised when the status check rollup cannot be fetched.

    The orchestrator catches this one and continues with no checks.
    """


class EncodingError(FeedbackError):
    """Raised when the structured report cannot be serialised to JSON."""
