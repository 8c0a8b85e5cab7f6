"""GitHub token resolution with gh CLI fallback.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (CI / explicit override)
  2. `gh auth token` (GitHub CLI session — works after `gh auth login`)

This tool already needs gh for PR detection and the CI rollup, so anyone who
can run it normally has a gh session to borrow a token from.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def resolve_github_token(gh_path: str = "gh") -> str | None:
    """Return a GitHub token or None if no valid source is available.

    Never raises — the caller reports a missing token as a client error.
    """
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(
            [gh_path, "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh auth token unavailable: %s", e)
        return None

    if result.returncode == 0:
        gh_token = result.stdout.strip()
        if gh_token:
            logger.debug("Resolved GitHub token via gh CLI session.")
            return gh_token

    return None
