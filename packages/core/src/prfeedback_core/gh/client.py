"""The two external capabilities the fetcher depends on.

``GitHubClient`` does REST reads through PyGithub's requester; ``GhCli`` runs
the GitHub CLI for the pieces the REST surface used here does not expose
(the current branch's PR and the status check rollup).
"""

from __future__ import annotations

import logging
import re
import subprocess

from github import Auth, Github

from prfeedback_core.errors import ToolError

logger = logging.getLogger(__name__)

_MAX_PER_PAGE = 100  # GitHub ignores larger page sizes
_LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="([^"]+)"')


def _next_link(headers: dict) -> str | None:
    """Return the ``rel="next"`` URL from a response's Link header, if any."""
    link = next((v for k, v in (headers or {}).items() if k.lower() == "link"), "")
    for url, rel in _LINK_RE.findall(link):
        if rel == "next":
            return url
    return None


class GitHubClient:
    def __init__(self, token: str, base_url: str = "https://api.github.com", per_page: int = 100):
        self._per_page = max(1, min(int(per_page), _MAX_PER_PAGE))
        # retry=None: a failed request fails the run instead of being retried.
        self._gh = Github(auth=Auth.Token(token), base_url=base_url, per_page=self._per_page, retry=None)

    @staticmethod
    def _url(endpoint: str) -> str:
        return endpoint if endpoint.startswith(("/", "http://", "https://")) else "/" + endpoint

    def get_json(self, endpoint: str, parameters: dict | None = None):
        """GET ``endpoint`` (relative to the API root) and return the decoded JSON.

        Raises GithubException on HTTP errors; transport errors propagate as raised
        by requests.
        """
        _, data = self._request(self._url(endpoint), parameters)
        return data

    def get_list(self, endpoint: str) -> list:
        """GET every page of a list endpoint, following Link headers, and concatenate the items."""
        items: list = []
        url: str | None = self._url(endpoint)
        parameters: dict | None = {"per_page": self._per_page}
        while url:
            headers, batch = self._request(url, parameters)
            if not isinstance(batch, list):
                raise ValueError(f"expected a JSON array from {endpoint}, got {type(batch).__name__}")
            items.extend(batch)
            # The next link already carries the query string.
            url, parameters = _next_link(headers), None
        return items

    def _request(self, url: str, parameters: dict | None):
        logger.debug("GET %s %s", url, parameters or "")
        return self._gh.requester.requestJsonAndCheck("GET", url, parameters=parameters)


class GhCli:
    def __init__(self, gh_path: str = "gh", timeout: float | None = None):
        self._gh_path = gh_path
        self._timeout = timeout

    def run(self, args: list[str]) -> str:
        """Run ``gh`` with ``args`` in the current directory and return its stdout."""
        logger.debug("Running %s %s", self._gh_path, " ".join(args))
        try:
            result = subprocess.run(
                [self._gh_path, *args],
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError:
            raise ToolError(args, f"{self._gh_path!r} not found; install the GitHub CLI")
        except subprocess.TimeoutExpired:
            raise ToolError(args, f"timed out after {self._timeout}s")
        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit status {result.returncode}"
            raise ToolError(args, detail)
        return result.stdout
