"""CLI entry point for gh-pr-feedback.

Resolves which PR to report on (explicit number and repo, or whatever the
current branch points at), fetches its unresolved feedback and failing checks,
and prints them for a human or as JSON.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from prfeedback_core.config import load_config
from prfeedback_core.errors import EncodingError, FetchError, NoActivePR
from prfeedback_core.fetcher import get_pr_feedback, resolve_pr, resolve_repo
from prfeedback_core.gh.client import GhCli, GitHubClient
from prfeedback_core.report import dumps_structured, render_human
from prfeedback_cli.auth import resolve_github_token

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

_EPILOG = """\b
Examples:
  gh pr-feedback                        # Current PR in current directory
  gh pr-feedback 117                    # PR 117 in current repo
  gh pr-feedback 117 --repo owner/name  # PR 117 in specified repo
  gh pr-feedback /path/to/repo          # Current PR in specified directory
"""


class CommandError(click.ClickException):
    """A fatal error shown as ``Error: ...`` followed by optional hint lines."""

    def __init__(self, message: str, hints: list[str] | None = None):
        super().__init__(message)
        self.hints = list(hints or [])

    def show(self, file=None) -> None:
        super().show(file)
        if self.hints:
            click.echo("", file=file, err=True)
            for hint in self.hints:
                click.echo(hint, file=file, err=True)


class FeedbackCommand(click.Command):
    """Report malformed arguments with exit status 1, like every other failure."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _configure_logging(debug: bool) -> None:
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    for name in ("prfeedback_core", "prfeedback_cli"):
        pkg_logger = logging.getLogger(name)
        pkg_logger.setLevel(logging.DEBUG if debug else logging.WARNING)
        pkg_logger.handlers = [handler]


def _split_targets(targets: tuple[str, ...]) -> tuple[int | None, str | None]:
    """Split positional arguments into (PR number, directory).

    The first positive integer is the PR number; the first other argument is
    the directory, which must exist.
    """
    pr_number: int | None = None
    directory: str | None = None
    for arg in targets:
        if arg.isdigit() and int(arg) > 0:
            if pr_number is None:
                pr_number = int(arg)
        elif directory is None:
            if not os.path.exists(arg):
                raise CommandError(f"Directory '{arg}' does not exist")
            directory = arg
    return pr_number, directory


def _resolve_target(gh: GhCli, repo: str | None, pr_number: int | None) -> tuple[str, int]:
    if pr_number is not None and repo:
        return repo, pr_number
    if pr_number is not None:
        return resolve_repo(gh), pr_number
    detected_pr, detected_repo = resolve_pr(gh)
    if repo and repo != detected_repo:
        logger.warning("Ignoring --repo %s: the current branch's PR belongs to %s.", repo, detected_repo)
    return detected_repo, detected_pr


def _report(config: dict, repo: str | None, pr_number: int | None, json_output: bool) -> None:
    token = resolve_github_token(config["gh_path"])
    if not token:
        raise CommandError(
            "creating GitHub client: no GitHub token found.",
            hints=["Set GITHUB_TOKEN or run `gh auth login` first."],
        )
    client = GitHubClient(token, base_url=config["github_api_url"], per_page=config["per_page"])
    gh = GhCli(config["gh_path"], timeout=config["gh_timeout"])

    try:
        repo, pr_number = _resolve_target(gh, repo, pr_number)
    except NoActivePR as e:
        raise CommandError(str(e), hints=e.hints)

    try:
        feedback = get_pr_feedback(client, gh, repo, pr_number)
    except FetchError as e:
        raise CommandError(f"fetching PR feedback: {e}")

    if json_output:
        try:
            output = dumps_structured(feedback)
        except EncodingError as e:
            raise CommandError(str(e))
        click.echo(output)
        return

    now = datetime.now(timezone.utc)
    for line in render_human(feedback, now, rule_width=config["rule_width"]):
        console.print(line, soft_wrap=True)


@click.command(
    "gh-pr-feedback",
    cls=FeedbackCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=_EPILOG,
)
@click.version_option(
    None,
    "-v",
    "--version",
    package_name="gh-pr-feedback",
    prog_name="gh-pr-feedback",
    message="%(prog)s v%(version)s",
)
@click.argument("targets", nargs=-1, metavar="[PR-NUMBER|DIRECTORY]")
@click.option("--json", "-j", "json_output", is_flag=True, help="Output in JSON format.")
@click.option("--repo", "-R", default=None, metavar="OWNER/NAME", help="Repository name (owner/name).")
@click.option(
    "--config",
    "config_path",
    default=".pr-feedback.yml",
    show_default=True,
    envvar="PR_FEEDBACK_CONFIG",
    help="Path to the configuration file, relative to the target directory.",
)
@click.option("--debug", is_flag=True, help="Log API and gh calls to stderr.")
def main(targets: tuple[str, ...], json_output: bool, repo: str | None, config_path: str, debug: bool):
    """Extract unresolved review feedback and failing checks from a PR.

    \b
    PR-NUMBER   PR number to view feedback for
    DIRECTORY   Path to git repository (default: current directory)
    """
    pr_number, directory = _split_targets(targets)
    _configure_logging(debug)

    original_dir = os.getcwd()
    if directory is not None:
        try:
            os.chdir(directory)
        except OSError as e:
            raise CommandError(f"changing to directory '{directory}': {e}")

    try:
        try:
            config = load_config(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise CommandError(f"loading {config_path}: {e}")
        _report(config, repo, pr_number, json_output)
    finally:
        os.chdir(original_dir)
