"""CLI entry point for ideae."""

import asyncio
import sys
from collections.abc import Coroutine
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import structlog

from ideae.attachments import decode_data_uri, image_markdown, read_clipboard_image, save_image
from ideae.config.settings import IdeaeSettings, load_settings
from ideae.engine.agent_tasks import AgentTaskService, AgentTaskTab
from ideae.engine.board import IssueBoard
from ideae.engine.reconciler import ActionOutcome, Reconciler
from ideae.enums import AgentTaskStatus, IssueStatus
from ideae.exceptions import ConfigurationError, IdeaeError, ProviderNotSupportedError
from ideae.providers.agents import AgentTaskProvider
from ideae.providers.base import IssueProvider
from ideae.providers.factory import create_agent_provider, resolve_provider, resolve_remote
from ideae.references import read_file_content
from ideae.store.agents import AgentTaskStore
from ideae.store.issues import IssueStore
from ideae.suggestions.engine import BODY_FIELD, TITLE_FIELD, Showing, SuggestionEngine
from ideae.suggestions.files import GitFileLister
from ideae.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

TASK_STATUS_ICONS = {
    AgentTaskStatus.DRAFT: "○",
    AgentTaskStatus.IN_PROGRESS: "◐",
    AgentTaskStatus.COMPLETED: "●",
    AgentTaskStatus.FAILED: "✗",
}


@dataclass
class AppContext:
    """Per-invocation state shared by all commands.

    Attributes:
        settings: Loaded settings
        cwd: Project directory
        offline: When set, no remote tracker is contacted
    """

    settings: IdeaeSettings
    cwd: Path
    offline: bool = False

    @property
    def data_dir(self) -> Path:
        return self.settings.data_dir(self.cwd)

    def issue_provider(self) -> IssueProvider | None:
        if self.offline:
            return None
        return resolve_provider(self.settings, self.cwd)

    def agent_provider(self) -> AgentTaskProvider | None:
        if self.offline:
            return None
        remote = resolve_remote(self.settings, self.cwd)
        if remote is None:
            return None
        try:
            return create_agent_provider(*remote)
        except ProviderNotSupportedError:
            log.debug("agent_provider_unavailable", provider=remote[0].value)
            return None


def _run_async(action: str, coro: Coroutine[Any, Any, None]) -> None:
    """Run a command coroutine and turn failures into exit codes."""
    try:
        asyncio.run(coro)
    except IdeaeError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug(f"{action}_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error(f"{action}_unexpected", exc_info=True)
        sys.exit(1)


async def _open_reconciler(app: AppContext, sync: bool = True) -> Reconciler:
    store = IssueStore(app.data_dir)
    await store.load()
    reconciler = Reconciler(store, app.issue_provider())

    if sync and reconciler.provider is not None:
        report = await reconciler.sync()
        if report.added:
            click.echo(f"Synced {len(report.added)} issue(s) from {reconciler.provider.kind}", err=True)
        if report.error:
            click.echo(f"Warning: remote sync failed: {report.error}", err=True)
    return reconciler


def _echo_outcome(outcome: ActionOutcome) -> None:
    click.echo(outcome.message)
    if outcome.degraded and outcome.error is not None:
        click.echo(f"Warning: {outcome.error.message}", err=True)


@click.group()
@click.option("--config", default=None, type=click.Path(dir_okay=False), help="Path to configuration file")
@click.option("--log-level", default=None, help="Logging level (overrides configuration)")
@click.option(
    "--cwd",
    default=".",
    type=click.Path(file_okay=False, exists=True),
    help="Project directory (default: current directory)",
)
@click.option("--offline", is_flag=True, help="Work on the local store only")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None, cwd: str, offline: bool) -> None:
    """ideae: local-first issue tracking that mirrors to GitHub or GitLab."""
    cwd_path = Path(cwd).resolve()

    try:
        settings = load_settings(config, cwd=cwd_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    configure_logging(log_level or settings.log_level)
    ctx.obj = AppContext(settings=settings, cwd=cwd_path, offline=offline)


@cli.command("list")
@click.option(
    "--status",
    type=click.Choice(["open", "closed", "all"]),
    default="all",
    show_default=True,
    help="Only show issues with this status",
)
@click.pass_obj
def list_issues(app: AppContext, status: str) -> None:
    """List tracked issues."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        board = IssueBoard(reconciler.store)
        lines = board.lines(None if status == "all" else IssueStatus(status))
        if not lines:
            click.echo("No issues")
        for line in lines:
            click.echo(line)

        stats = board.stats()
        click.echo(
            f"\n{stats.total} total, {stats.open} open, {stats.closed} closed, "
            f"{stats.synced} synced, {stats.local} local"
        )
        board.close()

    _run_async("list", run())


@cli.command()
@click.pass_obj
def sync(app: AppContext) -> None:
    """Import remote issues that are not tracked locally yet."""

    async def run() -> None:
        reconciler = await _open_reconciler(app, sync=False)
        if reconciler.provider is None:
            click.echo("No remote provider configured")
            return

        report = await reconciler.sync()
        if report.error:
            click.echo(f"Warning: remote sync failed: {report.error}", err=True)
            return
        click.echo(f"Added {len(report.added)} issue(s) from {reconciler.provider.kind}")

    _run_async("sync", run())


@cli.command()
@click.argument("title")
@click.option("--body", default="", help="Issue description; @path references are recorded")
@click.option("--label", "labels", multiple=True, help="Label to apply (repeatable)")
@click.pass_obj
def new(app: AppContext, title: str, body: str, labels: tuple[str, ...]) -> None:
    """Create an issue."""

    async def run() -> None:
        reconciler = await _open_reconciler(app, sync=False)
        _echo_outcome(await reconciler.create_issue(title, body=body, labels=list(labels)))

    _run_async("new", run())


@cli.command()
@click.argument("ref")
@click.option("--title", default=None, help="New title")
@click.option("--body", default=None, help="New description")
@click.pass_obj
def edit(app: AppContext, ref: str, title: str | None, body: str | None) -> None:
    """Edit an issue locally."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        _echo_outcome(await reconciler.update_issue(ref, title=title, body=body))

    _run_async("edit", run())


@cli.command()
@click.argument("ref")
@click.pass_obj
def close(app: AppContext, ref: str) -> None:
    """Close an issue."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        _echo_outcome(await reconciler.set_status(ref, IssueStatus.CLOSED))

    _run_async("close", run())


@cli.command()
@click.argument("ref")
@click.pass_obj
def reopen(app: AppContext, ref: str) -> None:
    """Reopen a closed issue."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        _echo_outcome(await reconciler.set_status(ref, IssueStatus.OPEN))

    _run_async("reopen", run())


@cli.command()
@click.argument("ref")
@click.pass_obj
def toggle(app: AppContext, ref: str) -> None:
    """Flip an issue between open and closed."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        _echo_outcome(await reconciler.toggle_status(ref))

    _run_async("toggle", run())


@cli.command()
@click.argument("ref")
@click.pass_obj
def push(app: AppContext, ref: str) -> None:
    """Create a local-only issue on the remote tracker."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        _echo_outcome(await reconciler.push_issue(ref))

    _run_async("push", run())


@cli.command("rm")
@click.argument("ref")
@click.pass_obj
def remove(app: AppContext, ref: str) -> None:
    """Delete an issue from the local store."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        _echo_outcome(await reconciler.remove_issue(ref))

    _run_async("rm", run())


@cli.command()
@click.argument("ref")
@click.option("--contents", is_flag=True, help="Print the referenced file contents")
@click.pass_obj
def show(app: AppContext, ref: str, contents: bool) -> None:
    """Show one issue with its files and remote comments."""

    async def run() -> None:
        reconciler = await _open_reconciler(app)
        issue = reconciler.resolve(ref)

        click.echo(f"{issue.reference_token} {issue.title}")
        where = f"{issue.remote.provider}" if issue.remote else "local"
        click.echo(f"Status: {issue.status} ({where})")
        if issue.labels:
            click.echo(f"Labels: {', '.join(issue.labels)}")
        click.echo(f"Created: {issue.created_at:%Y-%m-%d %H:%M}")
        if issue.body:
            click.echo(f"\n{issue.body}")

        if issue.files:
            click.echo("\nFiles:")
            for file_ref in issue.files:
                click.echo(f"  @{file_ref}")
                if contents:
                    text = await read_file_content(app.cwd, file_ref)
                    click.echo(text if text is not None else "  (missing)")

        comments = await reconciler.fetch_comments(issue.id)
        if comments:
            click.echo(f"\nComments ({len(comments)}):")
            for comment in comments:
                click.echo(f"\n{comment.author} ({comment.created_at:%Y-%m-%d %H:%M}):")
                click.echo(comment.body)

    _run_async("show", run())


@cli.command()
@click.argument("text")
@click.option(
    "--field",
    type=click.Choice([TITLE_FIELD, BODY_FIELD]),
    default=TITLE_FIELD,
    show_default=True,
    help="Field the text belongs to",
)
@click.option("--accept", "accept_index", type=int, default=None, help="Insert suggestion N and print the result")
@click.pass_obj
def suggest(app: AppContext, text: str, field: str, accept_index: int | None) -> None:
    """Show #issue or @file suggestions for the end of TEXT."""

    async def run() -> None:
        store = IssueStore(app.data_dir)
        await store.load()
        engine = SuggestionEngine(
            store,
            GitFileLister(app.cwd, limit=app.settings.file_suggestion_limit),
            issue_limit=app.settings.issue_suggestion_limit,
            file_limit=app.settings.file_suggestion_limit,
        )

        state = await engine.update(text, field=field)
        if not isinstance(state, Showing):
            click.echo("No suggestions")
            return

        if accept_index is not None:
            click.echo(engine.accept(text, field=field, index=accept_index))
            return

        for idx, item in enumerate(state.items):
            line = f"{idx:>3}  {item.label}"
            if item.description:
                line += f"  {item.description}"
            click.echo(line)

    _run_async("suggest", run())


@cli.command("paste-image")
@click.option("--data-uri", default=None, help="Base64 data URI; the clipboard is read when omitted")
@click.pass_obj
def paste_image(app: AppContext, data_uri: str | None) -> None:
    """Save a pasted image and print its markdown reference."""

    async def run() -> None:
        image = decode_data_uri(data_uri) if data_uri is not None else await read_clipboard_image()
        if image is None:
            raise IdeaeError("No image found")

        path = await save_image(app.data_dir, image)
        click.echo(image_markdown(path, app.cwd))

    _run_async("paste_image", run())


@cli.group()
def agent() -> None:
    """Coding-agent tasks (GitHub only)."""
    pass


async def _open_agent_service(app: AppContext) -> AgentTaskService:
    store = AgentTaskStore(app.data_dir)
    await store.load()
    return AgentTaskService(store, app.agent_provider(), list_limit=app.settings.agent_list_limit)


@agent.command("list")
@click.option(
    "--tab",
    type=click.Choice([tab.value for tab in AgentTaskTab]),
    default=AgentTaskTab.ALL.value,
    show_default=True,
)
@click.pass_obj
def agent_list(app: AppContext, tab: str) -> None:
    """List agent tasks."""

    async def run() -> None:
        service = await _open_agent_service(app)
        await service.refresh()

        tasks = service.filter_tasks(tab)
        if not tasks:
            click.echo("No agent tasks")
        for task in tasks:
            pr = f"#{task.pull_request_number}" if task.pull_request_number else "-"
            click.echo(f"{TASK_STATUS_ICONS[task.status]} {pr:<8} {task.title}  [{task.id}]")

    _run_async("agent_list", run())


@agent.command("refresh")
@click.pass_obj
def agent_refresh(app: AppContext) -> None:
    """Pull the agent task list from GitHub."""

    async def run() -> None:
        service = await _open_agent_service(app)
        if service.provider is None:
            click.echo("Agent tasks need a GitHub remote")
            return

        report = await service.refresh()
        if report.error:
            click.echo(f"Warning: refresh failed: {report.error}", err=True)
            return
        click.echo(f"{len(report.added)} new, {len(report.updated)} updated")

    _run_async("agent_refresh", run())


@agent.command("create")
@click.argument("description")
@click.option("--issue", "issue_number", type=int, default=None, help="Issue number the task relates to")
@click.pass_obj
def agent_create(app: AppContext, description: str, issue_number: int | None) -> None:
    """Start a coding-agent task."""

    async def run() -> None:
        service = await _open_agent_service(app)
        task = await service.create_task(description, issue_number)
        pr = f" (PR #{task.pull_request_number})" if task.pull_request_number else ""
        click.echo(f"Started agent task {task.id}{pr}")

    _run_async("agent_create", run())


@agent.command("view")
@click.argument("session_id")
@click.pass_obj
def agent_view(app: AppContext, session_id: str) -> None:
    """Print the log of an agent session."""

    async def run() -> None:
        service = await _open_agent_service(app)
        click.echo(await service.view_log(session_id))

    _run_async("agent_view", run())


if __name__ == "__main__":
    cli()
