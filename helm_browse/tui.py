from __future__ import annotations

import logging
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key
from textual.message import Message
from textual.widgets import Static

from helm_browse.helm import (
    fetch_artifact,
    list_packages,
    list_repositories,
    list_versions,
    refresh_index,
)
from helm_browse.models import (
    Command,
    Event,
    FetchArtifact,
    FetchCommand,
    FetchFailed,
    FetchResult,
    KeyPressed,
    LoadPackages,
    LoadRepositories,
    LoadVersions,
    Quit,
    RefreshIndex,
    Session,
)
from helm_browse.navigation import initial_command, update
from helm_browse.rendering import render_frame

logger = logging.getLogger(__name__)


class FetchCompleted(Message):
    """Posted by a fetch worker when its helm invocation has finished."""

    def __init__(self, result: FetchResult) -> None:
        super().__init__()
        self.result = result


class HelmBrowserTui(App[None]):
    CSS = """
    #frame {
        padding: 0 2;
    }
    """
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [
        Binding("ctrl+c", "quit", show=False, priority=True),
    ]

    def __init__(
        self,
        *,
        helm_binary: str = "helm",
        output_dir: Path | None = None,
    ) -> None:
        super().__init__()
        self._helm_binary = helm_binary
        self._output_dir = output_dir if output_dir is not None else Path.cwd()
        self._session = Session()

    def compose(self) -> ComposeResult:
        yield Static(self._frame_text(), id="frame")

    def on_mount(self) -> None:
        self._issue(initial_command())

    def on_key(self, event: Key) -> None:
        self._apply(KeyPressed(event.key))
        event.stop()

    def on_fetch_completed(self, message: FetchCompleted) -> None:
        self._apply(message.result)

    def _apply(self, event: Event) -> None:
        command = update(self._session, event)
        self._refresh_frame()
        if command is not None:
            self._issue(command)

    def _refresh_frame(self) -> None:
        self.query_one("#frame", Static).update(self._frame_text())

    def _frame_text(self) -> Text:
        return Text.from_markup(render_frame(self._session))

    def _issue(self, command: Command) -> None:
        if isinstance(command, Quit):
            self.exit()
            return
        logger.debug("Issuing %r", command)
        self.run_worker(
            self._run_fetch(command),
            group="helm-fetch",
            exit_on_error=False,
        )

    async def _run_fetch(self, command: FetchCommand) -> None:
        try:
            result = await self._fetch(command)
        except Exception as exc:
            logger.debug("Fetch %r raised", command, exc_info=True)
            result = FetchFailed(f"Unexpected error: {exc!s}")
        self.post_message(FetchCompleted(result))

    async def _fetch(self, command: FetchCommand) -> FetchResult:
        if isinstance(command, RefreshIndex):
            return await refresh_index(binary=self._helm_binary)
        if isinstance(command, LoadRepositories):
            return await list_repositories(binary=self._helm_binary)
        if isinstance(command, LoadPackages):
            return await list_packages(command.repository, binary=self._helm_binary)
        if isinstance(command, LoadVersions):
            return await list_versions(command.package, binary=self._helm_binary)
        if isinstance(command, FetchArtifact):
            return await fetch_artifact(
                command.package,
                command.version,
                destination_dir=self._output_dir,
                binary=self._helm_binary,
            )
        raise TypeError(f"Unsupported command: {command!r}")
