from __future__ import annotations

from collections.abc import Callable
from typing import Any

from rich.markup import escape

from helm_browse.models import (
    LIST_SCREENS,
    TERMINAL_SCREENS,
    Package,
    PackageVersion,
    Repository,
    Screen,
    Session,
    base_name,
)
from helm_browse.pagination import (
    PAGE_SIZE,
    current_page,
    page_end,
    page_start,
    total_pages,
)

TITLE_STYLE = "bold color(205)"
SELECTED_STYLE = "bold color(86)"
HELP_STYLE = "color(241)"
ERROR_STYLE = "bold color(196)"
PRIMARY_STYLE = "bold color(39)"
SECONDARY_STYLE = "color(140)"
LATEST_STYLE = "bold color(46)"

CURSOR_MARKER = "► "
NAVIGATE_HELP = "Navigate: ↑/↓ arrows or j/k"
SELECT_HELP = "Select: Enter/Space or number (1-9,0 for items on current page)"
BACK_HELP = "Back: Backspace/Esc"
QUIT_HELP = "Quit: q/Ctrl+C"


def styled(text: str, style: str) -> str:
    return f"[{style}]{escape(text)}[/]"


def format_row_number(index: int) -> str:
    return f"{index + 1}."


def format_repository_row(repository: Repository) -> str:
    return (
        f"{styled(f'{repository.name:<20}', PRIMARY_STYLE)} "
        f"{styled(repository.url, SECONDARY_STYLE)}"
    )


def format_package_row(package: Package) -> str:
    return (
        f"{styled(f'{package.base_name:<30}', PRIMARY_STYLE)} "
        f"{styled(f'v{package.version}', SECONDARY_STYLE)}"
    )


def format_version_row(version: PackageVersion, *, latest: bool) -> str:
    if version.app_version:
        app_version = styled(f"{version.app_version:<15}", SECONDARY_STYLE)
    else:
        app_version = f"{'─':<15}"
    line = f"{styled(f'{version.version:<15}', PRIMARY_STYLE)} {app_version}"
    if latest:
        # helm returns versions newest first; index 0 is latest by convention.
        line += f" {styled('LATEST', LATEST_STYLE)}"
    return line


def render_table(
    items: list[Any],
    cursor: int,
    columns: list[tuple[str, int]],
    format_row: Callable[[int, Any], str],
) -> list[str]:
    """Render the page of ``items`` that contains ``cursor``.

    The first two lines are the column header and its underline; every
    following line is one row, with the cursor row carrying the marker.
    """
    header = " ".join(f"{label:<{width}}" for label, width in columns)
    underline = " ".join(
        f"{'─' * min(len(label), width):<{width}}" for label, width in columns
    )
    lines = [
        escape(f"  {'':<4} {header}".rstrip()),
        escape(f"  {'────':<4} {underline}".rstrip()),
    ]

    for index in range(page_start(cursor), page_end(cursor, len(items))):
        line = f"{format_row_number(index):<4} {format_row(index, items[index])}"
        if index == cursor:
            lines.append(f"[{SELECTED_STYLE}]{escape(CURSOR_MARKER)}{line}[/]")
        else:
            lines.append(f"  {line}")
    return lines


def render_pagination_summary(total: int, cursor: int, noun: str) -> str | None:
    if total > PAGE_SIZE:
        return styled(
            f"Page {current_page(cursor) + 1} of {total_pages(total)} • "
            f"{total} total {noun}",
            HELP_STYLE,
        )
    if total > 1:
        return styled(f"{total} {noun} available", HELP_STYLE)
    return None


def render_breadcrumb(session: Session) -> str:
    parts: list[str] = []
    if session.screen in {
        Screen.PACKAGE_LIST,
        Screen.VERSION_LIST,
        Screen.FETCHING,
        Screen.COMPLETE,
    }:
        repository = session.selected_repository
        if repository is not None:
            parts.append(repository.name)
    if session.screen in {Screen.VERSION_LIST, Screen.FETCHING, Screen.COMPLETE}:
        package = session.selected_package
        if package is not None:
            parts.append(package.base_name)
    if session.screen in {Screen.FETCHING, Screen.COMPLETE}:
        if 0 <= session.selection.version < len(session.versions):
            parts.append(session.versions[session.selection.version].version)
    return styled(" > ".join(parts), HELP_STYLE) if parts else ""


def render_help(session: Session) -> list[str]:
    """List the keys that act on the current screen."""
    screen = session.screen
    if screen in TERMINAL_SCREENS:
        return [styled("Press any key to exit the application", HELP_STYLE)]
    if session.loading or screen not in LIST_SCREENS:
        return [styled(QUIT_HELP, HELP_STYLE)]
    keys = [NAVIGATE_HELP, SELECT_HELP]
    if screen is not Screen.REPOSITORY_LIST:
        keys.append(BACK_HELP)
    keys.append(QUIT_HELP)
    return [
        styled(" • ".join(keys), HELP_STYLE),
        styled(
            "Tip: Use arrow keys to navigate through pages of results", HELP_STYLE
        ),
    ]


def _render_repository_list(session: Session) -> list[str]:
    if session.loading:
        return ["Loading repositories..."]
    lines = ["Select a Helm repository:", ""]
    lines.extend(
        render_table(
            session.repositories,
            session.cursor,
            [("REPOSITORY", 20), ("URL", 35)],
            lambda _index, repository: format_repository_row(repository),
        )
    )
    summary = render_pagination_summary(
        len(session.repositories), session.cursor, "repositories"
    )
    return [*lines, "", summary] if summary else lines


def _render_package_list(session: Session) -> list[str]:
    if session.loading:
        return ["Loading charts..."]
    repository = session.selected_repository
    repository_name = repository.name if repository is not None else ""
    lines = [f"Charts in repository '{escape(repository_name)}':", ""]
    lines.extend(
        render_table(
            session.packages,
            session.cursor,
            [("CHART NAME", 30), ("VERSION", 7)],
            lambda _index, package: format_package_row(package),
        )
    )
    summary = render_pagination_summary(
        len(session.packages), session.cursor, "charts"
    )
    return [*lines, "", summary] if summary else lines


def _render_version_list(session: Session) -> list[str]:
    if session.loading:
        return ["Loading versions..."]
    package = session.selected_package
    package_name = base_name(package.qualified_name) if package is not None else ""
    lines = [f"Versions of chart '{escape(package_name)}':", ""]
    lines.extend(
        render_table(
            session.versions,
            session.cursor,
            [("CHART VERSION", 15), ("APP VERSION", 15)],
            lambda index, version: format_version_row(version, latest=index == 0),
        )
    )
    summary = render_pagination_summary(
        len(session.versions), session.cursor, "versions"
    )
    return [*lines, "", summary] if summary else lines


def render_body(session: Session) -> list[str]:
    if session.screen is Screen.REFRESHING_INDEX:
        return ["Updating Helm repositories..."]
    if session.screen is Screen.REPOSITORY_LIST:
        return _render_repository_list(session)
    if session.screen is Screen.PACKAGE_LIST:
        return _render_package_list(session)
    if session.screen is Screen.VERSION_LIST:
        return _render_version_list(session)
    if session.screen is Screen.FETCHING:
        return ["Downloading values.yaml..."]
    if session.screen is Screen.COMPLETE:
        return [
            escape(session.message),
            "",
            styled("Press any key to exit...", SELECTED_STYLE),
        ]
    return [styled(f"Error: {session.error}", ERROR_STYLE)]


def render_frame(session: Session) -> str:
    lines = [styled("Helm Chart Browser", TITLE_STYLE), ""]
    breadcrumb = render_breadcrumb(session)
    if breadcrumb:
        lines.extend([breadcrumb, ""])
    lines.extend(render_body(session))
    help_lines = render_help(session)
    if help_lines:
        lines.append("")
        lines.extend(help_lines)
    return "\n".join(lines)
