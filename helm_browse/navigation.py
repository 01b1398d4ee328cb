"""Navigation state machine for the repository -> chart -> version drill-down.

``update`` is the only function that mutates a :class:`Session`. It applies a
single message and returns the command the driver has to run next, if any.
"""

from __future__ import annotations

import logging

from helm_browse.models import (
    LIST_SCREENS,
    TERMINAL_SCREENS,
    ArtifactFetched,
    Command,
    Event,
    FetchArtifact,
    FetchFailed,
    IndexRefreshed,
    KeyPressed,
    LoadPackages,
    LoadRepositories,
    LoadVersions,
    PackagesLoaded,
    Quit,
    RefreshIndex,
    RepositoriesLoaded,
    Screen,
    Session,
    VersionsLoaded,
)
from helm_browse.pagination import move_cursor, shortcut_index

logger = logging.getLogger(__name__)

QUIT_KEYS = frozenset({"q", "ctrl+c"})
UP_KEYS = frozenset({"up", "k"})
DOWN_KEYS = frozenset({"down", "j"})
SELECT_KEYS = frozenset({"enter", "space"})
BACK_KEYS = frozenset({"backspace", "escape"})


def initial_command() -> Command:
    return RefreshIndex()


def update(session: Session, message: Event) -> Command | None:
    if isinstance(message, KeyPressed):
        return _handle_key(session, message.key)

    if session.screen in TERMINAL_SCREENS:
        logger.debug("Ignoring %r on %s screen", message, session.screen.value)
        return None

    if isinstance(message, FetchFailed):
        session.screen = Screen.FAILED
        session.loading = False
        session.error = message.error
        return None

    if isinstance(message, IndexRefreshed):
        if session.screen is not Screen.REFRESHING_INDEX:
            return _ignore(session, message)
        session.screen = Screen.REPOSITORY_LIST
        session.loading = True
        return LoadRepositories()

    if isinstance(message, RepositoriesLoaded):
        if session.screen is not Screen.REPOSITORY_LIST:
            return _ignore(session, message)
        session.repositories = list(message.repositories)
        return _finish_loading(session)

    if isinstance(message, PackagesLoaded):
        if session.screen is not Screen.PACKAGE_LIST:
            return _ignore(session, message)
        session.packages = list(message.packages)
        return _finish_loading(session)

    if isinstance(message, VersionsLoaded):
        if session.screen is not Screen.VERSION_LIST:
            return _ignore(session, message)
        session.versions = list(message.versions)
        return _finish_loading(session)

    if isinstance(message, ArtifactFetched):
        if session.screen is not Screen.FETCHING:
            return _ignore(session, message)
        session.screen = Screen.COMPLETE
        session.loading = False
        session.message = f"Successfully downloaded: {message.path}"
        return None

    raise TypeError(f"Unsupported message: {message!r}")


def select(session: Session, index: int) -> Command | None:
    """Drill into row ``index`` of the active list.

    Invalid indices, empty lists and lists that are still loading leave the
    session untouched.
    """
    if session.screen not in LIST_SCREENS or session.loading:
        return None
    items = session.active_items()
    if not 0 <= index < len(items):
        return None

    if session.screen is Screen.REPOSITORY_LIST:
        session.selection.repository = index
        session.packages = []
        session.screen = Screen.PACKAGE_LIST
        session.cursor = 0
        session.loading = True
        return LoadPackages(session.repositories[index].name)

    if session.screen is Screen.PACKAGE_LIST:
        session.selection.package = index
        session.versions = []
        session.screen = Screen.VERSION_LIST
        session.cursor = 0
        session.loading = True
        return LoadVersions(session.packages[index].qualified_name)

    session.selection.version = index
    session.screen = Screen.FETCHING
    session.loading = True
    version = session.versions[index]
    return FetchArtifact(version.qualified_name, version.version)


def back(session: Session) -> None:
    # Back while a child list is loading is a no-op, not a cancel.
    if session.loading:
        return
    if session.screen is Screen.PACKAGE_LIST:
        session.screen = Screen.REPOSITORY_LIST
        session.cursor = session.selection.repository
        session.packages = []
    elif session.screen is Screen.VERSION_LIST:
        session.screen = Screen.PACKAGE_LIST
        session.cursor = session.selection.package
        session.versions = []


def _handle_key(session: Session, key: str) -> Command | None:
    if key in QUIT_KEYS or session.screen in TERMINAL_SCREENS:
        return Quit()
    if session.screen not in LIST_SCREENS or session.loading:
        return None

    total = len(session.active_items())
    if key in UP_KEYS:
        session.cursor = move_cursor(session.cursor, -1, total)
        return None
    if key in DOWN_KEYS:
        session.cursor = move_cursor(session.cursor, 1, total)
        return None
    if key in SELECT_KEYS:
        return select(session, session.cursor)
    if key in BACK_KEYS:
        back(session)
        return None

    index = shortcut_index(key, session.cursor, total)
    if index is not None:
        return select(session, index)
    return None


def _finish_loading(session: Session) -> None:
    session.loading = False
    session.cursor = 0


def _ignore(session: Session, message: Event) -> None:
    logger.debug("Ignoring %r on %s screen", message, session.screen.value)
