from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class Screen(enum.Enum):
    """The screens of a browsing session, in drill-down order."""

    REFRESHING_INDEX = "refreshing-index"
    REPOSITORY_LIST = "repository-list"
    PACKAGE_LIST = "package-list"
    VERSION_LIST = "version-list"
    FETCHING = "fetching"
    COMPLETE = "complete"
    FAILED = "failed"


LIST_SCREENS = frozenset(
    {Screen.REPOSITORY_LIST, Screen.PACKAGE_LIST, Screen.VERSION_LIST}
)
TERMINAL_SCREENS = frozenset({Screen.COMPLETE, Screen.FAILED})


@dataclass(frozen=True)
class Repository:
    name: str
    url: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Repository:
        return cls(name=d.get("name", ""), url=d.get("url", ""))


@dataclass(frozen=True)
class Package:
    qualified_name: str
    version: str
    app_version: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Package:
        return cls(
            qualified_name=d.get("name", ""),
            version=d.get("version", ""),
            app_version=d.get("app_version", ""),
            description=d.get("description", ""),
        )

    @property
    def base_name(self) -> str:
        return base_name(self.qualified_name)


@dataclass(frozen=True)
class PackageVersion:
    qualified_name: str
    version: str
    app_version: str = ""
    created: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PackageVersion:
        return cls(
            qualified_name=d.get("name", ""),
            version=d.get("version", ""),
            app_version=d.get("app_version", ""),
            created=d.get("created", ""),
        )


def base_name(qualified_name: str) -> str:
    """Strip the ``{repository}/`` prefix from a chart name."""
    return qualified_name.rsplit("/", 1)[-1]


def values_file_name(qualified_name: str, version: str) -> str:
    return f"{base_name(qualified_name)}-{version}-default-values.yaml"


@dataclass
class SelectionPath:
    """Indices chosen on each list screen, used to restore the cursor on back."""

    repository: int = 0
    package: int = 0
    version: int = 0


@dataclass
class Session:
    """Mutable state of one browsing session, owned by the navigation loop."""

    screen: Screen = Screen.REFRESHING_INDEX
    repositories: list[Repository] = field(default_factory=list)
    packages: list[Package] = field(default_factory=list)
    versions: list[PackageVersion] = field(default_factory=list)
    selection: SelectionPath = field(default_factory=SelectionPath)
    cursor: int = 0
    loading: bool = True
    message: str = ""
    error: str = ""

    def active_items(self) -> list[Any]:
        """Return the list shown on the current screen, or an empty list."""
        if self.screen is Screen.REPOSITORY_LIST:
            return self.repositories
        if self.screen is Screen.PACKAGE_LIST:
            return self.packages
        if self.screen is Screen.VERSION_LIST:
            return self.versions
        return []

    @property
    def selected_repository(self) -> Repository | None:
        if 0 <= self.selection.repository < len(self.repositories):
            return self.repositories[self.selection.repository]
        return None

    @property
    def selected_package(self) -> Package | None:
        if 0 <= self.selection.package < len(self.packages):
            return self.packages[self.selection.package]
        return None


# Messages consumed by the navigation state machine.


@dataclass(frozen=True)
class IndexRefreshed:
    """``helm repo update`` finished successfully."""


@dataclass(frozen=True)
class RepositoriesLoaded:
    repositories: list[Repository]


@dataclass(frozen=True)
class PackagesLoaded:
    packages: list[Package]


@dataclass(frozen=True)
class VersionsLoaded:
    versions: list[PackageVersion]


@dataclass(frozen=True)
class ArtifactFetched:
    path: str


@dataclass(frozen=True)
class FetchFailed:
    """Any helm invocation or file write failed; ``error`` is shown verbatim."""

    error: str


@dataclass(frozen=True)
class KeyPressed:
    """A key event, named the way Textual names keys (``"enter"``, ``"j"``)."""

    key: str


FetchResult = (
    IndexRefreshed
    | RepositoriesLoaded
    | PackagesLoaded
    | VersionsLoaded
    | ArtifactFetched
    | FetchFailed
)
Event = FetchResult | KeyPressed


# Commands returned by the navigation state machine.


@dataclass(frozen=True)
class RefreshIndex:
    pass


@dataclass(frozen=True)
class LoadRepositories:
    pass


@dataclass(frozen=True)
class LoadPackages:
    repository: str


@dataclass(frozen=True)
class LoadVersions:
    package: str


@dataclass(frozen=True)
class FetchArtifact:
    """Download the default values of one chart version."""

    package: str
    version: str


@dataclass(frozen=True)
class Quit:
    """End the session and exit the application."""


FetchCommand = (
    RefreshIndex | LoadRepositories | LoadPackages | LoadVersions | FetchArtifact
)
Command = FetchCommand | Quit
