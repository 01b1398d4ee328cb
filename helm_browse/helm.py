from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from helm_browse.models import (
    ArtifactFetched,
    FetchFailed,
    IndexRefreshed,
    Package,
    PackagesLoaded,
    PackageVersion,
    RepositoriesLoaded,
    Repository,
    VersionsLoaded,
    values_file_name,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HelmCommandError(RuntimeError):
    """helm could not be started or exited with a non-zero status."""


class HelmOutputError(ValueError):
    """helm printed something that is not the expected JSON list."""


async def run_helm(*args: str, binary: str = "helm") -> bytes:
    """Run one helm command to completion and return its standard output."""
    logger.debug("Running %s %s", binary, " ".join(args))
    try:
        process = await asyncio.create_subprocess_exec(
            binary,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise HelmCommandError(f"could not run {binary}: {exc}") from exc

    stdout, stderr = await process.communicate()
    logger.debug("%s %s exited with status %s", binary, args[0], process.returncode)
    if process.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        message = f"exit status {process.returncode}"
        if detail:
            message = f"{message}: {detail}"
        raise HelmCommandError(message)
    return stdout


def parse_json_list(output: bytes, factory: Callable[[dict[str, Any]], T]) -> list[T]:
    """Parse helm's ``-o json`` output; empty output is an empty list."""
    text = output.decode(errors="replace").strip()
    if not text:
        return []
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise HelmOutputError(str(exc)) from exc
    if document is None:
        return []
    if not isinstance(document, list):
        raise HelmOutputError(f"expected a JSON list, got {type(document).__name__}")
    items: list[T] = []
    for item in document:
        if not isinstance(item, dict):
            raise HelmOutputError(
                f"expected a JSON object, got {type(item).__name__}"
            )
        items.append(factory(item))
    return items


async def refresh_index(*, binary: str = "helm") -> IndexRefreshed | FetchFailed:
    try:
        await run_helm("repo", "update", binary=binary)
    except HelmCommandError as exc:
        return FetchFailed(f"Failed to update repos: {exc}")
    return IndexRefreshed()


async def list_repositories(
    *, binary: str = "helm"
) -> RepositoriesLoaded | FetchFailed:
    try:
        output = await run_helm("repo", "list", "-o", "json", binary=binary)
    except HelmCommandError as exc:
        return FetchFailed(f"Failed to list repos: {exc}")
    try:
        repositories = parse_json_list(output, Repository.from_dict)
    except HelmOutputError as exc:
        return FetchFailed(f"Failed to parse repos: {exc}")
    return RepositoriesLoaded(repositories)


async def list_packages(
    repository: str, *, binary: str = "helm"
) -> PackagesLoaded | FetchFailed:
    try:
        output = await run_helm(
            "search", "repo", f"{repository}/", "-o", "json", binary=binary
        )
    except HelmCommandError as exc:
        return FetchFailed(f"Failed to search charts: {exc}")
    try:
        packages = parse_json_list(output, Package.from_dict)
    except HelmOutputError as exc:
        return FetchFailed(f"Failed to parse charts: {exc}")
    return PackagesLoaded(packages)


async def list_versions(
    package: str, *, binary: str = "helm"
) -> VersionsLoaded | FetchFailed:
    # helm lists versions newest first; the order is kept as-is.
    try:
        output = await run_helm(
            "search", "repo", package, "--versions", "-o", "json", binary=binary
        )
    except HelmCommandError as exc:
        return FetchFailed(f"Failed to search versions: {exc}")
    try:
        versions = parse_json_list(output, PackageVersion.from_dict)
    except HelmOutputError as exc:
        return FetchFailed(f"Failed to parse versions: {exc}")
    return VersionsLoaded(versions)


def write_file_atomically(destination: Path, content: bytes) -> None:
    temporary_destination = destination.with_name(f"{destination.name}.part")
    try:
        temporary_destination.write_bytes(content)
        temporary_destination.replace(destination)
    except OSError:
        temporary_destination.unlink(missing_ok=True)
        raise


async def fetch_artifact(
    package: str,
    version: str,
    *,
    destination_dir: Path,
    binary: str = "helm",
) -> ArtifactFetched | FetchFailed:
    try:
        values = await run_helm(
            "show", "values", package, "--version", version, binary=binary
        )
    except HelmCommandError as exc:
        return FetchFailed(f"Failed to get chart values: {exc}")

    file_name = values_file_name(package, version)
    try:
        await asyncio.to_thread(
            write_file_atomically, destination_dir / file_name, values
        )
    except OSError as exc:
        return FetchFailed(f"Failed to write values file: {exc}")
    logger.debug("Wrote %d bytes to %s", len(values), destination_dir / file_name)
    return ArtifactFetched(file_name)
