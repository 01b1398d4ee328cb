import asyncio
import json

import pytest

from helm_browse import helm
from helm_browse.helm import HelmOutputError, parse_json_list
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
)


class _FakeProcess:
    def __init__(self, returncode: int, stdout: bytes, stderr: bytes) -> None:
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    async def communicate(self) -> tuple[bytes, bytes]:
        return self._stdout, self._stderr


def _fake_helm(
    monkeypatch,
    *,
    stdout: bytes = b"",
    stderr: bytes = b"",
    returncode: int = 0,
) -> list[tuple[str, ...]]:
    calls: list[tuple[str, ...]] = []

    async def _fake_create_subprocess_exec(
        *args: str, **kwargs: object
    ) -> _FakeProcess:
        del kwargs
        calls.append(args)
        return _FakeProcess(returncode, stdout, stderr)

    monkeypatch.setattr(
        helm.asyncio, "create_subprocess_exec", _fake_create_subprocess_exec
    )
    return calls


def test_refresh_index_runs_repo_update(monkeypatch) -> None:
    calls = _fake_helm(monkeypatch)

    result = asyncio.run(helm.refresh_index(binary="helm"))

    assert result == IndexRefreshed()
    assert calls == [("helm", "repo", "update")]


def test_refresh_index_failure_carries_stderr(monkeypatch) -> None:
    _fake_helm(monkeypatch, returncode=1, stderr=b"Error: no repositories found\n")

    result = asyncio.run(helm.refresh_index())

    assert isinstance(result, FetchFailed)
    assert result.error.startswith("Failed to update repos:")
    assert "exit status 1" in result.error
    assert "no repositories found" in result.error


def test_list_repositories_parses_json(monkeypatch) -> None:
    payload = [
        {"name": "argo", "url": "https://argoproj.github.io/argo-helm"},
        {"name": "external-secrets", "url": "https://charts.external-secrets.io"},
    ]
    calls = _fake_helm(monkeypatch, stdout=json.dumps(payload).encode())

    result = asyncio.run(helm.list_repositories(binary="/opt/helm"))

    assert calls == [("/opt/helm", "repo", "list", "-o", "json")]
    assert result == RepositoriesLoaded(
        [
            Repository("argo", "https://argoproj.github.io/argo-helm"),
            Repository("external-secrets", "https://charts.external-secrets.io"),
        ]
    )


def test_list_repositories_empty_output_is_empty_list(monkeypatch) -> None:
    _fake_helm(monkeypatch, stdout=b"")

    result = asyncio.run(helm.list_repositories())

    assert result == RepositoriesLoaded([])


def test_list_repositories_parse_failure(monkeypatch) -> None:
    _fake_helm(monkeypatch, stdout=b"NAME\tURL\nargo\thttps://x\n")

    result = asyncio.run(helm.list_repositories())

    assert isinstance(result, FetchFailed)
    assert result.error.startswith("Failed to parse repos:")


def test_list_packages_searches_repository_prefix(monkeypatch) -> None:
    payload = [
        {
            "name": "argo/argo-cd",
            "version": "5.46.8",
            "app_version": "v2.8.4",
            "description": "A Helm chart for Argo CD",
        }
    ]
    calls = _fake_helm(monkeypatch, stdout=json.dumps(payload).encode())

    result = asyncio.run(helm.list_packages("argo"))

    assert calls == [("helm", "search", "repo", "argo/", "-o", "json")]
    assert result == PackagesLoaded(
        [Package("argo/argo-cd", "5.46.8", "v2.8.4", "A Helm chart for Argo CD")]
    )


def test_list_packages_failure_contains_stderr(monkeypatch) -> None:
    _fake_helm(monkeypatch, returncode=1, stderr=b"no such repo")

    result = asyncio.run(helm.list_packages("missing"))

    assert isinstance(result, FetchFailed)
    assert "no such repo" in result.error


def test_list_versions_keeps_helm_order(monkeypatch) -> None:
    payload = [
        {"name": "argo/argo-cd", "version": "5.46.8", "app_version": "v2.8.4"},
        {"name": "argo/argo-cd", "version": "5.46.10", "app_version": "v2.8.5"},
    ]
    calls = _fake_helm(monkeypatch, stdout=json.dumps(payload).encode())

    result = asyncio.run(helm.list_versions("argo/argo-cd"))

    assert calls == [
        ("helm", "search", "repo", "argo/argo-cd", "--versions", "-o", "json")
    ]
    assert isinstance(result, VersionsLoaded)
    assert [version.version for version in result.versions] == ["5.46.8", "5.46.10"]
    assert result.versions[0] == PackageVersion(
        "argo/argo-cd", "5.46.8", "v2.8.4", ""
    )


def test_spawn_failure_becomes_fetch_failed(monkeypatch) -> None:
    async def _raise(*args: str, **kwargs: object) -> _FakeProcess:
        del args, kwargs
        raise FileNotFoundError(2, "No such file or directory", "helm")

    monkeypatch.setattr(helm.asyncio, "create_subprocess_exec", _raise)

    result = asyncio.run(helm.list_versions("argo/argo-cd"))

    assert isinstance(result, FetchFailed)
    assert result.error.startswith("Failed to search versions: could not run helm")


def test_fetch_artifact_writes_raw_values(monkeypatch, tmp_path) -> None:
    values = b"# Default values for argo-cd.\nreplicaCount: 1\n"
    calls = _fake_helm(monkeypatch, stdout=values)

    result = asyncio.run(
        helm.fetch_artifact("argo/argo-cd", "5.46.8", destination_dir=tmp_path)
    )

    assert calls == [
        ("helm", "show", "values", "argo/argo-cd", "--version", "5.46.8")
    ]
    assert result == ArtifactFetched("argo-cd-5.46.8-default-values.yaml")
    destination = tmp_path / "argo-cd-5.46.8-default-values.yaml"
    assert destination.read_bytes() == values
    assert sorted(path.name for path in tmp_path.iterdir()) == [destination.name]


def test_fetch_artifact_subprocess_failure(monkeypatch, tmp_path) -> None:
    _fake_helm(monkeypatch, returncode=1, stderr=b"chart not found")

    result = asyncio.run(
        helm.fetch_artifact("argo/argo-cd", "0.0.0", destination_dir=tmp_path)
    )

    assert isinstance(result, FetchFailed)
    assert result.error.startswith("Failed to get chart values:")
    assert "chart not found" in result.error
    assert list(tmp_path.iterdir()) == []


def test_fetch_artifact_write_failure_leaves_no_file(monkeypatch, tmp_path) -> None:
    _fake_helm(monkeypatch, stdout=b"key: value\n")
    missing_dir = tmp_path / "missing"

    result = asyncio.run(
        helm.fetch_artifact("argo/argo-cd", "5.46.8", destination_dir=missing_dir)
    )

    assert isinstance(result, FetchFailed)
    assert result.error.startswith("Failed to write values file:")
    assert list(tmp_path.iterdir()) == []


def test_parse_json_list_rejects_non_list() -> None:
    with pytest.raises(HelmOutputError, match="expected a JSON list"):
        parse_json_list(b'{"name": "argo"}', Repository.from_dict)


def test_parse_json_list_rejects_non_object_items() -> None:
    with pytest.raises(HelmOutputError, match="expected a JSON object"):
        parse_json_list(b'["argo"]', Repository.from_dict)


def test_parse_json_list_defaults_missing_fields() -> None:
    assert parse_json_list(b'[{"name": "argo"}]', Repository.from_dict) == [
        Repository("argo", "")
    ]
