"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_helm_binary() -> str:
    """Return the helm executable, honouring ``HELM_BIN`` like helm plugins do."""
    return os.environ.get("HELM_BIN", "") or "helm"


def _default_output_dir() -> Path:
    output_dir = os.environ.get("HELM_BROWSE_OUTPUT_DIR", "")
    if output_dir:
        return Path(output_dir)
    return Path.cwd()


def _default_log_file() -> Path | None:
    log_file = os.environ.get("HELM_BROWSE_LOG_FILE", "")
    if log_file:
        return Path(log_file)
    return None


@dataclass
class Settings:
    helm_binary: str = field(default_factory=_default_helm_binary)
    output_dir: Path = field(default_factory=_default_output_dir)
    log_file: Path | None = field(default_factory=_default_log_file)


# Global singleton
settings = Settings()
