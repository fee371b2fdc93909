"""Immutable per-run release state.

The classic pipeline stored the application name and version in job-wide
environment variables. Here they are extracted once, frozen into a
``ReleaseContext``, and handed to every stage explicitly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .config import Config

__all__ = [
    "Credentials",
    "ManifestKind",
    "ReleaseContext",
    "ReleaseMetadata",
]

ManifestKind = Literal["maven", "node"]


@dataclass(frozen=True, slots=True)
class ReleaseMetadata:
    """Application identity read from the manifest.

    Attributes:
        name: Lower-cased, whitespace-free application name
        version: Version string exactly as declared
        manifest: Which manifest kind it came from
    """

    name: str
    version: str
    manifest: ManifestKind = "maven"


@dataclass(frozen=True, slots=True)
class Credentials:
    """Secrets scoped to a single run.

    The password is excluded from ``repr`` so it cannot leak into console
    output or tracebacks.
    """

    registry_username: str | None = None
    registry_password: str | None = field(default=None, repr=False)
    kubeconfig: Path | None = None
    sonar_host_url: str | None = None

    @classmethod
    def from_env(cls, config: Config, env: Mapping[str, str] | None = None) -> Credentials:
        """Read credentials from the variables named in config."""
        source = os.environ if env is None else env
        names = config.credentials

        def _get(name: str) -> str | None:
            value = source.get(name, "").strip()
            return value or None

        kubeconfig = _get(names.kubeconfig_env)
        return cls(
            registry_username=_get(names.registry_username_env),
            registry_password=_get(names.registry_password_env),
            kubeconfig=Path(kubeconfig).expanduser() if kubeconfig else None,
            sonar_host_url=_get(names.sonar_host_env),
        )


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Everything a stage needs to know about the release it is part of."""

    source_dir: Path
    metadata: ReleaseMetadata
    config: Config
    credentials: Credentials = field(default_factory=Credentials)

    @property
    def local_image(self) -> str:
        """Tag produced by ``docker build``: ``name:version``."""
        return f"{self.metadata.name}:{self.metadata.version}"

    @property
    def image_repository(self) -> str:
        return self.config.registry.repository(self.metadata.name)

    @property
    def published_image(self) -> str:
        """Alias tag that is scanned and pushed: ``[host/]namespace/name:latest``."""
        return f"{self.image_repository}:latest"

    @property
    def versioned_image(self) -> str:
        return f"{self.image_repository}:{self.metadata.version}"

    @property
    def values_file(self) -> Path:
        return self.source_dir / self.config.deploy.values_file
