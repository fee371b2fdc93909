"""Test doubles shared across the suite."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from shipline.core.config import Config, DeployConfig, RegistryConfig
from shipline.core.release import Credentials, ReleaseContext, ReleaseMetadata
from shipline.core.result import Err, Ok, Result
from shipline.output.console import MockConsole
from shipline.pipeline.model import StageRuntime
from shipline.platform.process import ProcessError


@dataclass(frozen=True, slots=True)
class RecordedCommand:
    cmd: tuple[str, ...]
    cwd: Path
    extra_env: dict[str, str] | None
    timeout: float | None
    input_text: str | None

    @property
    def line(self) -> str:
        return " ".join(self.cmd)


@dataclass
class FakeCommandRunner:
    """Records commands; fails those whose command line starts with a scripted prefix.

    Attributes:
        failures: command-line prefix -> exit code to return
        missing: executables reported as not found
    """

    failures: dict[str, int] = field(default_factory=dict)
    missing: set[str] = field(default_factory=set)
    calls: list[RecordedCommand] = field(default_factory=list)
    dry_run: bool = False

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        extra_env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        input_text: str | None = None,
    ) -> Result[None, ProcessError]:
        recorded = RecordedCommand(
            cmd=tuple(cmd),
            cwd=cwd,
            extra_env=dict(extra_env) if extra_env else None,
            timeout=timeout,
            input_text=input_text,
        )
        self.calls.append(recorded)

        if cmd[0] in self.missing:
            return Err(
                ProcessError(
                    command=tuple(cmd),
                    returncode=-1,
                    stdout="",
                    stderr=f"No such file or directory: '{cmd[0]}'",
                    not_found=True,
                )
            )
        for prefix, code in self.failures.items():
            if recorded.line.startswith(prefix):
                return Err(
                    ProcessError(
                        command=tuple(cmd),
                        returncode=code,
                        stdout="",
                        stderr=f"{prefix}: boom",
                    )
                )
        return Ok(None)

    @property
    def lines(self) -> list[str]:
        return [c.line for c in self.calls]

    def ran(self, prefix: str) -> bool:
        return any(line.startswith(prefix) for line in self.lines)

    def find(self, prefix: str) -> RecordedCommand:
        for call in self.calls:
            if call.line.startswith(prefix):
                return call
        raise AssertionError(f"no command starting with {prefix!r} in {self.lines}")


POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <parent>
    <groupId>org.springframework.boot</groupId>
    <artifactId>spring-boot-starter-parent</artifactId>
    <version>3.2.0</version>
  </parent>
  <groupId>com.example</groupId>
  <artifactId>demo</artifactId>
  <version>1.2.3</version>
  <name>MyApp</name>
</project>
"""

FULL_CONFIG = Config(
    registry=RegistryConfig(namespace="acme"),
    deploy=DeployConfig(
        chart_repo_name="acme",
        chart_repo_url="https://acme.github.io/helm_charts",
        chart="springboot",
        namespace="apps",
    ),
)


def write_pom(root: Path, content: str = POM) -> Path:
    path = root / "pom.xml"
    path.write_text(content, encoding="utf-8")
    return path


def write_deploy_files(root: Path) -> Path:
    """Create dev/values.yaml and a kubeconfig; returns the kubeconfig path."""
    values = root / "dev" / "values.yaml"
    values.parent.mkdir(parents=True, exist_ok=True)
    values.write_text("replicaCount: 1\n", encoding="utf-8")
    kubeconfig = root / "kubeconfig"
    kubeconfig.write_text("apiVersion: v1\n", encoding="utf-8")
    return kubeconfig


def release_env(kubeconfig: Path | None = None) -> dict[str, str]:
    env = {"REGISTRY_USERNAME": "ci-bot", "REGISTRY_PASSWORD": "s3cret"}
    if kubeconfig is not None:
        env["KUBECONFIG_FILE"] = str(kubeconfig)
    return env


def make_context(
    root: Path,
    *,
    config: Config = FULL_CONFIG,
    metadata: ReleaseMetadata | None = None,
    credentials: Credentials | None = None,
) -> ReleaseContext:
    return ReleaseContext(
        source_dir=root,
        metadata=metadata or ReleaseMetadata(name="myapp", version="1.2.3", manifest="maven"),
        config=config,
        credentials=credentials or Credentials(),
    )


def make_runtime(
    context: ReleaseContext,
    commands: FakeCommandRunner | None = None,
) -> tuple[StageRuntime, FakeCommandRunner, MockConsole]:
    runner = commands or FakeCommandRunner()
    console = MockConsole()
    return StageRuntime(context=context, console=console, commands=runner), runner, console
