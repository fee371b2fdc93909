"""Compile, test and package stages for Maven and Node projects."""

from __future__ import annotations

from dataclasses import dataclass

from shipline.core.config import BuildConfig
from shipline.core.release import ManifestKind
from shipline.core.result import Result
from shipline.pipeline.errors import StageError
from shipline.pipeline.model import StageRuntime

__all__ = [
    "BuildCommands",
    "build_commands",
    "compile_sources",
    "package_artifact",
    "run_tests",
]


@dataclass(frozen=True, slots=True)
class BuildCommands:
    compile: tuple[str, ...]
    test: tuple[str, ...]
    package: tuple[str, ...]


def build_commands(kind: ManifestKind, config: BuildConfig) -> BuildCommands:
    if kind == "maven":
        mvn = config.maven
        return BuildCommands(
            compile=(mvn, "clean", "compile"),
            test=(mvn, "test"),
            package=(mvn, "clean", "install"),
        )
    npm = config.npm
    return BuildCommands(
        compile=(npm, "ci"),
        test=(npm, "test"),
        package=(npm, "run", "build", "--if-present"),
    )


def _commands(rt: StageRuntime) -> BuildCommands:
    return build_commands(rt.context.metadata.manifest, rt.context.config.build)


def compile_sources(rt: StageRuntime) -> Result[None, StageError]:
    return rt.invoke(_commands(rt).compile, kind="build_failed", message="compile failed")


def run_tests(rt: StageRuntime) -> Result[None, StageError]:
    return rt.invoke(_commands(rt).test, kind="test_failed", message="tests failed")


def package_artifact(rt: StageRuntime) -> Result[None, StageError]:
    return rt.invoke(_commands(rt).package, kind="build_failed", message="package failed")
