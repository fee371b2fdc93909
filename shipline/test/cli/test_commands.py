from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from shipline import __version__
from shipline.cli.app import app
from shipline.cli.context import CLIContext
from shipline.core.errors import ErrorCode
from shipline.output.console import MockConsole
from shipline.test.fakes import FakeCommandRunner, release_env, write_deploy_files, write_pom

CONFIG = """
[registry]
namespace = "acme"

[deploy]
chart_repo_name = "acme"
chart_repo_url = "https://acme.github.io/helm_charts"
chart = "springboot"
"""


def _ctx(runner: FakeCommandRunner) -> CLIContext:
    return CLIContext(console=MockConsole(), commands=runner)


def _project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_pom(tmp_path)
    (tmp_path / "shipline.toml").write_text(CONFIG, encoding="utf-8")
    for key, value in release_env(write_deploy_files(tmp_path)).items():
        monkeypatch.setenv(key, value)


def _patch_context(
    monkeypatch: pytest.MonkeyPatch, module: object, runner: FakeCommandRunner
) -> CLIContext:
    ctx = _ctx(runner)
    monkeypatch.setattr(module, "build_context", lambda **_: ctx)
    return ctx


def test_run_succeeds(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipline.cli.commands.run_cmd as run_cmd

    _project(tmp_path, monkeypatch)
    runner = FakeCommandRunner()
    ctx = _patch_context(monkeypatch, run_cmd, runner)

    run_cmd.run(
        source=tmp_path,
        config=None,
        repo=None,
        branch=None,
        manifest=None,
        dry_run=False,
        strict_scans=False,
    )

    assert runner.ran("helm upgrade --install myapp acme/springboot")
    assert ctx.console.find("release complete")  # type: ignore[attr-defined]


def test_run_exits_with_test_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipline.cli.commands.run_cmd as run_cmd

    _project(tmp_path, monkeypatch)
    runner = FakeCommandRunner(failures={"mvn test": 1})
    _patch_context(monkeypatch, run_cmd, runner)

    with pytest.raises(typer.Exit) as exc:
        run_cmd.run(
            source=tmp_path,
            config=None,
            repo=None,
            branch=None,
            manifest=None,
            dry_run=False,
            strict_scans=False,
        )

    assert exc.value.exit_code == int(ErrorCode.TEST_ERROR)
    assert not runner.ran("docker")


def test_run_bad_explicit_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipline.cli.commands.run_cmd as run_cmd

    _patch_context(monkeypatch, run_cmd, FakeCommandRunner())

    with pytest.raises(typer.Exit) as exc:
        run_cmd.run(
            source=tmp_path,
            config=tmp_path / "missing.toml",
            repo=None,
            branch=None,
            manifest=None,
            dry_run=False,
            strict_scans=False,
        )

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_deploy_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipline.cli.commands.deploy_cmd as deploy_cmd

    _project(tmp_path, monkeypatch)
    runner = FakeCommandRunner()
    _patch_context(monkeypatch, deploy_cmd, runner)

    deploy_cmd.deploy(source=tmp_path, config=None, dry_run=False)

    assert [line.split()[1] for line in runner.lines] == ["repo", "repo", "upgrade"]


def test_deploy_without_kubeconfig(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipline.cli.commands.deploy_cmd as deploy_cmd

    _project(tmp_path, monkeypatch)
    monkeypatch.delenv("KUBECONFIG_FILE")
    _patch_context(monkeypatch, deploy_cmd, FakeCommandRunner())

    with pytest.raises(typer.Exit) as exc:
        deploy_cmd.deploy(source=tmp_path, config=None, dry_run=False)

    assert exc.value.exit_code == int(ErrorCode.AUTH_ERROR)


def test_metadata_json(tmp_path: Path) -> None:
    write_pom(tmp_path)

    result = CliRunner().invoke(app, ["metadata", str(tmp_path), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"name": "myapp", "version": "1.2.3", "manifest": "maven"}


def test_metadata_missing_manifest(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["metadata", str(tmp_path)])

    assert result.exit_code == int(ErrorCode.METADATA_ERROR)


def test_plan_lists_policies(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipline.cli.commands.plan_cmd as plan_cmd

    write_pom(tmp_path)
    ctx = _patch_context(monkeypatch, plan_cmd, FakeCommandRunner())

    plan_cmd.plan(source=tmp_path, config=None, strict_scans=False)

    console = ctx.console
    assert isinstance(console, MockConsole)
    assert console.find("image-scan: Image vulnerability scan [observational]")
    assert console.find("push: Push container image [blocking]")


def test_plan_strict_scans(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipline.cli.commands.plan_cmd as plan_cmd

    write_pom(tmp_path)
    ctx = _patch_context(monkeypatch, plan_cmd, FakeCommandRunner())

    plan_cmd.plan(source=tmp_path, config=None, strict_scans=True)

    assert ctx.console.find("image-scan: Image vulnerability scan [blocking]")  # type: ignore[attr-defined]


def test_version() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.stdout.strip() == __version__
