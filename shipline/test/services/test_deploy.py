"""Tests for shipline.services.deploy."""

from __future__ import annotations

from pathlib import Path

from shipline.core.release import Credentials
from shipline.core.result import Err, Ok
from shipline.services.deploy import deploy_release, helm_install_command
from shipline.test.fakes import FakeCommandRunner, make_context, make_runtime, write_deploy_files


def _ready(tmp_path: Path) -> Credentials:
    kubeconfig = write_deploy_files(tmp_path)
    return Credentials(kubeconfig=kubeconfig)


def test_install_command_is_upsert(tmp_path: Path) -> None:
    rt, _, _ = make_runtime(make_context(tmp_path))

    assert helm_install_command(rt) == [
        "helm",
        "upgrade",
        "--install",
        "myapp",
        "acme/springboot",
        "--namespace",
        "apps",
        "-f",
        "dev/values.yaml",
    ]


def test_deploy_sequence(tmp_path: Path) -> None:
    creds = _ready(tmp_path)
    rt, runner, _ = make_runtime(make_context(tmp_path, credentials=creds))

    assert deploy_release(rt) == Ok(None)
    assert runner.lines == [
        "helm repo add --force-update acme https://acme.github.io/helm_charts",
        "helm repo update",
        "helm upgrade --install myapp acme/springboot --namespace apps -f dev/values.yaml",
    ]
    assert runner.calls[2].extra_env == {"KUBECONFIG": str(creds.kubeconfig)}


def test_deploy_twice_upgrades_same_release(tmp_path: Path) -> None:
    creds = _ready(tmp_path)
    runner = FakeCommandRunner()
    rt, _, _ = make_runtime(make_context(tmp_path, credentials=creds), runner)

    deploy_release(rt)
    deploy_release(rt)

    installs = [line for line in runner.lines if " --install " in line]
    assert len(installs) == 2
    assert installs[0] == installs[1]
    assert not any(line.startswith("helm install") for line in runner.lines)


def test_missing_kubeconfig_credential(tmp_path: Path) -> None:
    write_deploy_files(tmp_path)
    rt, runner, _ = make_runtime(make_context(tmp_path))

    result = deploy_release(rt)

    assert isinstance(result, Err)
    assert result.error.kind == "auth_failed"
    assert result.error.hint is not None
    assert "KUBECONFIG_FILE" in result.error.hint
    assert runner.calls == []


def test_kubeconfig_file_missing(tmp_path: Path) -> None:
    write_deploy_files(tmp_path)
    creds = Credentials(kubeconfig=tmp_path / "gone")
    rt, _, _ = make_runtime(make_context(tmp_path, credentials=creds))

    result = deploy_release(rt)

    assert isinstance(result, Err)
    assert result.error.kind == "auth_failed"


def test_missing_values_file(tmp_path: Path) -> None:
    kubeconfig = tmp_path / "kubeconfig"
    kubeconfig.write_text("", encoding="utf-8")
    rt, _, _ = make_runtime(make_context(tmp_path, credentials=Credentials(kubeconfig=kubeconfig)))

    result = deploy_release(rt)

    assert isinstance(result, Err)
    assert result.error.kind == "deploy_failed"
    assert "dev/values.yaml" in result.error.message


def test_helm_failure_is_not_rolled_back(tmp_path: Path) -> None:
    creds = _ready(tmp_path)
    rt, runner, _ = make_runtime(
        make_context(tmp_path, credentials=creds),
        FakeCommandRunner(failures={"helm upgrade": 1}),
    )

    result = deploy_release(rt)

    assert isinstance(result, Err)
    assert result.error.kind == "deploy_failed"
    assert runner.lines[-1].startswith("helm upgrade")
    assert not runner.ran("helm rollback")
    assert not runner.ran("helm uninstall")


def test_dry_run_needs_no_cluster_files(tmp_path: Path) -> None:
    rt, runner, _ = make_runtime(make_context(tmp_path), FakeCommandRunner(dry_run=True))

    assert deploy_release(rt) == Ok(None)
    install = runner.find("helm upgrade --install myapp")
    assert install.extra_env == {"KUBECONFIG": "<KUBECONFIG_FILE>"}
