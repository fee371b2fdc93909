"""Helm deployment of the release.

``helm upgrade --install`` is used so deploying the same name twice
upgrades the existing release instead of failing on a duplicate. A
failed deploy is not rolled back.
"""

from __future__ import annotations

from shipline.core.result import Err, Ok, Result
from shipline.pipeline.errors import StageError
from shipline.pipeline.model import StageRuntime

__all__ = ["deploy_release", "helm_install_command"]


def helm_install_command(rt: StageRuntime) -> list[str]:
    ctx = rt.context
    deploy = ctx.config.deploy
    return [
        deploy.helm,
        "upgrade",
        "--install",
        ctx.metadata.name,
        deploy.chart_ref,
        "--namespace",
        deploy.namespace,
        "-f",
        deploy.values_file,
    ]


def deploy_release(rt: StageRuntime) -> Result[None, StageError]:
    ctx = rt.context
    deploy = ctx.config.deploy

    kubeconfig = ctx.credentials.kubeconfig
    if not rt.dry_run:
        if kubeconfig is None:
            return Err(
                StageError(
                    kind="auth_failed",
                    message="cluster credential is not set",
                    hint=f"Export {ctx.config.credentials.kubeconfig_env}=<path to kubeconfig>",
                )
            )
        if not kubeconfig.is_file():
            return Err(
                StageError(kind="auth_failed", message=f"kubeconfig not found: {kubeconfig}")
            )
        if not ctx.values_file.is_file():
            return Err(
                StageError(
                    kind="deploy_failed",
                    message=f"values file not found: {deploy.values_file}",
                    hint="Set deploy.values_file in shipline.toml",
                )
            )
    kube_env = str(kubeconfig) if kubeconfig else f"<{ctx.config.credentials.kubeconfig_env}>"
    if deploy.chart_repo_name is None or deploy.chart_repo_url is None or deploy.chart is None:
        return Err(
            StageError(
                kind="deploy_failed",
                message="chart repository is not configured",
                hint="Set deploy.chart_repo_name, deploy.chart_repo_url and deploy.chart",
            )
        )

    added = rt.invoke(
        [deploy.helm, "repo", "add", "--force-update", deploy.chart_repo_name, deploy.chart_repo_url],
        kind="deploy_failed",
        message="helm repo add failed",
    )
    if isinstance(added, Err):
        return added

    updated = rt.invoke(
        [deploy.helm, "repo", "update"],
        kind="deploy_failed",
        message="helm repo update failed",
    )
    if isinstance(updated, Err):
        return updated

    installed = rt.invoke(
        helm_install_command(rt),
        kind="deploy_failed",
        message=f"helm install of {ctx.metadata.name} failed",
        extra_env={"KUBECONFIG": kube_env},
    )
    if isinstance(installed, Err):
        return installed
    return Ok(None)
