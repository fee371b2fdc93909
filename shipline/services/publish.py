"""Container image build, scan and push.

The image is built as ``name:version``, alias-tagged as
``[host/]namespace/name:latest``, and that alias is what gets scanned and
pushed. The registry password is handed to ``docker login`` on stdin,
never on the command line.
"""

from __future__ import annotations

from shipline.core.result import Err, Ok, Result
from shipline.pipeline.errors import StageError
from shipline.pipeline.model import StageRuntime

__all__ = [
    "IMAGE_SCAN_GRACE_SECONDS",
    "containerize",
    "image_scan_command",
    "push_image",
    "scan_image",
]

# Trivy enforces its own --timeout; the process is killed shortly after
IMAGE_SCAN_GRACE_SECONDS = 60.0


def containerize(rt: StageRuntime) -> Result[None, StageError]:
    ctx = rt.context
    docker = ctx.config.registry.docker

    built = rt.invoke(
        [docker, "build", "-t", ctx.local_image, "."],
        kind="build_failed",
        message="docker build failed",
    )
    if isinstance(built, Err):
        return built

    targets = [ctx.published_image]
    if ctx.config.registry.push_version_tag:
        targets.append(ctx.versioned_image)
    for target in targets:
        tagged = rt.invoke(
            [docker, "tag", ctx.local_image, target],
            kind="build_failed",
            message=f"docker tag {target} failed",
        )
        if isinstance(tagged, Err):
            return tagged
    return Ok(None)


def image_scan_command(rt: StageRuntime) -> list[str]:
    scans = rt.context.config.scans
    return [
        scans.trivy,
        "image",
        rt.context.published_image,
        "--format",
        "template",
        "--template",
        scans.trivy_template,
        "--timeout",
        f"{scans.image_scan_timeout_minutes}m",
        "--output",
        scans.image_report,
    ]


def scan_image(rt: StageRuntime) -> Result[None, StageError]:
    limit = rt.context.config.scans.image_scan_timeout_minutes * 60.0
    return rt.invoke(
        image_scan_command(rt),
        kind="scan_failed",
        message="image vulnerability scan failed",
        timeout=limit + IMAGE_SCAN_GRACE_SECONDS,
    )


def _login_command(rt: StageRuntime, username: str) -> list[str]:
    registry = rt.context.config.registry
    cmd = [registry.docker, "login", "--username", username, "--password-stdin"]
    if registry.host:
        cmd.append(registry.host)
    return cmd


def push_image(rt: StageRuntime) -> Result[None, StageError]:
    ctx = rt.context
    creds = ctx.credentials
    names = ctx.config.credentials
    username = creds.registry_username
    password = creds.registry_password
    if rt.dry_run:
        username = username or f"<{names.registry_username_env}>"
        password = password or ""
    elif not username or not password:
        return Err(
            StageError(
                kind="auth_failed",
                message="registry credentials are not set",
                hint=f"Export {names.registry_username_env} and {names.registry_password_env}",
            )
        )

    login = rt.invoke(
        _login_command(rt, username),
        kind="auth_failed",
        message="docker login failed",
        input_text=password,
    )
    if isinstance(login, Err):
        return login

    targets = [ctx.published_image]
    if ctx.config.registry.push_version_tag:
        targets.append(ctx.versioned_image)
    for target in targets:
        pushed = rt.invoke(
            [ctx.config.registry.docker, "push", target],
            kind="push_failed",
            message=f"docker push {target} failed",
        )
        if isinstance(pushed, Err):
            return pushed
    return Ok(None)
