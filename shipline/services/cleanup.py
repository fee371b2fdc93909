"""Post-run cleanup. Runs after every release, whatever happened."""

from __future__ import annotations

from shipline.core.release import ReleaseContext
from shipline.core.result import Err
from shipline.output.console import ConsoleProtocol
from shipline.pipeline.model import RunReport
from shipline.platform.process import CommandRunner

__all__ = ["cleanup"]


def cleanup(
    context: ReleaseContext | None,
    report: RunReport | None,
    *,
    console: ConsoleProtocol,
    commands: CommandRunner,
) -> tuple[str, ...]:
    """Log out of the registry and drop local image tags.

    ``report`` is None when the stage plan raised instead of returning;
    the registry session is closed in that case too. Problems are
    returned as warnings and never change the run's outcome. The source
    checkout is never deleted.
    """
    if context is None:
        return ()

    console.header("Cleanup")
    warnings: list[str] = []
    registry = context.config.registry

    logged_in = report is None or report.executed("push")
    if logged_in:
        cmd = [registry.docker, "logout"]
        if registry.host:
            cmd.append(registry.host)
        result = commands.run(cmd, cwd=context.source_dir)
        if isinstance(result, Err):
            warnings.append(f"docker logout: {result.error}")

    if context.config.cleanup.remove_images and (report is None or report.executed("containerize")):
        images = [context.local_image, context.published_image]
        if registry.push_version_tag:
            images.append(context.versioned_image)
        result = commands.run([registry.docker, "image", "rm", *images], cwd=context.source_dir)
        if isinstance(result, Err):
            warnings.append(f"docker image rm: {result.error}")

    for warning in warnings:
        console.warning(warning)
    return tuple(warnings)
