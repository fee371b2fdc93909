"""Code-quality and dependency vulnerability scans.

Both scanners publish a report and, by default, run under the
observational policy: their exit status is recorded but does not stop
the release.
"""

from __future__ import annotations

from shipline.core.result import Result
from shipline.pipeline.errors import StageError
from shipline.pipeline.model import StageRuntime

__all__ = [
    "DEPENDENCY_REPORT_PATTERN",
    "dependency_scan",
    "dependency_scan_command",
    "sonar_command",
    "static_analysis",
]

DEPENDENCY_REPORT_PATTERN = "**/dependency-check-report.xml"


def sonar_command(rt: StageRuntime) -> list[str]:
    ctx = rt.context
    name = ctx.metadata.name
    cmd = [
        ctx.config.scans.sonar_scanner,
        f"-Dsonar.projectName={name}",
        f"-Dsonar.projectKey={name}",
    ]
    if ctx.metadata.manifest == "maven":
        cmd.append("-Dsonar.java.binaries=.")
    # SONAR_TOKEN is read by the scanner from the environment directly
    if ctx.credentials.sonar_host_url:
        cmd.append(f"-Dsonar.host.url={ctx.credentials.sonar_host_url}")
    return cmd


def static_analysis(rt: StageRuntime) -> Result[None, StageError]:
    return rt.invoke(sonar_command(rt), kind="scan_failed", message="static analysis failed")


def dependency_scan_command(rt: StageRuntime) -> list[str]:
    scans = rt.context.config.scans
    cmd = [
        scans.dependency_check,
        "--scan",
        "./",
        "--project",
        rt.context.metadata.name,
        "--format",
        "XML",
        "--out",
        ".",
    ]
    if scans.fail_on_cvss is not None:
        cmd.extend(["--failOnCVSS", f"{scans.fail_on_cvss:g}"])
    return cmd


def dependency_scan(rt: StageRuntime) -> Result[None, StageError]:
    return rt.invoke(
        dependency_scan_command(rt),
        kind="scan_failed",
        message="dependency check failed",
    )
