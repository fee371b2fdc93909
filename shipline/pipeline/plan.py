"""The ordered stage plans a run can execute."""

from __future__ import annotations

from collections.abc import Callable

from shipline.core.policy import StagePolicy
from shipline.core.release import ReleaseContext
from shipline.services.build import compile_sources, package_artifact, run_tests
from shipline.services.deploy import deploy_release
from shipline.services.publish import containerize, push_image, scan_image
from shipline.services.scan import DEPENDENCY_REPORT_PATTERN, dependency_scan, static_analysis

from .model import Stage

__all__ = ["PlanBuilder", "deploy_plan", "release_plan"]

PlanBuilder = Callable[[ReleaseContext], list[Stage]]


def _deploy_stage() -> Stage:
    return Stage("deploy", "Deploy to Kubernetes (Helm)", StagePolicy.BLOCKING, deploy_release)


def release_plan(context: ReleaseContext) -> list[Stage]:
    """Compile through deploy, in release order."""
    scans = context.config.scans
    return [
        Stage("compile", "Compile", StagePolicy.BLOCKING, compile_sources),
        Stage("test", "Run tests", StagePolicy.BLOCKING, run_tests),
        Stage("static-analysis", "Static analysis", scans.static_analysis, static_analysis),
        Stage(
            "dependency-scan",
            "Dependency vulnerability scan",
            scans.dependency,
            dependency_scan,
            reports=(DEPENDENCY_REPORT_PATTERN,),
        ),
        Stage("package", "Package", StagePolicy.BLOCKING, package_artifact),
        Stage("containerize", "Build container image", StagePolicy.BLOCKING, containerize),
        Stage(
            "image-scan",
            "Image vulnerability scan",
            scans.image,
            scan_image,
            reports=(scans.image_report,),
        ),
        Stage("push", "Push container image", StagePolicy.BLOCKING, push_image),
        _deploy_stage(),
    ]


def deploy_plan(context: ReleaseContext) -> list[Stage]:
    """Only the Helm deploy, for re-deploying an already pushed image."""
    return [_deploy_stage()]
