"""Tests for shipline.services.scan."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from shipline.core.config import ScanConfig
from shipline.core.release import Credentials, ReleaseMetadata
from shipline.core.result import Err
from shipline.services.scan import (
    dependency_scan,
    dependency_scan_command,
    sonar_command,
    static_analysis,
)
from shipline.test.fakes import FULL_CONFIG, FakeCommandRunner, make_context, make_runtime


class TestSonar:
    def test_maven_command(self, tmp_path: Path) -> None:
        rt, _, _ = make_runtime(make_context(tmp_path))

        assert sonar_command(rt) == [
            "sonar-scanner",
            "-Dsonar.projectName=myapp",
            "-Dsonar.projectKey=myapp",
            "-Dsonar.java.binaries=.",
        ]

    def test_node_has_no_java_binaries(self, tmp_path: Path) -> None:
        context = make_context(
            tmp_path, metadata=ReleaseMetadata(name="web", version="1", manifest="node")
        )
        rt, _, _ = make_runtime(context)

        assert "-Dsonar.java.binaries=." not in sonar_command(rt)

    def test_host_url_from_credentials(self, tmp_path: Path) -> None:
        context = make_context(
            tmp_path, credentials=Credentials(sonar_host_url="https://sonar.example.com")
        )
        rt, _, _ = make_runtime(context)

        assert "-Dsonar.host.url=https://sonar.example.com" in sonar_command(rt)

    def test_failure_is_scan_failed(self, tmp_path: Path) -> None:
        rt, _, _ = make_runtime(
            make_context(tmp_path), FakeCommandRunner(failures={"sonar-scanner": 2})
        )

        result = static_analysis(rt)

        assert isinstance(result, Err)
        assert result.error.kind == "scan_failed"


class TestDependencyCheck:
    def test_scan_only_by_default(self, tmp_path: Path) -> None:
        rt, _, _ = make_runtime(make_context(tmp_path))

        cmd = dependency_scan_command(rt)

        assert cmd[:3] == ["dependency-check.sh", "--scan", "./"]
        assert "--failOnCVSS" not in cmd

    def test_threshold(self, tmp_path: Path) -> None:
        config = replace(FULL_CONFIG, scans=ScanConfig(fail_on_cvss=7.0))
        rt, _, _ = make_runtime(make_context(tmp_path, config=config))

        cmd = dependency_scan_command(rt)

        assert cmd[-2:] == ["--failOnCVSS", "7"]

    def test_failure(self, tmp_path: Path) -> None:
        rt, _, _ = make_runtime(
            make_context(tmp_path), FakeCommandRunner(failures={"dependency-check.sh": 1})
        )

        result = dependency_scan(rt)

        assert isinstance(result, Err)
        assert result.error.kind == "scan_failed"
