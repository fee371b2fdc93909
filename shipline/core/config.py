"""Typed configuration loading and access.

Configuration lives in ``shipline.toml`` at the root of the source
checkout (or a path given with ``--config``). Every table is optional;
the defaults reproduce the classic Maven + Docker Hub + Helm pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .policy import StagePolicy, parse_policy
from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_float,
    get_int,
    get_str,
    get_table,
)

__all__ = [
    "CONFIG_FILENAME",
    "BuildConfig",
    "CleanupConfig",
    "Config",
    "ConfigError",
    "CredentialsConfig",
    "DeployConfig",
    "RegistryConfig",
    "ScanConfig",
    "SourceConfig",
    "load_config",
    "resolve_config",
]

CONFIG_FILENAME = "shipline.toml"

DEFAULT_TRIVY_TEMPLATE = "@/usr/local/share/trivy/templates/html.tpl"
DEFAULT_IMAGE_SCAN_TIMEOUT_MINUTES = 10


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Where the checkout comes from. No url means "use the directory as is"."""

    url: str | None = None
    branch: str = "main"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    maven: str = "mvn"
    npm: str = "npm"


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Container registry coordinates.

    The pushed image is ``[host/]namespace/name:latest``.
    """

    namespace: str | None = None
    host: str | None = None
    push_version_tag: bool = False
    docker: str = "docker"

    def repository(self, app_name: str) -> str:
        parts = [p for p in (self.host, self.namespace) if p]
        parts.append(app_name)
        return "/".join(parts)


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Security and quality scanners and how much their failures matter."""

    static_analysis: StagePolicy = StagePolicy.OBSERVATIONAL
    dependency: StagePolicy = StagePolicy.OBSERVATIONAL
    image: StagePolicy = StagePolicy.OBSERVATIONAL
    sonar_scanner: str = "sonar-scanner"
    dependency_check: str = "dependency-check.sh"
    fail_on_cvss: float | None = None
    trivy: str = "trivy"
    trivy_template: str = DEFAULT_TRIVY_TEMPLATE
    image_scan_timeout_minutes: int = DEFAULT_IMAGE_SCAN_TIMEOUT_MINUTES
    image_report: str = "report.html"

    def all_blocking(self) -> ScanConfig:
        return replace(
            self,
            static_analysis=StagePolicy.BLOCKING,
            dependency=StagePolicy.BLOCKING,
            image=StagePolicy.BLOCKING,
        )


@dataclass(frozen=True, slots=True)
class DeployConfig:
    """Helm chart coordinates and target namespace."""

    chart_repo_name: str | None = None
    chart_repo_url: str | None = None
    chart: str | None = None
    namespace: str = "default"
    values_file: str = "dev/values.yaml"
    helm: str = "helm"

    @property
    def chart_ref(self) -> str:
        return f"{self.chart_repo_name}/{self.chart}"


@dataclass(frozen=True, slots=True)
class CredentialsConfig:
    """Names of the environment variables that carry secrets."""

    registry_username_env: str = "REGISTRY_USERNAME"
    registry_password_env: str = "REGISTRY_PASSWORD"
    kubeconfig_env: str = "KUBECONFIG_FILE"
    sonar_host_env: str = "SONAR_HOST_URL"


@dataclass(frozen=True, slots=True)
class CleanupConfig:
    remove_images: bool = False


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    source: SourceConfig = field(default_factory=SourceConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    scans: ScanConfig = field(default_factory=ScanConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        A key that is present must hold the expected type; only absent or
        blank values fall back to the defaults.

        Raises:
            ValueError: If a table or value has the wrong type, or a stage
                policy name is unknown.
        """
        source = _Section.read(data, "source")
        build = _Section.read(data, "build")
        registry = _Section.read(data, "registry")
        scans = _Section.read(data, "scans")
        deploy = _Section.read(data, "deploy")
        creds = _Section.read(data, "credentials")
        cleanup = _Section.read(data, "cleanup")

        scan_defaults = ScanConfig()
        cred_defaults = CredentialsConfig()

        return cls(
            source=SourceConfig(
                url=source.text("url"),
                branch=source.text("branch") or "main",
            ),
            build=BuildConfig(
                maven=build.text("maven") or "mvn",
                npm=build.text("npm") or "npm",
            ),
            registry=RegistryConfig(
                namespace=registry.text("namespace"),
                host=registry.text("host"),
                push_version_tag=bool(registry.flag("push_version_tag")),
                docker=registry.text("docker") or "docker",
            ),
            scans=ScanConfig(
                static_analysis=_policy(scans, "static_analysis"),
                dependency=_policy(scans, "dependency"),
                image=_policy(scans, "image"),
                sonar_scanner=scans.text("sonar_scanner") or scan_defaults.sonar_scanner,
                dependency_check=scans.text("dependency_check") or scan_defaults.dependency_check,
                fail_on_cvss=scans.number("fail_on_cvss"),
                trivy=scans.text("trivy") or scan_defaults.trivy,
                trivy_template=scans.text("trivy_template") or DEFAULT_TRIVY_TEMPLATE,
                image_scan_timeout_minutes=scans.integer("image_scan_timeout_minutes")
                or DEFAULT_IMAGE_SCAN_TIMEOUT_MINUTES,
                image_report=scans.text("image_report") or scan_defaults.image_report,
            ),
            deploy=DeployConfig(
                chart_repo_name=deploy.text("chart_repo_name"),
                chart_repo_url=deploy.text("chart_repo_url"),
                chart=deploy.text("chart"),
                namespace=deploy.text("namespace") or "default",
                values_file=deploy.text("values_file") or "dev/values.yaml",
                helm=deploy.text("helm") or "helm",
            ),
            credentials=CredentialsConfig(
                registry_username_env=creds.text("registry_username_env")
                or cred_defaults.registry_username_env,
                registry_password_env=creds.text("registry_password_env")
                or cred_defaults.registry_password_env,
                kubeconfig_env=creds.text("kubeconfig_env") or cred_defaults.kubeconfig_env,
                sonar_host_env=creds.text("sonar_host_env") or cred_defaults.sonar_host_env,
            ),
            cleanup=CleanupConfig(
                remove_images=bool(cleanup.flag("remove_images")),
            ),
        )

    def missing_settings(self, *, publish: bool, deploy: bool) -> tuple[str, ...]:
        """Return dotted names of required settings that are unset."""
        missing: list[str] = []
        if publish and not self.registry.namespace:
            missing.append("registry.namespace")
        if deploy:
            if not self.deploy.chart_repo_name:
                missing.append("deploy.chart_repo_name")
            if not self.deploy.chart_repo_url:
                missing.append("deploy.chart_repo_url")
            if not self.deploy.chart:
                missing.append("deploy.chart")
        return tuple(missing)


@dataclass(frozen=True, slots=True)
class _Section:
    """One top-level table of the config file, read with type checks."""

    name: str
    table: StrDict

    @classmethod
    def read(cls, data: Mapping[str, object], name: str) -> _Section:
        if name not in data:
            return cls(name, {})
        table = get_table(data, name)
        if table is None:
            raise ValueError(f"[{name}] must be a table")
        return cls(name, table)

    def _checked[T](self, key: str, value: T | None, expected: str) -> T | None:
        if value is None and key in self.table:
            raw = self.table[key]
            if not (isinstance(raw, str) and not raw.strip()):
                raise ValueError(f"{self.name}.{key} must be {expected}, got {raw!r}")
        return value

    def text(self, key: str) -> str | None:
        return self._checked(key, get_str(self.table, key), "a string")

    def integer(self, key: str) -> int | None:
        value = self._checked(key, get_int(self.table, key), "an integer")
        if value is not None and value <= 0:
            raise ValueError(f"{self.name}.{key} must be positive, got {value}")
        return value

    def number(self, key: str) -> float | None:
        return self._checked(key, get_float(self.table, key), "a number")

    def flag(self, key: str) -> bool | None:
        return self._checked(key, get_bool(self.table, key), "true or false")


def _policy(section: _Section, key: str) -> StagePolicy:
    raw = section.text(key)
    if raw is None:
        return StagePolicy.OBSERVATIONAL
    return parse_policy(raw)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to shipline.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def resolve_config(source_dir: Path, explicit: Path | None = None) -> Result[Config, ConfigError]:
    """Find and load the config for a run.

    An explicit path must exist. Otherwise ``shipline.toml`` in the source
    directory is used when present, and the defaults when it is not.
    """
    if explicit is not None:
        return load_config(explicit)

    candidate = source_dir / CONFIG_FILENAME
    if candidate.is_file():
        return load_config(candidate)
    return Ok(Config())
