"""Application name and version from the build manifest.

``pom.xml`` is read as XML and only ``/project/name`` and
``/project/version`` count: a ``<version>`` nested in ``<parent>``,
``<dependency>`` or ``<plugin>`` never shadows the project's own. When
the project omits them, Maven's own fallbacks apply (``artifactId`` for
the name, the parent's version for the version). ``package.json`` is read
as JSON. Names are lower-cased and stripped of all whitespace so they are
usable as image and Helm release names.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from shipline.core.release import ManifestKind, ReleaseMetadata
from shipline.core.result import Err, Ok, Result
from shipline.core.structured import as_str_dict, get_str
from shipline.pipeline.errors import StageError

__all__ = [
    "MAVEN_MANIFEST",
    "NODE_MANIFEST",
    "extract_metadata",
    "find_manifest",
    "normalize_name",
    "read_maven_metadata",
    "read_node_metadata",
]

MAVEN_MANIFEST = "pom.xml"
NODE_MANIFEST = "package.json"

_PROPERTY_RE = re.compile(r"\$\{([^}]+)\}")


def _error(message: str, hint: str | None = None) -> Err[StageError]:
    return Err(StageError(kind="metadata_failed", message=message, hint=hint))


def normalize_name(raw: str) -> str:
    """``"My App"`` -> ``"myapp"``."""
    return "".join(raw.split()).lower()


def find_manifest(source_dir: Path) -> Result[tuple[Path, ManifestKind], StageError]:
    """Locate the manifest; a Maven project wins over a Node one."""
    pom = source_dir / MAVEN_MANIFEST
    if pom.is_file():
        return Ok((pom, "maven"))
    pkg = source_dir / NODE_MANIFEST
    if pkg.is_file():
        return Ok((pkg, "node"))
    return _error(
        f"no {MAVEN_MANIFEST} or {NODE_MANIFEST} in {source_dir}",
        hint="Run from the project root or pass the source directory",
    )


def _local(tag: str) -> str:
    # "{http://maven.apache.org/POM/4.0.0}version" -> "version"
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    for child in elem:
        if isinstance(child.tag, str) and _local(child.tag) == name:
            return child
    return None


def _child_text(elem: ET.Element | None, name: str) -> str | None:
    if elem is None:
        return None
    child = _child(elem, name)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _pom_properties(project: ET.Element) -> dict[str, str]:
    props: dict[str, str] = {}
    block = _child(project, "properties")
    if block is not None:
        for child in block:
            if isinstance(child.tag, str) and child.text:
                props[_local(child.tag)] = child.text.strip()
    return props


def _model_properties(project: ET.Element, parent: ET.Element | None) -> dict[str, str]:
    """``project.*`` values Maven exposes to ``${...}``, with ``pom.*`` aliases."""
    model = {
        "project.artifactId": _child_text(project, "artifactId"),
        "project.groupId": _child_text(project, "groupId") or _child_text(parent, "groupId"),
        "project.parent.artifactId": _child_text(parent, "artifactId"),
        "project.parent.groupId": _child_text(parent, "groupId"),
        "project.parent.version": _child_text(parent, "version"),
    }
    name = _child_text(project, "name")
    if name is not None and not _PROPERTY_RE.search(name):
        model["project.name"] = name

    props: dict[str, str] = {}
    for key, value in model.items():
        if value is not None:
            props[key] = value
            props["pom." + key.removeprefix("project.")] = value
    return props


def _interpolate(value: str, props: dict[str, str], path: Path) -> Result[str, StageError]:
    """Expand ``${...}`` placeholders from the POM's own ``<properties>``."""
    unresolved: list[str] = []

    def _sub(m: re.Match[str]) -> str:
        key = m.group(1)
        if key in props:
            return props[key]
        unresolved.append(key)
        return m.group(0)

    expanded = _PROPERTY_RE.sub(_sub, value)
    if unresolved:
        return _error(
            f"{path.name}: unresolved property ${{{unresolved[0]}}} in {value!r}",
            hint="Define it under <properties> or set the value literally",
        )
    return Ok(expanded)


def read_maven_metadata(path: Path) -> Result[ReleaseMetadata, StageError]:
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        return _error(f"{path.name}: invalid XML: {e}")
    except OSError as e:
        return _error(f"cannot read {path}: {e}")

    if _local(root.tag) != "project":
        return _error(f"{path.name}: root element is <{_local(root.tag)}>, expected <project>")

    parent = _child(root, "parent")
    name = _child_text(root, "name") or _child_text(root, "artifactId")
    version = _child_text(root, "version") or _child_text(parent, "version")

    if name is None:
        return _error(f"{path.name}: no <name> or <artifactId> under <project>")
    if version is None:
        return _error(f"{path.name}: no <version> under <project> or <project>/<parent>")

    props = _pom_properties(root)
    props.update(_model_properties(root, parent))
    version_res = _interpolate(version, props, path)
    if isinstance(version_res, Err):
        return version_res
    props["project.version"] = props["pom.version"] = version_res.value
    name_res = _interpolate(name, props, path)
    if isinstance(name_res, Err):
        return name_res

    return _build(name_res.value, version_res.value, "maven", path)


def read_node_metadata(path: Path) -> Result[ReleaseMetadata, StageError]:
    try:
        data_obj: object = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        return _error(f"{path.name}: invalid JSON: {e}")
    except (OSError, UnicodeDecodeError) as e:
        return _error(f"cannot read {path}: {e}")

    data = as_str_dict(data_obj)
    if data is None:
        return _error(f"{path.name}: top level must be an object")

    name = get_str(data, "name")
    version = get_str(data, "version")
    if name is None:
        return _error(f'{path.name}: missing "name"')
    if version is None:
        return _error(f'{path.name}: missing "version"')
    return _build(name, version, "node", path)


def _build(
    raw_name: str, version: str, kind: ManifestKind, path: Path
) -> Result[ReleaseMetadata, StageError]:
    name = normalize_name(raw_name)
    if not name:
        return _error(f"{path.name}: application name is empty")
    version = version.strip()
    if not version:
        return _error(f"{path.name}: version is empty")
    return Ok(ReleaseMetadata(name=name, version=version, manifest=kind))


def extract_metadata(
    source_dir: Path, manifest: Path | None = None
) -> Result[ReleaseMetadata, StageError]:
    """Read the release identity from an explicit manifest or by probing the directory."""
    if manifest is not None:
        if not manifest.is_file():
            return _error(f"manifest not found: {manifest}")
        if manifest.name == NODE_MANIFEST or manifest.suffix == ".json":
            return read_node_metadata(manifest)
        return read_maven_metadata(manifest)

    found = find_manifest(source_dir)
    if isinstance(found, Err):
        return found
    path, kind = found.value
    if kind == "maven":
        return read_maven_metadata(path)
    return read_node_metadata(path)
