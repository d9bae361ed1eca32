"""Manifest parsing helpers shared by the stack detectors."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Set

import yaml

from ..logging import get_logger
from ..walker import ProjectTree

logger = get_logger("stack.manifests")

_REQUIREMENT_NAME = re.compile(r"[<>=!~;\[\s@]")
_GEM = re.compile(r"""^\s*gem\s+['"]([^'"]+)['"]""")
_GRADLE_COORDINATE = re.compile(r"['\"]([\w\-.]+:[\w\-.]+)(?::[\w\-.]+)?['\"]")

# Node.js


def load_package_json(tree: ProjectTree) -> Dict[str, Any]:
    """Return the parsed root package.json contents or an empty dict."""
    text = tree.read_optional("package.json")
    if text is None:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("package.json is not valid JSON: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


def merged_node_dependencies(package: Dict[str, Any]) -> Dict[str, str]:
    """Union of dependencies, devDependencies and peerDependencies."""
    merged: Dict[str, str] = {}
    for key in ("dependencies", "devDependencies", "peerDependencies"):
        deps = package.get(key)
        if isinstance(deps, dict):
            for name, version in deps.items():
                merged.setdefault(str(name), str(version))
    return merged


# Python


def requirement_name(spec: str) -> str:
    return _REQUIREMENT_NAME.split(spec.strip(), 1)[0].strip()


def load_requirements(tree: ProjectTree) -> List[str]:
    """Package names listed in requirements.txt, in file order."""
    text = tree.read_optional("requirements.txt")
    if text is None:
        return []
    packages: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        name = requirement_name(stripped)
        if name:
            packages.append(name)
    return packages


def load_pyproject(tree: ProjectTree) -> Dict[str, Any]:
    text = tree.read_optional("pyproject.toml")
    if text is None:
        return {}
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("pyproject.toml could not be parsed: %s", exc)
        return {}


def load_pyproject_dependencies(tree: ProjectTree) -> List[str]:
    """Dependency names declared in pyproject.toml (PEP 621 and Poetry)."""
    data = load_pyproject(tree)
    dependencies: List[Any] = []

    project = data.get("project")
    if isinstance(project, dict):
        dependencies.extend(project.get("dependencies", []) or [])
        optional = project.get("optional-dependencies", {}) or {}
        if isinstance(optional, dict):
            for values in optional.values():
                dependencies.extend(values or [])

    tool = data.get("tool")
    poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
    if isinstance(poetry, dict):
        for section in ("dependencies", "dev-dependencies"):
            poetry_deps = poetry.get(section, {}) or {}
            if isinstance(poetry_deps, dict):
                dependencies.extend(poetry_deps.keys())
        groups = poetry.get("group", {}) or {}
        if isinstance(groups, dict):
            for group in groups.values():
                if isinstance(group, dict) and isinstance(group.get("dependencies"), dict):
                    dependencies.extend(group["dependencies"].keys())

    packages: List[str] = []
    for dep in dependencies:
        if not isinstance(dep, str):
            continue
        name = requirement_name(dep)
        if name and name.lower() != "python" and name not in packages:
            packages.append(name)
    return packages


def has_pytest_config(tree: ProjectTree) -> bool:
    data = load_pyproject(tree)
    tool = data.get("tool")
    return isinstance(tool, dict) and isinstance(tool.get("pytest"), dict)


# Rust


def load_cargo_dependencies(tree: ProjectTree, *, include_dev: bool = False) -> List[str]:
    """Crate names from Cargo.toml dependency tables."""
    text = tree.read_optional("Cargo.toml")
    if text is None:
        return []
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Cargo.toml could not be parsed: %s", exc)
        return []

    sections = ["dependencies", "build-dependencies"]
    if include_dev:
        sections.append("dev-dependencies")

    tables: List[Any] = [data.get(section) for section in sections]
    workspace = data.get("workspace")
    if isinstance(workspace, dict):
        tables.append(workspace.get("dependencies"))
    targets = data.get("target")
    if isinstance(targets, dict):
        for target in targets.values():
            if isinstance(target, dict):
                tables.extend(target.get(section) for section in sections)

    crates: List[str] = []
    for table in tables:
        if isinstance(table, dict):
            for name in table:
                if name not in crates:
                    crates.append(name)
    return crates


# Go


def load_go_modules(tree: ProjectTree) -> List[str]:
    """Module paths required by go.mod."""
    text = tree.read_optional("go.mod")
    if text is None:
        return []
    modules: List[str] = []
    in_block = False
    for line in text.splitlines():
        stripped = line.split("//", 1)[0].strip()
        if not stripped:
            continue
        if in_block:
            if stripped == ")":
                in_block = False
                continue
            modules.append(stripped.split()[0])
        elif stripped.startswith("require"):
            rest = stripped[len("require"):].strip()
            if rest == "(":
                in_block = True
            elif rest:
                modules.append(rest.split()[0])
    return modules


# Ruby / PHP / Dart


def load_gemfile_gems(tree: ProjectTree) -> List[str]:
    text = tree.read_optional("Gemfile")
    if text is None:
        return []
    gems: List[str] = []
    for line in text.splitlines():
        match = _GEM.match(line)
        if match:
            gems.append(match.group(1))
    return gems


def load_composer_packages(tree: ProjectTree) -> List[str]:
    text = tree.read_optional("composer.json")
    if text is None:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("composer.json is not valid JSON: %s", exc)
        return []
    packages: List[str] = []
    if isinstance(data, dict):
        for key in ("require", "require-dev"):
            section = data.get(key)
            if isinstance(section, dict):
                packages.extend(str(name) for name in section)
    return packages


def load_pubspec(tree: ProjectTree) -> Dict[str, Any]:
    text = tree.read_optional("pubspec.yaml")
    if text is None:
        return {}
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.warning("pubspec.yaml could not be parsed: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


# Java


def load_java_dependencies(tree: ProjectTree) -> List[str]:
    """Collect group:artifact coordinates from pom.xml and Gradle build files."""
    deps: Set[str] = set()
    pom = tree.read_optional("pom.xml")
    if pom is not None:
        deps.update(_parse_pom_dependencies(pom))

    for name in ("build.gradle", "build.gradle.kts"):
        gradle = tree.read_optional(name)
        if gradle is not None:
            deps.update(_parse_gradle_dependencies(gradle))

    return sorted(deps)


def _parse_pom_dependencies(text: str) -> Set[str]:
    deps: Set[str] = set()
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        logger.warning("pom.xml could not be parsed: %s", exc)
        return deps

    namespace = _detect_xml_namespace(root)
    prefix = f"{{{namespace}}}" if namespace else ""
    for tag in ("dependency", "plugin", "parent"):
        for dep in root.iter(f"{prefix}{tag}"):
            group = dep.findtext(f"{prefix}groupId", default="")
            artifact = dep.findtext(f"{prefix}artifactId", default="")
            if group and artifact:
                deps.add(f"{group}:{artifact}")
    return deps


def _detect_xml_namespace(element: ET.Element) -> Optional[str]:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def _parse_gradle_dependencies(content: str) -> Set[str]:
    deps: Set[str] = set()
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if "org.springframework.boot" in line and "id" in line:
            deps.add("org.springframework.boot:spring-boot-gradle-plugin")
            continue
        if any(token in line for token in ("implementation", "api", "compile", "runtimeOnly", "testImplementation")):
            match = _GRADLE_COORDINATE.search(line)
            if match:
                deps.add(match.group(1))
    return deps


__all__ = [
    "has_pytest_config",
    "load_cargo_dependencies",
    "load_composer_packages",
    "load_gemfile_gems",
    "load_go_modules",
    "load_java_dependencies",
    "load_package_json",
    "load_pubspec",
    "load_pyproject",
    "load_pyproject_dependencies",
    "load_requirements",
    "merged_node_dependencies",
    "requirement_name",
]
