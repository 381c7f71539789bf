"""Reading, rewriting and writing the project's package.json."""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from wp2vite.core.errors import ManifestReadError

MANIFEST_NAME = "package.json"

# Versions added to devDependencies for packages the generated config imports.
DEV_DEPENDENCY_VERSIONS: dict[str, str] = {
    "vite": "^5.4.0",
    "vite-plugin-react-js-support": "^1.0.7",
    "@vitejs/plugin-react": "^4.3.0",
    "@vitejs/plugin-vue": "^5.1.0",
    "@vitejs/plugin-vue2": "^2.3.1",
}

# Dev-server / build commands replaced by their vite equivalent.
_SERVE_COMMANDS = (
    "react-scripts start",
    "react-app-rewired start",
    "vue-cli-service serve",
    "webpack-dev-server",
    "webpack serve",
)
_BUILD_COMMANDS = (
    "react-scripts build",
    "react-app-rewired build",
    "vue-cli-service build",
)


@dataclass(frozen=True)
class ProjectDescriptor:
    """Immutable snapshot of a project: root path plus parsed manifest."""

    root: Path
    manifest: Mapping[str, Any]

    @property
    def dependencies(self) -> dict[str, str]:
        """dependencies and devDependencies merged (devDependencies win)."""
        merged: dict[str, str] = {}
        for key in ("dependencies", "devDependencies"):
            section = self.manifest.get(key)
            if isinstance(section, Mapping):
                for name, spec in cast(Mapping[str, Any], section).items():
                    merged[str(name)] = str(spec)
        return merged

    @property
    def scripts(self) -> dict[str, str]:
        """The scripts mapping (empty when absent or malformed)."""
        section = self.manifest.get("scripts")
        if not isinstance(section, Mapping):
            return {}
        return {
            str(k): str(v) for k, v in cast(Mapping[str, Any], section).items()
        }

    @property
    def name(self) -> str:
        value = self.manifest.get("name")
        return value if isinstance(value, str) and value else self.root.name


def load_manifest(root: Path) -> dict[str, Any]:
    """Load package.json from the project root.

    Raises:
        ManifestReadError: If the file is missing, unreadable or not a JSON object
    """
    path = root / MANIFEST_NAME
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ManifestReadError(f"{MANIFEST_NAME} not found in {root}") from e
    except (OSError, ValueError) as e:
        raise ManifestReadError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestReadError(f"{path} must contain a JSON object")
    return cast(dict[str, Any], data)


def load_project(root: Path) -> ProjectDescriptor:
    """Read the manifest once and wrap it into a ProjectDescriptor."""
    return ProjectDescriptor(root=root, manifest=load_manifest(root))


def _rewrite_script(command: str) -> str:
    stripped = command.strip()
    for serve in _SERVE_COMMANDS:
        if stripped.startswith(serve):
            return "vite"
    for build in _BUILD_COMMANDS:
        if stripped.startswith(build):
            return "vite build"
    return command


def rewrite_manifest(
    manifest: Mapping[str, Any],
    packages: list[str],
    versions: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return an adjusted copy of the manifest for a vite-based setup.

    Packages already declared in dependencies or devDependencies keep their
    version. Unrelated fields are left untouched.

    Args:
        manifest: Original parsed package.json (not modified)
        packages: Package names the generated config imports
        versions: Version overrides merged over DEV_DEPENDENCY_VERSIONS
    """
    result: dict[str, Any] = copy.deepcopy(dict(manifest))
    version_table = {**DEV_DEPENDENCY_VERSIONS, **(versions or {})}

    deps_raw = result.get("dependencies")
    deps = cast(dict[str, Any], deps_raw) if isinstance(deps_raw, dict) else {}
    dev_raw = result.get("devDependencies")
    dev_deps: dict[str, Any] = (
        cast(dict[str, Any], dev_raw) if isinstance(dev_raw, dict) else {}
    )

    wanted = ["vite", *packages, *(versions or {})]
    for package in wanted:
        if package in deps or package in dev_deps:
            continue
        dev_deps[package] = version_table.get(package, "latest")
    result["devDependencies"] = dev_deps

    scripts_raw = result.get("scripts")
    scripts: dict[str, Any] = (
        cast(dict[str, Any], scripts_raw) if isinstance(scripts_raw, dict) else {}
    )
    for key, command in list(scripts.items()):
        if isinstance(command, str):
            scripts[key] = _rewrite_script(command)
    if "start" not in scripts:
        scripts["start"] = "vite"
    result["scripts"] = scripts
    return result


def dump_manifest(manifest: Mapping[str, Any]) -> str:
    """Serialize a manifest the way npm writes it (2-space indent, newline)."""
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"
