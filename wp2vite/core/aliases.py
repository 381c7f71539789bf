"""Alias extraction.

Aliases come from two sources, merged with config-declared entries
taking precedence:

    1. ``resolve.alias`` of the normalized bundler config
    2. ``compilerOptions.baseUrl`` of tsconfig.json / jsconfig.json, where
       every immediate child directory of the base URL becomes an alias
"""

from __future__ import annotations

import json
import posixpath
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from wp2vite.core.errors import AliasInferenceError
from wp2vite.helpers.helpers_logging import print_debug, print_warning
from wp2vite.helpers.node_runner import NodeRunner, NodeScriptError

TSCONFIG = "tsconfig.json"
JSCONFIG = "jsconfig.json"

READ_TSCONFIG_JS = r"""
async function main(payload) {
  const ts = require(require.resolve('typescript', { paths: [payload.root] }));
  const result = ts.readConfigFile(payload.file, ts.sys.readFile);
  if (result.error) {
    throw new Error(ts.flattenDiagnosticMessageText(result.error.messageText, '\n'));
  }
  return result.config;
}
"""


@dataclass(frozen=True)
class AliasTarget:
    """Target of an alias.

    Attributes:
        value: Root-relative POSIX path when ``relative`` is True,
            otherwise a literal (package name or foreign path).
        relative: Whether the renderer must resolve ``value`` against the
            generated config's directory.
    """

    value: str
    relative: bool = True


AliasTable = dict[str, AliasTarget]


def _relative_to_root(target: str, root: Path) -> str | None:
    """Return ``target`` relative to root, or None if it lies outside."""
    root_str = str(root)
    if target == root_str:
        return "."
    if not target.startswith(root_str.rstrip("/") + "/"):
        return None
    return posixpath.normpath(target[len(root_str):].lstrip("/"))


def aliases_from_config(alias_table: Mapping[str, Any], root: Path) -> AliasTable:
    """Convert a webpack ``resolve.alias`` table into alias targets."""
    result: AliasTable = {}
    for name, target in alias_table.items():
        if not isinstance(target, str):
            print_warning(f"Alias '{name}' has a non-string target and is skipped")
            continue
        relative = _relative_to_root(target, root)
        if relative is None:
            result[name] = AliasTarget(target, relative=False)
        else:
            result[name] = AliasTarget(relative)
    print_debug("alias", f"{len(result)} alias(es) from bundler config")
    return result


def _read_reference_file(
    file_path: Path,
    root: Path,
    runner: NodeRunner | None,
) -> Mapping[str, Any]:
    """Read tsconfig/jsconfig contents.

    tsconfig.json is read through the project's own ``typescript`` package
    when it is installed, since it tolerates comments and trailing commas.

    Raises:
        AliasInferenceError: If the file cannot be parsed
    """
    has_typescript = (root / "node_modules" / "typescript" / "package.json").exists()
    if file_path.name == TSCONFIG and has_typescript and runner is not None:
        try:
            data = runner.run(
                READ_TSCONFIG_JS, {"root": str(root), "file": str(file_path)}, root,
            )
        except NodeScriptError as e:
            raise AliasInferenceError(f"{file_path.name}: {e}") from e
    else:
        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AliasInferenceError(f"{file_path.name}: {e}") from e

    if not isinstance(data, Mapping):
        raise AliasInferenceError(f"{file_path.name} must contain a JSON object")
    return cast(Mapping[str, Any], data)


def find_reference_file(root: Path) -> Path | None:
    """Return tsconfig.json, else jsconfig.json, else None."""
    for name in (TSCONFIG, JSCONFIG):
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def infer_aliases(root: Path, runner: NodeRunner | None = None) -> AliasTable:
    """Derive aliases from the base URL of tsconfig.json / jsconfig.json.

    Raises:
        AliasInferenceError: If the reference file is malformed
    """
    file_path = find_reference_file(root)
    if file_path is None:
        return {}

    config = _read_reference_file(file_path, root, runner)
    options = config.get("compilerOptions")
    base_url = options.get("baseUrl") if isinstance(options, Mapping) else None
    if not isinstance(base_url, str) or not base_url:
        return {}

    print_debug("alias", f"baseUrl of {file_path.name}: {base_url}")
    base_dir = root / base_url
    if not base_dir.is_dir():
        return {}

    result: AliasTable = {}
    for child in sorted(base_dir.iterdir(), key=lambda p: p.name):
        if child.is_dir():
            result[child.name] = AliasTarget(posixpath.normpath(f"{base_url}/{child.name}"))
    return result


def extract_aliases(
    alias_table: Mapping[str, Any],
    root: Path,
    runner: NodeRunner | None = None,
) -> AliasTable:
    """Merge inferred and config-declared aliases (config wins)."""
    try:
        merged = infer_aliases(root, runner)
    except AliasInferenceError as e:
        print_warning("Could not infer aliases from tsconfig/jsconfig; skipping")
        print_debug("alias", str(e))
        merged = {}
    merged.update(aliases_from_config(alias_table, root))
    return merged
