"""Project-level settings read from an optional ``wp2vite.yaml``.

Example:
    config: config/webpack.custom.js
    output: vite.config.js
    html: public/index.html
    debug: false
    dev_dependencies:
      vite: "^5.4.0"
    plugins:
      - import: legacy
        package: "@vitejs/plugin-legacy"
        call: "legacy()"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from ruamel.yaml.error import YAMLError

from wp2vite.core.errors import SettingsError
from wp2vite.helpers.helpers_logging import print_warning
from wp2vite.helpers.yaml_loader import ConfigDict, load_yaml_file

SETTINGS_FILE = "wp2vite.yaml"
DEFAULT_OUTPUT = "vite.config.js"


@dataclass(frozen=True)
class PluginSpec:
    """Extra plugin spliced into the generated config.

    Attributes:
        import_name: Identifier the package's default export is bound to.
        package: npm package name (added to devDependencies).
        call: Invocation placed in the ``plugins`` array.
    """

    import_name: str
    package: str
    call: str


@dataclass(frozen=True)
class MigrationSettings:
    """Settings with defaults for every key."""

    config: str | None = None
    output: str = DEFAULT_OUTPUT
    html: str | None = None
    debug: bool = False
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    plugins: tuple[PluginSpec, ...] = ()


def _optional_str(data: ConfigDict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        print_warning(f"{SETTINGS_FILE}: '{key}' must be a string; ignored")
        return None
    return value


def _parse_plugins(raw: object) -> tuple[PluginSpec, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        print_warning(f"{SETTINGS_FILE}: 'plugins' must be a list; ignored")
        return ()

    plugins: list[PluginSpec] = []
    for idx, item in enumerate(cast(list[object], raw)):
        if not isinstance(item, dict):
            print_warning(f"{SETTINGS_FILE}: plugins[{idx}] must be a mapping; skipped")
            continue
        entry = cast(dict[str, object], item)
        import_name = entry.get("import")
        package = entry.get("package")
        call = entry.get("call")
        if not all(isinstance(v, str) and v for v in (import_name, package, call)):
            print_warning(
                f"{SETTINGS_FILE}: plugins[{idx}] needs 'import', 'package' and 'call'; skipped"
            )
            continue
        plugins.append(PluginSpec(str(import_name), str(package), str(call)))
    return tuple(plugins)


def _parse_dev_dependencies(raw: object) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        print_warning(f"{SETTINGS_FILE}: 'dev_dependencies' must be a mapping; ignored")
        return {}
    return {str(k): str(v) for k, v in cast(dict[object, object], raw).items()}


def load_settings(root: Path) -> MigrationSettings:
    """Load ``wp2vite.yaml`` from the project root (defaults when absent).

    Raises:
        SettingsError: If the file exists but is not a valid YAML mapping
    """
    path = root / SETTINGS_FILE
    if not path.is_file():
        return MigrationSettings()

    try:
        data = load_yaml_file(path)
    except YAMLError as e:
        raise SettingsError(f"Invalid {SETTINGS_FILE}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"{SETTINGS_FILE} must contain a mapping")

    output = _optional_str(data, "output") or DEFAULT_OUTPUT
    debug = data.get("debug", False)
    return MigrationSettings(
        config=_optional_str(data, "config"),
        output=output,
        html=_optional_str(data, "html"),
        debug=debug if isinstance(debug, bool) else False,
        dev_dependencies=_parse_dev_dependencies(data.get("dev_dependencies")),
        plugins=_parse_plugins(data.get("plugins")),
    )
