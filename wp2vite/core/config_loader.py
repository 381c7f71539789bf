"""Dynamic loading and normalization of webpack-style configuration modules.

A config module can export one of three shapes:

    StaticConfig    - a plain object, used as-is
    FactoryConfig   - a function called with the mode ("development")
    OverrideConfig  - a react-app-rewired override, called with the result
                      of the base CRA factory and the mode

The module is first probed in Node to learn its shape, then ``normalize``
dispatches on the shape and evaluates it. Both steps run with
``NODE_ENV=development`` set for the duration of the load only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union, cast

from wp2vite.core.config_paths import resolve_config_path
from wp2vite.core.errors import ConfigLoadError
from wp2vite.core.flavor import Flavor
from wp2vite.helpers.helpers_logging import print_debug
from wp2vite.helpers.node_runner import NodeRunner, NodeScriptError, scoped_env

DEVELOPMENT = "development"

# react-app-rewired also accepts `module.exports = { webpack(config, env) {} }`
OVERRIDE_MEMBER = "webpack"

LOADER_JS = r"""
function loadModule(file) {
  const exported = require(file);
  return exported && exported.__esModule && 'default' in exported ? exported.default : exported;
}

function pick(exported, member) {
  return member ? exported[member] : exported;
}

function summarize(config) {
  if (Array.isArray(config)) config = config[0];
  if (!config || typeof config !== 'object') return config;
  const { plugins, module: moduleOptions, ...rest } = config;
  if (Array.isArray(plugins)) {
    rest.pluginNames = plugins.map((p) => (p && p.constructor ? p.constructor.name : typeof p));
  }
  return rest;
}

function applyConfigureWebpack(config, mode) {
  if (!config || typeof config.configureWebpack !== 'function') return config;
  const target = { mode, resolve: { alias: {} } };
  const returned = config.configureWebpack(target);
  return Object.assign({}, config, { configureWebpack: returned || target });
}

function finish(config, payload) {
  return payload.vue ? applyConfigureWebpack(config, payload.mode) : summarize(config);
}

async function main(payload) {
  const exported = loadModule(payload.path);
  switch (payload.action) {
    case 'probe':
      if (payload.overrideMember && exported && typeof exported === 'object'
          && typeof exported[payload.overrideMember] === 'function') {
        return { kind: 'function', member: payload.overrideMember };
      }
      if (typeof exported === 'function') return { kind: 'function', member: null };
      return { kind: 'object', value: finish(exported, payload) };
    case 'factory':
      return finish(await pick(exported, payload.member)(payload.mode), payload);
    case 'override': {
      const baseExport = loadModule(payload.base.path);
      const base = payload.base.kind === 'function'
        ? await pick(baseExport, payload.base.member)(payload.mode)
        : baseExport;
      return finish(await pick(exported, payload.member)(base, payload.mode), payload);
    }
    default:
      throw new Error('unknown loader action: ' + payload.action);
  }
}
"""


# ---------------------------------------------------------------------------
# Config shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaticConfig:
    """Module exporting a plain configuration object."""

    module_path: Path
    data: Mapping[str, Any]


@dataclass(frozen=True)
class FactoryConfig:
    """Module exporting ``(mode) => config`` (optionally under ``member``)."""

    module_path: Path
    member: str | None = None


@dataclass(frozen=True)
class OverrideConfig:
    """Module exporting ``(baseConfig, mode) => config`` over a base config."""

    module_path: Path
    base: StaticConfig | FactoryConfig
    member: str | None = None


ConfigShape = Union[StaticConfig, FactoryConfig, OverrideConfig]


@dataclass(frozen=True)
class NormalizedConfig:
    """Configuration slices the extractors work from.

    Attributes:
        alias_table: Raw ``resolve.alias`` mapping.
        entry_descriptor: Raw ``entry`` value (string, list or mapping).
        raw_config: Everything else, passed through untouched.
    """

    alias_table: Mapping[str, Any] = field(default_factory=dict)
    entry_descriptor: Any = None
    raw_config: Mapping[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Probing and normalization
# ---------------------------------------------------------------------------


def _as_mapping(value: object) -> dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(cast(Mapping[str, Any], value))
    return {}


def probe_shape(
    module_path: Path,
    runner: NodeRunner,
    cwd: Path,
    vue: bool = False,
    override_member: str | None = None,
) -> StaticConfig | FactoryConfig:
    """Load a module once in Node and report whether it exports a function."""
    result = _as_mapping(runner.run(
        LOADER_JS,
        {
            "action": "probe",
            "path": str(module_path),
            "mode": DEVELOPMENT,
            "vue": vue,
            "overrideMember": override_member,
        },
        cwd,
    ))
    if result.get("kind") == "function":
        member = result.get("member")
        return FactoryConfig(module_path, member if isinstance(member, str) else None)
    return StaticConfig(module_path, _as_mapping(result.get("value")))


def _shape_payload(shape: StaticConfig | FactoryConfig) -> dict[str, Any]:
    if isinstance(shape, FactoryConfig):
        return {"path": str(shape.module_path), "kind": "function", "member": shape.member}
    return {"path": str(shape.module_path), "kind": "object", "member": None}


def evaluate(
    shape: ConfigShape,
    mode: str,
    runner: NodeRunner,
    cwd: Path,
    vue: bool = False,
) -> dict[str, Any]:
    """Evaluate a config shape to a plain webpack-style object."""
    if isinstance(shape, StaticConfig):
        return dict(shape.data)

    if isinstance(shape, FactoryConfig):
        payload: dict[str, Any] = {
            "action": "factory",
            "path": str(shape.module_path),
            "member": shape.member,
        }
    elif isinstance(shape, OverrideConfig):
        payload = {
            "action": "override",
            "path": str(shape.module_path),
            "member": shape.member,
            "base": _shape_payload(shape.base),
        }
    else:
        raise TypeError(f"Unsupported config shape: {shape!r}")

    payload.update({"mode": mode, "vue": vue})
    return _as_mapping(runner.run(LOADER_JS, payload, cwd))


def from_vue_cli(options: Mapping[str, Any], root: Path) -> dict[str, Any]:
    """Translate vue.config.js options into a webpack-shaped object."""
    configure = _as_mapping(options.get("configureWebpack"))
    resolve = _as_mapping(configure.get("resolve"))
    alias: dict[str, Any] = {"@": str(root / "src")}
    alias.update(_as_mapping(resolve.get("alias")))

    entry: Any
    pages = _as_mapping(options.get("pages"))
    if pages:
        entry = {}
        for name, page in pages.items():
            page_entry = page.get("entry") if isinstance(page, Mapping) else page
            if isinstance(page_entry, str):
                entry[name] = [page_entry]
            elif isinstance(page_entry, list):
                entry[name] = page_entry
    else:
        main_ts = root / "src" / "main.ts"
        entry = str(main_ts if main_ts.exists() else root / "src" / "main.js")

    config: dict[str, Any] = {k: v for k, v in options.items() if k != "configureWebpack"}
    config["resolve"] = {**resolve, "alias": alias}
    config["entry"] = entry
    return config


def normalize(
    shape: ConfigShape,
    mode: str,
    runner: NodeRunner,
    root: Path,
    flavor: Flavor = Flavor.OTHER,
) -> NormalizedConfig:
    """Evaluate a config shape and split it into the slices extractors use."""
    config = evaluate(shape, mode, runner, root, vue=flavor is Flavor.VUE_CLI)
    if flavor is Flavor.VUE_CLI:
        config = from_vue_cli(config, root)

    resolve = _as_mapping(config.get("resolve"))
    return NormalizedConfig(
        alias_table=_as_mapping(resolve.get("alias")),
        entry_descriptor=config.get("entry"),
        raw_config=config,
    )


def detect_shape(
    config_path: Path,
    root: Path,
    flavor: Flavor,
    runner: NodeRunner,
) -> ConfigShape:
    """Build the tagged config shape for a resolved config path."""
    vue = flavor is Flavor.VUE_CLI
    if flavor is Flavor.REACT_APP_REWIRED:
        base_path = resolve_config_path(root, Flavor.CRA_NO_EJECT)
        print_debug("webpack", f"override {config_path.name} over {base_path}")
        base = probe_shape(base_path, runner, root)
        override = probe_shape(config_path, runner, root, override_member=OVERRIDE_MEMBER)
        if not isinstance(override, FactoryConfig):
            raise ConfigLoadError(
                config_path, TypeError("override module must export a function"),
            )
        return OverrideConfig(config_path, base, override.member)
    return probe_shape(config_path, runner, root, vue=vue)


def load_config(
    config_path: Path,
    root: Path,
    flavor: Flavor,
    runner: NodeRunner | None = None,
) -> NormalizedConfig:
    """Load the bundler config at ``config_path`` in development mode.

    Raises:
        ConfigLoadError: If evaluating the module (or its base) fails
        ConfigNotFound: If a rewired project has no base CRA config
    """
    runner = runner or NodeRunner()
    print_debug("webpack", f"loading {config_path} ({flavor.value})")
    with scoped_env(NODE_ENV=DEVELOPMENT):
        try:
            shape = detect_shape(config_path, root, flavor, runner)
            print_debug("webpack", f"config shape: {type(shape).__name__}")
            return normalize(shape, DEVELOPMENT, runner, root, flavor)
        except NodeScriptError as e:
            raise ConfigLoadError(config_path, e) from e


__all__ = [
    "ConfigShape",
    "FactoryConfig",
    "NormalizedConfig",
    "OverrideConfig",
    "StaticConfig",
    "load_config",
    "normalize",
]
