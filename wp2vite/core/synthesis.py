"""Synthesis: merge extracted facts into the description the renderer consumes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from wp2vite.core.aliases import AliasTable
from wp2vite.core.entries import EntryList, primary_entry
from wp2vite.core.flavor import ProjectProfile
from wp2vite.core.proxy import ProxyRuleSet
from wp2vite.helpers.settings import PluginSpec

SERVE = "serve"
BUILD = "build"


@dataclass(frozen=True)
class ConditionalBlock:
    """Code fragment run only for one vite command (``serve`` / ``build``)."""

    name: str
    command: str
    body: str


# Dependency pre-bundling and rollup inputs are disabled while serving so
# vite does not crawl the legacy webpack entry points.
SERVE_BLOCKS: tuple[ConditionalBlock, ...] = (
    ConditionalBlock("optimizeDeps", SERVE, "optimizeDeps.entries = false;"),
    ConditionalBlock("rollupOptions", SERVE, "rollupOptions.input = [];"),
)


@dataclass(frozen=True)
class SynthesisDescriptor:
    """Structured description of the generated vite config.

    Attributes:
        imports: Import identifier -> npm package.
        alias_table: Alias name -> target.
        proxy_rules: Dev-server proxy rules.
        plugin_invocations: Expressions placed in the ``plugins`` array.
        conditional_blocks: Fragments keyed by vite command.
        primary_entry: Module injected into index.html.
    """

    imports: dict[str, str] = field(default_factory=dict)
    alias_table: AliasTable = field(default_factory=dict)
    proxy_rules: ProxyRuleSet = field(default_factory=ProxyRuleSet)
    plugin_invocations: tuple[str, ...] = ()
    conditional_blocks: tuple[ConditionalBlock, ...] = ()
    primary_entry: str | None = None

    def blocks_for(self, name: str) -> tuple[ConditionalBlock, ...]:
        return tuple(b for b in self.conditional_blocks if b.name == name)

    @property
    def packages(self) -> list[str]:
        """npm packages the generated config imports, in import order."""
        return list(dict.fromkeys(self.imports.values()))

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view used by ``wp2vite inspect``."""
        return {
            "imports": dict(self.imports),
            "alias": {
                name: {"value": target.value, "relative": target.relative}
                for name, target in self.alias_table.items()
            },
            "proxy": self.proxy_rules.to_dict(),
            "plugins": list(self.plugin_invocations),
            "conditional_blocks": [
                {"name": b.name, "command": b.command, "body": b.body}
                for b in self.conditional_blocks
            ],
            "entry": self.primary_entry,
        }


def _family_plugins(profile: ProjectProfile) -> tuple[dict[str, str], list[str]]:
    imports: dict[str, str] = {}
    plugins: list[str] = []
    flavor = profile.flavor
    if flavor.is_react:
        # CRA allows JSX in .js files
        imports["vitePluginReactJsSupport"] = "vite-plugin-react-js-support"
        plugins.append("vitePluginReactJsSupport([], { jsxInject: true })")
        imports["react"] = "@vitejs/plugin-react"
        if profile.react_at_least_17:
            plugins.append("react()")
        else:
            plugins.append("react({ jsxRuntime: 'classic' })")
    elif flavor.is_vue:
        if profile.vue_major == 2:
            imports["vue"] = "@vitejs/plugin-vue2"
        else:
            imports["vue"] = "@vitejs/plugin-vue"
        plugins.append("vue()")
    return imports, plugins


def assemble(
    profile: ProjectProfile,
    aliases: AliasTable,
    proxy_rules: ProxyRuleSet,
    entries: EntryList,
    extra_plugins: tuple[PluginSpec, ...] = (),
) -> SynthesisDescriptor:
    """Combine fixed imports/plugins with the extracted slices."""
    imports, plugins = _family_plugins(profile)
    for spec in extra_plugins:
        imports[spec.import_name] = spec.package
        plugins.append(spec.call)

    return SynthesisDescriptor(
        imports=imports,
        alias_table=dict(aliases),
        proxy_rules=proxy_rules,
        plugin_invocations=tuple(plugins),
        conditional_blocks=SERVE_BLOCKS,
        primary_entry=primary_entry(entries),
    )
