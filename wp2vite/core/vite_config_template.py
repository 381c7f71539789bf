"""Render vite.config.js source text from a SynthesisDescriptor."""

import json
import textwrap

from wp2vite.core.synthesis import SynthesisDescriptor


def _js_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _indent(text: str, spaces: int) -> str:
    return textwrap.indent(text, " " * spaces)


def _relative_target(value: str) -> str:
    return value if value == "." else f"./{value}"


def render_imports(descriptor: SynthesisDescriptor) -> str:
    """Import statements: vite, path, then one default import per plugin."""
    lines = [
        "import { defineConfig } from 'vite';",
        "import path from 'path';",
    ]
    for name, package in descriptor.imports.items():
        lines.append(f"import {name} from {_js_string(package)};")
    return "\n".join(lines)


def render_alias(descriptor: SynthesisDescriptor) -> str:
    """Body of ``resolve.alias``; root-relative targets resolve from __dirname."""
    lines: list[str] = []
    for name, target in descriptor.alias_table.items():
        if target.relative:
            value = f"path.resolve(__dirname, {_js_string(_relative_target(target.value))})"
        else:
            value = _js_string(target.value)
        lines.append(f"{_js_string(name)}: {value},")
    return "\n".join(lines)


def render_proxy(descriptor: SynthesisDescriptor) -> str:
    """Body of ``server.proxy``; options are emitted as JSON literals."""
    lines: list[str] = []
    for rule in descriptor.proxy_rules:
        options = json.dumps(dict(rule.options), indent=2, ensure_ascii=False)
        lines.append(f"{_js_string(rule.match_pattern)}: {options},")
    return "\n".join(lines)


def render_conditional(descriptor: SynthesisDescriptor, name: str) -> str:
    """``if (command === ...)`` wrappers for the named blocks."""
    return "\n".join(
        f"if (command === {_js_string(block.command)}) {{\n"
        f"{_indent(block.body, 2)}\n"
        "}"
        for block in descriptor.blocks_for(name)
    )


def render_vite_config(descriptor: SynthesisDescriptor) -> str:
    """Generate the complete vite.config.js content."""
    plugins = "\n".join(f"{call}," for call in descriptor.plugin_invocations)
    optimize_deps = render_conditional(descriptor, "optimizeDeps")
    rollup_options = render_conditional(descriptor, "rollupOptions")

    return f"""// Generated by wp2vite from the project's webpack configuration.
{render_imports(descriptor)}

export default defineConfig(({{ command }}) => {{
  const optimizeDeps = {{}};
  const rollupOptions = {{}};
{_indent(optimize_deps, 2)}
{_indent(rollup_options, 2)}

  return {{
    resolve: {{
      alias: {{
{_indent(render_alias(descriptor), 8)}
      }},
    }},
    server: {{
      proxy: {{
{_indent(render_proxy(descriptor), 8)}
      }},
    }},
    plugins: [
{_indent(plugins, 6)}
    ],
    optimizeDeps,
    build: {{
      rollupOptions,
    }},
  }};
}});
"""
