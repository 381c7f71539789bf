"""Migration orchestration: extract, synthesize, then write.

Every output is computed in memory first (MigrationPlan); files are only
written once all extraction steps have produced a value, so a fatal error
never leaves a half-migrated project behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from wp2vite.core.aliases import extract_aliases
from wp2vite.core.config_loader import load_config
from wp2vite.core.config_paths import resolve_config_path
from wp2vite.core.entries import extract_entries
from wp2vite.core.flavor import Flavor, ProjectProfile, classify, with_flavor
from wp2vite.core.html_patcher import HTML_OUTPUT, build_index_html
from wp2vite.core.proxy import extract_proxy_rules
from wp2vite.core.synthesis import SynthesisDescriptor, assemble
from wp2vite.core.vite_config_template import render_vite_config
from wp2vite.helpers.helpers_logging import (
    print_header,
    print_info,
    print_success,
    scoped_debug,
)
from wp2vite.helpers.manifest import (
    MANIFEST_NAME,
    ProjectDescriptor,
    dump_manifest,
    load_project,
    rewrite_manifest,
)
from wp2vite.helpers.node_runner import NodeRunner
from wp2vite.helpers.settings import MigrationSettings, load_settings


@dataclass(frozen=True)
class Synthesis:
    """Result of the extraction phase for one project."""

    project: ProjectDescriptor
    profile: ProjectProfile
    config_path: Path
    descriptor: SynthesisDescriptor
    settings: MigrationSettings = field(default_factory=MigrationSettings)


@dataclass(frozen=True)
class MigrationPlan:
    """Files to write, keyed by path relative to the project root."""

    root: Path
    files: dict[str, str]

    def write(self) -> list[Path]:
        written: list[Path] = []
        for relative, content in self.files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            written.append(path)
        return written


def synthesize(
    root: Path,
    flavor: Flavor | None = None,
    config: str | None = None,
    runner: NodeRunner | None = None,
    settings: MigrationSettings | None = None,
) -> Synthesis:
    """Run every extraction step and assemble the SynthesisDescriptor.

    ``debug: true`` in the settings file enables diagnostics for this call only.

    Raises:
        ManifestReadError, ConfigNotFound, ConfigLoadError: fatal errors
    """
    root = root.resolve()
    settings = settings or load_settings(root)
    with scoped_debug(settings.debug):
        return _extract(root, flavor, config, runner or NodeRunner(), settings)


def _extract(
    root: Path,
    flavor: Flavor | None,
    config: str | None,
    runner: NodeRunner,
    settings: MigrationSettings,
) -> Synthesis:
    print_info("Reading package.json")
    project = load_project(root)
    profile = classify(project)
    if flavor is not None and flavor is not profile.flavor:
        profile = with_flavor(profile, flavor)
    print_info(f"Detected project flavor: {profile.flavor.value}")

    config_path = resolve_config_path(root, profile.flavor, config or settings.config)
    print_info(f"Loading bundler config: {config_path}")
    normalized = load_config(config_path, root, profile.flavor, runner)

    print_info("Extracting aliases, entries and proxy rules")
    aliases = extract_aliases(normalized.alias_table, root, runner)
    entries = extract_entries(normalized.entry_descriptor, root)
    proxy_rules = extract_proxy_rules(root, profile.flavor, normalized, runner)

    descriptor = assemble(profile, aliases, proxy_rules, entries, settings.plugins)
    return Synthesis(project, profile, config_path, descriptor, settings)


def plan_migration(synthesis: Synthesis) -> MigrationPlan:
    """Render every output file in memory.

    Raises:
        EntryNotFound, HtmlTemplateNotFound: fatal errors
    """
    project = synthesis.project
    descriptor = synthesis.descriptor
    settings = synthesis.settings

    index_html = build_index_html(
        project.root, descriptor.primary_entry, project.name, settings.html,
    )
    manifest = rewrite_manifest(
        project.manifest, descriptor.packages, settings.dev_dependencies,
    )
    return MigrationPlan(
        root=project.root,
        files={
            settings.output: render_vite_config(descriptor),
            HTML_OUTPUT: index_html,
            MANIFEST_NAME: dump_manifest(manifest),
        },
    )


def run_migration(
    root: Path,
    flavor: Flavor | None = None,
    config: str | None = None,
    dry_run: bool = False,
    runner: NodeRunner | None = None,
) -> MigrationPlan:
    """Migrate one project to vite and return the plan that was (or would be) written."""
    print_header(f"Migrating {root} to vite")
    synthesis = synthesize(root, flavor, config, runner)
    plan = plan_migration(synthesis)

    if dry_run:
        for relative in plan.files:
            print_info(f"Would write {relative}")
        return plan

    for path in plan.write():
        print_success(f"Wrote {path}")
    print_info("Next steps:")
    print_info(f"  cd {plan.root}")
    print_info("  npm install")
    print_info("  npm run start")
    return plan
