"""Project classification: which webpack toolchain does a project use?

Decision table (first match wins):

    react dependency
        react-app-rewired dependency      -> REACT_APP_REWIRED
        a script mentions react-scripts   -> CRA_NO_EJECT
        otherwise                         -> CRA_EJECTED
    vue dependency
        @vue/cli-service or a script
        mentions vue-cli-service          -> VUE_CLI
        otherwise                         -> VUE_PLAIN
    anything else                         -> OTHER
"""

from dataclasses import dataclass
from enum import Enum

from wp2vite.helpers.manifest import ProjectDescriptor
from wp2vite.helpers.versions import get_version, major_version, version_at_least

CRA_SCRIPT_MARKER = "react-scripts"
REWIRED_PACKAGE = "react-app-rewired"
VUE_CLI_PACKAGE = "@vue/cli-service"
VUE_CLI_SCRIPT_MARKER = "vue-cli-service"


class Flavor(Enum):
    """Detected build-tooling variant of a project."""

    CRA_NO_EJECT = "cra"
    CRA_EJECTED = "cra-ejected"
    REACT_APP_REWIRED = "react-app-rewired"
    VUE_CLI = "vue-cli"
    VUE_PLAIN = "vue"
    OTHER = "other"

    @property
    def is_react(self) -> bool:
        return self in (
            Flavor.CRA_NO_EJECT,
            Flavor.CRA_EJECTED,
            Flavor.REACT_APP_REWIRED,
        )

    @property
    def is_vue(self) -> bool:
        return self in (Flavor.VUE_CLI, Flavor.VUE_PLAIN)


@dataclass(frozen=True)
class ProjectProfile:
    """Classifier output.

    Attributes:
        flavor: Detected (or forced) flavor.
        ejected: React only; False when scripts delegate to react-scripts.
        uses_rewired: react-app-rewired is a dependency.
        declares_webpack: webpack is listed directly in the manifest.
        react_at_least_17: react >= 17 or react-scripts >= 4.
        vue_major: Major version of vue (0 when not a Vue project).
    """

    flavor: Flavor
    ejected: bool = False
    uses_rewired: bool = False
    declares_webpack: bool = False
    react_at_least_17: bool = False
    vue_major: int = 0


def _scripts_mention(scripts: dict[str, str], marker: str) -> bool:
    return any(marker in command for command in scripts.values())


def check_react_17(deps: dict[str, str]) -> bool:
    """Return True when react >= 17.0.0 or react-scripts >= 4.0.0."""
    react_17 = "react" in deps and version_at_least(get_version(deps["react"]), "17.0.0")
    scripts_4 = CRA_SCRIPT_MARKER in deps and version_at_least(
        get_version(deps[CRA_SCRIPT_MARKER]), "4.0.0",
    )
    return react_17 or scripts_4


def classify(project: ProjectDescriptor) -> ProjectProfile:
    """Classify a project from its manifest. Never fails."""
    deps = project.dependencies
    scripts = project.scripts
    declares_webpack = "webpack" in deps

    if "react" in deps:
        ejected = not _scripts_mention(scripts, CRA_SCRIPT_MARKER)
        uses_rewired = REWIRED_PACKAGE in deps
        if uses_rewired:
            flavor = Flavor.REACT_APP_REWIRED
        elif ejected:
            flavor = Flavor.CRA_EJECTED
        else:
            flavor = Flavor.CRA_NO_EJECT
        return ProjectProfile(
            flavor=flavor,
            ejected=ejected,
            uses_rewired=uses_rewired,
            declares_webpack=declares_webpack,
            react_at_least_17=check_react_17(deps),
        )

    if "vue" in deps:
        is_cli = VUE_CLI_PACKAGE in deps or _scripts_mention(scripts, VUE_CLI_SCRIPT_MARKER)
        major = major_version(deps["vue"])
        return ProjectProfile(
            flavor=Flavor.VUE_CLI if is_cli else Flavor.VUE_PLAIN,
            declares_webpack=declares_webpack,
            vue_major=major,
        )

    return ProjectProfile(flavor=Flavor.OTHER, declares_webpack=declares_webpack)


def with_flavor(profile: ProjectProfile, flavor: Flavor) -> ProjectProfile:
    """Return a copy of the profile with a caller-forced flavor."""
    return ProjectProfile(
        flavor=flavor,
        ejected=flavor is Flavor.CRA_EJECTED,
        uses_rewired=flavor is Flavor.REACT_APP_REWIRED,
        declares_webpack=profile.declares_webpack,
        react_at_least_17=profile.react_at_least_17,
        vue_major=profile.vue_major,
    )
