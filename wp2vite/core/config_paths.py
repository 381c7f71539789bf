"""Conventional bundler config locations per flavor."""

from pathlib import Path

from wp2vite.core.errors import ConfigNotFound
from wp2vite.core.flavor import Flavor

CRA_NO_EJECT_CONFIG = "node_modules/react-scripts/config/webpack.config.js"

# Ordered candidates, relative to the project root.
CONFIG_CANDIDATES: dict[Flavor, tuple[str, ...]] = {
    Flavor.CRA_NO_EJECT: (CRA_NO_EJECT_CONFIG,),
    Flavor.CRA_EJECTED: (
        "config/webpack.config.js",
        "config/webpack.config.dev.js",
    ),
    Flavor.REACT_APP_REWIRED: ("config-overrides.js",),
    Flavor.VUE_CLI: ("vue.config.js",),
    Flavor.VUE_PLAIN: (
        "webpack.config.js",
        "build/webpack.dev.conf.js",
        "build/webpack.base.conf.js",
    ),
    Flavor.OTHER: ("webpack.config.js",),
}


def resolve_config_path(
    root: Path,
    flavor: Flavor,
    override: Path | str | None = None,
) -> Path:
    """Return the absolute path of the project's bundler config.

    An explicit override takes priority over every convention; when given
    it is the only candidate.

    Raises:
        ConfigNotFound: If no candidate exists on disk
    """
    if override is not None:
        candidates = [str(override)]
    else:
        candidates = list(CONFIG_CANDIDATES[flavor])

    for candidate in candidates:
        path = (root / candidate).resolve()
        if path.is_file():
            return path
    raise ConfigNotFound(root, candidates)
