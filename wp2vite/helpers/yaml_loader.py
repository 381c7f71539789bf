"""
YAML loader for wp2vite settings files.
Provides a ruamel.yaml instance configured for round-trip loading.
"""

from pathlib import Path
from typing import Union, cast

from ruamel.yaml import YAML

# Recursive type for nested YAML structures
ConfigValue = Union[str, int, float, bool, None, 'ConfigDict', list['ConfigValue']]
ConfigDict = dict[str, ConfigValue]


def _create_yaml_loader() -> YAML:
    """Create the shared YAML loader instance."""
    yaml_obj = YAML()
    yaml_obj.preserve_quotes = True
    yaml_obj.default_flow_style = False
    return yaml_obj


# Shared YAML loader instance
yaml: YAML = _create_yaml_loader()


def load_yaml_file(file_path: Path) -> ConfigDict:
    """Load YAML file with type safety.

    ruamel.yaml's load() is safe by default (unlike PyYAML's load()).

    Args:
        file_path: Path to YAML file to load

    Returns:
        Configuration dictionary loaded from YAML (empty for an empty file)

    Raises:
        FileNotFoundError: If file does not exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"YAML file not found: {file_path}")

    with file_path.open(encoding='utf-8') as f:
        raw: ConfigValue = yaml.load(f)
    if raw is None:
        return {}
    return cast(ConfigDict, raw)
