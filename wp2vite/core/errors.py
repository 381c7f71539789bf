"""Error taxonomy for the migration engine.

Fatal errors unwind to the CLI boundary. Recovered errors
(AliasInferenceError, ProxyExtractionError) are caught by the
extractors and replaced with empty results.
"""

from pathlib import Path


class MigrationError(Exception):
    """Base class for every migration failure."""


class ManifestReadError(MigrationError):
    """package.json is missing or is not valid JSON."""


class ConfigNotFound(MigrationError):
    """No conventional or explicit bundler config path exists."""

    def __init__(self, root: Path, candidates: list[str]) -> None:
        self.root = root
        self.candidates = candidates
        tried = ", ".join(candidates) if candidates else "(none)"
        super().__init__(
            f"No bundler config found under {root} (tried: {tried}). "
            + "Pass the config file explicitly with --config"
        )


class ConfigLoadError(MigrationError):
    """The located config module failed while executing or normalizing."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to load {path}: {cause}")


class AliasInferenceError(MigrationError):
    """tsconfig.json / jsconfig.json could not be read."""


class ProxyExtractionError(MigrationError):
    """The proxy setup script could not be executed."""


class EntryNotFound(MigrationError):
    """No primary entry remains for the HTML entry point."""


class HtmlTemplateNotFound(MigrationError):
    """No index.html template exists to patch."""


class SettingsError(MigrationError):
    """wp2vite.yaml exists but cannot be parsed."""
