"""Tests for wp2vite.yaml settings."""

from typing import Any

import pytest

from wp2vite.core.errors import SettingsError
from wp2vite.helpers.settings import (
    DEFAULT_OUTPUT,
    MigrationSettings,
    PluginSpec,
    load_settings,
)

FULL_SETTINGS = """\
config: config/webpack.custom.js
output: vite.config.mjs
html: static/index.html
debug: true
dev_dependencies:
  vite: "^5.2.0"
plugins:
  - import: legacy
    package: "@vitejs/plugin-legacy"
    call: "legacy({ targets: ['defaults'] })"
"""


def test_absent_file_gives_defaults(make_project: Any) -> None:
    assert load_settings(make_project()) == MigrationSettings()


def test_full_file(make_project: Any) -> None:
    settings = load_settings(make_project(files={"wp2vite.yaml": FULL_SETTINGS}))
    assert settings.config == "config/webpack.custom.js"
    assert settings.output == "vite.config.mjs"
    assert settings.html == "static/index.html"
    assert settings.debug is True
    assert settings.dev_dependencies == {"vite": "^5.2.0"}
    assert settings.plugins == (
        PluginSpec("legacy", "@vitejs/plugin-legacy", "legacy({ targets: ['defaults'] })"),
    )


def test_empty_file_gives_defaults(make_project: Any) -> None:
    settings = load_settings(make_project(files={"wp2vite.yaml": ""}))
    assert settings.output == DEFAULT_OUTPUT


def test_invalid_entries_are_skipped(
    make_project: Any, capsys: pytest.CaptureFixture[str],
) -> None:
    content = (
        "output: 3\n"
        "dev_dependencies: [vite]\n"
        "plugins:\n"
        "  - legacy\n"
        "  - import: x\n"
    )
    settings = load_settings(make_project(files={"wp2vite.yaml": content}))
    assert settings.output == DEFAULT_OUTPUT
    assert settings.dev_dependencies == {}
    assert settings.plugins == ()
    out = capsys.readouterr().out
    assert "plugins[0]" in out
    assert "plugins[1]" in out


@pytest.mark.parametrize("content", ["- just\n- a list\n", "key: [unclosed\n"])
def test_unusable_file_raises(make_project: Any, content: str) -> None:
    with pytest.raises(SettingsError):
        load_settings(make_project(files={"wp2vite.yaml": content}))
