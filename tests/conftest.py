"""Shared fixtures for the wp2vite test suite.

Most tests replace the Node bridge with ``FakeNodeRunner`` so they run
without Node.js. Tests that execute real JavaScript use the
``node_runner`` fixture and are skipped when ``node`` is not on PATH.
"""

from __future__ import annotations

import json
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from wp2vite.helpers.helpers_logging import set_debug
from wp2vite.helpers.node_runner import NodeRunner, NodeScriptError

# ---------------------------------------------------------------------------
# Pre-flight checks (evaluated once at import time)
# ---------------------------------------------------------------------------

_NODE_AVAILABLE = shutil.which("node") is not None

_SKIP_REASON_NODE = "node is not installed (tests execute JavaScript harnesses)"

Responder = Callable[[str, dict[str, Any]], Any]
MakeProject = Callable[..., Path]


class FakeNodeRunner:
    """Stand-in for NodeRunner that answers from a Python callable."""

    def __init__(self, responder: Responder | None = None) -> None:
        self.responder = responder
        self.calls: list[tuple[str, dict[str, Any], Path]] = []

    def run(self, program: str, payload: dict[str, Any], cwd: Path) -> Any:
        self.calls.append((program, dict(payload), cwd))
        if self.responder is None:
            raise NodeScriptError("FakeNodeRunner has no responder")
        return self.responder(program, dict(payload))

    @property
    def actions(self) -> list[str]:
        return [str(payload.get("action")) for _program, payload, _cwd in self.calls]


@pytest.fixture(autouse=True)
def _reset_debug() -> None:
    """Keep diagnostic output off between tests."""
    set_debug(False)


@pytest.fixture()
def fake_runner() -> type[FakeNodeRunner]:
    """The FakeNodeRunner class (instantiate with a responder)."""
    return FakeNodeRunner


@pytest.fixture()
def make_project(tmp_path: Path) -> MakeProject:
    """Factory creating a project directory with a manifest and files.

    Usage::

        root = make_project({"dependencies": {"react": "^18.2.0"}},
                            files={"src/index.js": ""})
    """

    def _make(
        manifest: dict[str, Any] | None = None,
        files: dict[str, str] | None = None,
        name: str = "app",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            (root / "package.json").write_text(json.dumps(manifest, indent=2))
        for relative, content in (files or {}).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root.resolve()

    return _make


@pytest.fixture()
def node_runner() -> NodeRunner:
    """A real NodeRunner; skips the test when node is unavailable."""
    if not _NODE_AVAILABLE:
        pytest.skip(_SKIP_REASON_NODE)
    return NodeRunner()
