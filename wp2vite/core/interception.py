"""Interception harness: observe a script's calls to a substituted function.

The harness runs inside a Node process. It installs a recording stub in
``require.cache`` at the resolved path of the binding module, loads the
script (so its ``require`` resolves to the stub), invokes it with a fake
server object, then evicts both cache entries in a ``finally`` block and
probes that the real binding is observable again.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, cast

from wp2vite.helpers.node_runner import NodeRunner

HARNESS_JS = r"""
function setupFunction(exported) {
  if (typeof exported === 'function') return exported;
  if (exported && typeof exported.default === 'function') return exported.default;
  throw new Error('setup script does not export a function');
}

async function main(payload) {
  const bindingPath = require.resolve(payload.binding, { paths: [payload.root] });
  const scriptPath = require.resolve(payload.script);
  const named = payload.shape === 'named';
  const events = [];
  let stubModule = null;
  let error = null;

  function recordingStub(...args) {
    events.push(args.map(toPlain));
    return function noopMiddleware(req, res, next) {
      if (typeof next === 'function') next();
    };
  }

  try {
    let stubExports = recordingStub;
    if (named) {
      const real = require(bindingPath);
      stubExports = Object.assign({}, real, { [payload.exportName]: recordingStub });
      delete require.cache[bindingPath];
    }
    stubModule = new Module(bindingPath, null);
    stubModule.filename = bindingPath;
    stubModule.exports = stubExports;
    stubModule.loaded = true;
    require.cache[bindingPath] = stubModule;

    const setup = setupFunction(require(scriptPath));
    await setup({ use() {} });
  } catch (err) {
    error = errorText(err);
  } finally {
    delete require.cache[bindingPath];
    delete require.cache[scriptPath];
  }

  let restored;
  try {
    const fresh = require(bindingPath);
    const binding = named ? fresh[payload.exportName] : fresh;
    restored = binding !== recordingStub;
  } catch (err) {
    restored = require.cache[bindingPath] !== stubModule;
  }
  delete require.cache[bindingPath];

  return { events, restored, error };
}
"""


class BindingShape(Enum):
    """Where the factory function lives in the binding module's exports."""

    NAMED_EXPORT = "named"  # require(mod).createProxyMiddleware(...)
    DEFAULT_EXPORT = "default"  # require(mod)(...)


@dataclass(frozen=True)
class InterceptionResult:
    """Outcome of one harness run.

    Attributes:
        events: Argument lists of every call to the stub, in call order.
        restored: The real binding was observable again after the run.
        error: Stack trace of the script failure, if any.
    """

    events: tuple[tuple[Any, ...], ...]
    restored: bool
    error: str | None = None


class InterceptionHarness:
    """Runs scripts with one module binding replaced by a recording stub."""

    def __init__(self, root: Path, runner: NodeRunner | None = None) -> None:
        self.root = root
        self.runner = runner or NodeRunner()

    def with_substituted_binding(
        self,
        binding_key: str,
        shape: BindingShape,
        script: Path,
        export_name: str = "",
    ) -> InterceptionResult:
        """Load ``script`` with ``binding_key`` substituted and record stub calls.

        Args:
            binding_key: Module specifier of the binding (resolved from root)
            shape: Whether the stub replaces a named export or the module itself
            script: Script to execute; must export ``(app) => void``
            export_name: Name of the replaced export for NAMED_EXPORT

        Raises:
            NodeScriptError: If the harness itself could not run
        """
        value = self.runner.run(
            HARNESS_JS,
            {
                "root": str(self.root),
                "binding": binding_key,
                "script": str(script),
                "shape": shape.value,
                "exportName": export_name,
            },
            self.root,
        )
        data = cast(dict[str, Any], value) if isinstance(value, dict) else {}
        raw_events = data.get("events")
        events = tuple(
            tuple(cast(list[Any], item))
            for item in (cast(list[Any], raw_events) if isinstance(raw_events, list) else [])
            if isinstance(item, list)
        )
        error = data.get("error")
        return InterceptionResult(
            events=events,
            restored=bool(data.get("restored")),
            error=error if isinstance(error, str) else None,
        )
