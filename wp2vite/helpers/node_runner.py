"""Bridge for executing project JavaScript in a Node.js child process.

Webpack configuration is code, so every dynamic evaluation happens in
``node``. A harness program is written into a temporary directory and run
as ``node harness.js <result.json> <payload-json>``. The program defines
``main(payload)``; its return value (or the thrown error) is written to
the result file as a JSON envelope ``{ok, value}`` / ``{ok, error}``.
stdout and stderr are left to the project code.
"""

from __future__ import annotations

import contextlib
import json
import os
import subprocess
import tempfile
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from wp2vite.helpers.helpers_logging import print_debug

NODE_EXECUTABLE = "node"

# Shared by every harness: cycle-safe serializer and envelope writer.
PRELUDE_JS = r"""
'use strict';
const fs = require('fs');
const path = require('path');
const Module = require('module');

// Only back-references to an ancestor are cut; shared objects are copied.
function toPlain(value) {
  const ancestors = new Set();

  function copy(val) {
    if (val === undefined || typeof val === 'function' || typeof val === 'symbol') return undefined;
    if (typeof val === 'bigint') return val.toString();
    if (typeof val === 'number') return Number.isFinite(val) ? val : null;
    if (val === null || typeof val !== 'object') return val;
    if (val instanceof RegExp) return val.toString();
    if (typeof val.toJSON === 'function') return copy(val.toJSON());
    if (ancestors.has(val)) return undefined;

    ancestors.add(val);
    try {
      if (Array.isArray(val)) {
        return val.map((item) => {
          const plain = copy(item);
          return plain === undefined ? null : plain;
        });
      }
      const out = {};
      for (const key of Object.keys(val)) {
        const plain = copy(val[key]);
        if (plain !== undefined) out[key] = plain;
      }
      return out;
    } finally {
      ancestors.delete(val);
    }
  }

  const result = copy(value);
  return result === undefined ? null : result;
}

function errorText(err) {
  if (err && err.stack) return String(err.stack);
  return String(err);
}

const resultPath = process.argv[2];
const payload = JSON.parse(process.argv[3] || '{}');

Promise.resolve()
  .then(() => main(payload))
  .then(
    (value) => fs.writeFileSync(resultPath, JSON.stringify({ ok: true, value: toPlain(value) })),
    (err) => fs.writeFileSync(resultPath, JSON.stringify({ ok: false, error: errorText(err) })),
  )
  .then(() => process.exit(0));
"""


class NodeScriptError(Exception):
    """A harness program could not be run or reported a failure."""

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr
        super().__init__(message)


@contextlib.contextmanager
def scoped_env(**variables: str) -> Iterator[None]:
    """Set environment variables for the duration of the block.

    Previous values (or their absence) are restored on every exit path.
    """
    previous: dict[str, str | None] = {
        key: os.environ.get(key) for key in variables
    }
    os.environ.update(variables)
    try:
        yield
    finally:
        for key, value in previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value


class NodeRunner:
    """Runs harness programs with the ``node`` executable."""

    def __init__(self, executable: str = NODE_EXECUTABLE) -> None:
        self.executable = executable

    def run(
        self,
        program: str,
        payload: Mapping[str, Any],
        cwd: Path,
    ) -> Any:
        """Execute ``program`` (which must define ``main``) and return its value.

        Args:
            program: JavaScript source defining ``function main(payload)``
            payload: JSON-serializable argument passed to ``main``
            cwd: Working directory of the node process (the project root)

        Raises:
            NodeScriptError: If node is missing, crashes, or main() throws
        """
        with tempfile.TemporaryDirectory(prefix="wp2vite-") as tmp:
            script_path = Path(tmp) / "harness.js"
            result_path = Path(tmp) / "result.json"
            script_path.write_text(PRELUDE_JS + "\n" + program, encoding="utf-8")

            cmd = [
                self.executable,
                str(script_path),
                str(result_path),
                json.dumps(dict(payload)),
            ]
            print_debug("node", f"running harness in {cwd}")
            try:
                proc = subprocess.run(
                    cmd,
                    cwd=cwd,
                    capture_output=True,
                    text=True,
                    check=False,
                    env=os.environ.copy(),
                )
            except FileNotFoundError as e:
                raise NodeScriptError(
                    f"'{self.executable}' executable not found; Node.js is required"
                ) from e

            if not result_path.exists():
                raise NodeScriptError(
                    f"node exited with code {proc.returncode} without a result",
                    proc.stderr,
                )
            envelope = json.loads(result_path.read_text(encoding="utf-8"))

        if not envelope.get("ok"):
            raise NodeScriptError(str(envelope.get("error", "unknown error")), proc.stderr)
        return envelope.get("value")
