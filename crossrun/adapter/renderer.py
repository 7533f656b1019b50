"""Renders adapter statements to JavaScript source."""

import json
from typing import Callable, Iterable

from ..config.schema import RunConfig
from .statements import Statement, StatementKind, build_statements

# Global installed by the context page; see browser/context.py
BRIDGE = "__bridge__"

HEADER = "// Generated by crossrun. Do not edit."

_PROCESS_SHIM = """\
if (typeof globalThis.process === 'undefined') globalThis.process = { env: {} };
globalThis.process.browser = true;
globalThis.process.version = '';
(function (proc) {
  var buffer = '';
  proc.stdout = proc.stdout || {};
  proc.stdout.write = function (chunk) {
    buffer += String(chunk);
    var lines = buffer.split('\\n');
    buffer = lines.pop();
    lines.forEach(function (line) { console.log(line); });
    return true;
  };
})(globalThis.process);"""

_COMPLETION_LISTENER = """\
var runnerModule = require({runner});
var runner = runnerModule.runner.instance;
runner.on('finish', function () {{
  setTimeout(function () {{
    {bridge}.info({{ total: 1 }});
    {bridge}.result({{
      id: '',
      description: 'test run',
      suite: [],
      log: [],
      success: !runner.hasFailures,
      skipped: false,
      time: 0
    }});
    {bridge}.complete();
  }}, {timeout_ms});
}});"""


def _js(value) -> str:
    return json.dumps(value)


class AdapterRenderer:
    """Turns adapter statements into program text.

    One render method per statement kind; statements are emitted in the
    order given.
    """

    def __init__(self, bridge: str = BRIDGE):
        self.bridge = bridge
        self._renderers: dict[StatementKind, Callable[[Statement], str]] = {
            StatementKind.DISABLE_START: self._render_disable_start,
            StatementKind.POLYFILL: self._render_polyfill,
            StatementKind.PROCESS_SHIM: self._render_process_shim,
            StatementKind.COMPLETION_LISTENER: self._render_completion_listener,
            StatementKind.REPORTER: self._render_reporter,
            StatementKind.TODO_MODE: self._render_todo_mode,
            StatementKind.LOAD: self._render_load,
        }

    def render(self, statements: Iterable[Statement]) -> str:
        parts = [HEADER]
        parts.extend(self._renderers[s.kind](s) for s in statements)
        return "\n".join(parts) + "\n"

    def _render_disable_start(self, statement: Statement) -> str:
        return f"{self.bridge}.start = function () {{}};"

    def _render_polyfill(self, statement: Statement) -> str:
        return f"require({_js(statement.args['module'])});"

    def _render_process_shim(self, statement: Statement) -> str:
        return _PROCESS_SHIM

    def _render_completion_listener(self, statement: Statement) -> str:
        return _COMPLETION_LISTENER.format(
            runner=_js(statement.args["runner"]),
            bridge=self.bridge,
            timeout_ms=statement.args["timeout_ms"],
        )

    def _render_reporter(self, statement: Statement) -> str:
        reporter = statement.args.get("reporter")
        if reporter is None:
            return "runner.removeReporter();"
        if reporter == "tap":
            options = {"type": statement.args["type"]} if statement.args.get("type") else {}
            return (
                "runner.setReporter("
                f"new runnerModule.reporters.TapReporter({_js(options)}));"
            )
        if reporter == "concise":
            return "runner.setReporter(new runnerModule.reporters.ConciseReporter());"
        raise ValueError(f"Unknown reporter: {reporter}")

    def _render_todo_mode(self, statement: Statement) -> str:
        return "runner.runTodo();"

    def _render_load(self, statement: Statement) -> str:
        return f"require({_js(statement.args['path'])});"


def synthesize_adapter(config: RunConfig, build_dir: str) -> str:
    """Generate the adapter source for a run."""
    return AdapterRenderer().render(build_statements(config, build_dir))
