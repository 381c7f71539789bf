"""Proxy rule extraction.

React projects register dev-server proxies imperatively in
``src/setupProxy.js`` by calling http-proxy-middleware's factory. The rules
only exist as side effects of running that script, so it is executed in the
interception harness with the factory replaced by a recording stub.

Which binding to replace depends on the installed middleware version; the
mapping lives in PROXY_API_POLICIES (highest matching minimum wins).

Vue projects declare proxies statically under ``devServer.proxy``.

Failures are never fatal: the migration continues without proxy rules.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from functools import cmp_to_key
from pathlib import Path
from typing import Any, cast
from urllib.parse import urlsplit

from wp2vite.core.config_loader import NormalizedConfig
from wp2vite.core.errors import ProxyExtractionError
from wp2vite.core.flavor import Flavor
from wp2vite.core.interception import BindingShape, InterceptionHarness
from wp2vite.helpers.helpers_logging import print_debug, print_warning
from wp2vite.helpers.node_runner import NodeRunner, NodeScriptError
from wp2vite.helpers.versions import compare_versions, version_at_least

SETUP_PROXY_SCRIPT = "src/setupProxy.js"
PROXY_PACKAGE = "http-proxy-middleware"
FACTORY_EXPORT = "createProxyMiddleware"


@dataclass(frozen=True)
class ProxyApiPolicy:
    """Binding shape used by middleware versions >= ``min_version``."""

    min_version: str
    shape: BindingShape


PROXY_API_POLICIES: tuple[ProxyApiPolicy, ...] = (
    ProxyApiPolicy("1.0.0", BindingShape.NAMED_EXPORT),
    ProxyApiPolicy("0.0.0", BindingShape.DEFAULT_EXPORT),
)


def select_binding_shape(
    version: str,
    policies: tuple[ProxyApiPolicy, ...] = PROXY_API_POLICIES,
) -> BindingShape:
    """Pick the binding shape for an installed middleware version."""
    ordered = sorted(
        policies,
        key=cmp_to_key(lambda a, b: compare_versions(a.min_version, b.min_version)),
        reverse=True,
    )
    for policy in ordered:
        if version_at_least(version, policy.min_version):
            return policy.shape
    return ordered[-1].shape if ordered else BindingShape.DEFAULT_EXPORT


# ---------------------------------------------------------------------------
# Rule model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProxyRule:
    """A dev-server rule forwarding requests matching ``match_pattern``."""

    match_pattern: str
    options: Mapping[str, Any] = field(default_factory=dict)


class ProxyRuleSet:
    """Insertion-ordered rules keyed by pattern; re-registering overrides."""

    def __init__(self, rules: list[ProxyRule] | None = None) -> None:
        self._rules: dict[str, ProxyRule] = {}
        for rule in rules or []:
            self.register(rule.match_pattern, rule.options)

    def register(self, match_pattern: str, options: Mapping[str, Any]) -> None:
        self._rules[match_pattern] = ProxyRule(match_pattern, dict(options))

    def __iter__(self) -> Iterator[ProxyRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProxyRuleSet):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"ProxyRuleSet({list(self)!r})"

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {rule.match_pattern: dict(rule.options) for rule in self}


def _is_path_pattern(context: str) -> bool:
    return context.startswith("/") or any(ch in context for ch in "*?!")


def _register_context(rules: ProxyRuleSet, context: Any, options: Mapping[str, Any]) -> None:
    """Register one rule per string context (a string or a list of strings)."""
    contexts = cast(list[Any], context) if isinstance(context, list) else [context]
    if not contexts or not all(isinstance(item, str) for item in contexts):
        print_warning("Proxy rule with a function/unsupported context was skipped")
        return
    for item in contexts:
        if not _is_path_pattern(item):
            print_warning(f"Proxy context '{item}' is not a path; the rule may not match")
        rules.register(item, options)


def _expand_shorthand(context: str, options: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
    """Split the v0 shorthand ``proxy('http://host:3000/api')`` into path and target."""
    parts = urlsplit(context)
    target = f"{parts.scheme}://{parts.netloc}"
    return parts.path or "/", {"target": target, **options}


def rules_from_events(events: tuple[tuple[Any, ...], ...]) -> ProxyRuleSet:
    """Turn recorded factory calls into rules.

    Supported call forms:
        (context: str, options)        one rule
        (context: list[str], options)  one rule per context
        (options)                      context from options.pathFilter/context
        (url: str[, options])          shorthand; target and path from the URL
    """
    rules = ProxyRuleSet()
    for args in events:
        context: Any = args[0] if args else None
        options: Any = args[1] if len(args) > 1 else None

        if isinstance(context, Mapping) and options is None:
            options = context
            opts = cast(Mapping[str, Any], options)
            context = opts.get("pathFilter", opts.get("context", "/"))

        opts_dict = dict(cast(Mapping[str, Any], options)) if isinstance(options, Mapping) else {}
        if isinstance(context, str) and "://" in context:
            context, opts_dict = _expand_shorthand(context, opts_dict)
        _register_context(rules, context, opts_dict)
    return rules


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _installed_version(root: Path) -> str | None:
    manifest = root / "node_modules" / PROXY_PACKAGE / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ProxyExtractionError(f"Could not read {manifest}: {e}") from e
    version = data.get("version") if isinstance(data, dict) else None
    return version if isinstance(version, str) else "0.0.0"


def _run_setup_script(root: Path, script: Path, runner: NodeRunner) -> ProxyRuleSet:
    version = _installed_version(root)
    if version is None:
        print_debug("proxy", f"{PROXY_PACKAGE} is not installed; no proxy rules")
        return ProxyRuleSet()

    shape = select_binding_shape(version)
    print_debug("proxy", f"{PROXY_PACKAGE}@{version}: substituting {shape.value} export")

    harness = InterceptionHarness(root, runner)
    try:
        result = harness.with_substituted_binding(
            PROXY_PACKAGE, shape, script, export_name=FACTORY_EXPORT,
        )
    except NodeScriptError as e:
        raise ProxyExtractionError(str(e)) from e

    if not result.restored:
        print_warning(f"{PROXY_PACKAGE} binding was not restored after interception")
    if result.error is not None:
        raise ProxyExtractionError(result.error)

    rules = rules_from_events(result.events)
    print_debug("proxy", f"recovered {len(rules)} proxy rule(s)")
    return rules


def extract_setup_proxy(root: Path, runner: NodeRunner | None = None) -> ProxyRuleSet:
    """Recover the rules registered by ``src/setupProxy.js`` (never raises)."""
    script = root / SETUP_PROXY_SCRIPT
    if not script.is_file():
        print_debug("proxy", f"no {SETUP_PROXY_SCRIPT}; no proxy rules")
        return ProxyRuleSet()
    try:
        return _run_setup_script(root, script, runner or NodeRunner())
    except ProxyExtractionError as e:
        print_warning(f"Could not evaluate {SETUP_PROXY_SCRIPT}; continuing without proxy rules")
        print_debug("proxy", str(e))
        return ProxyRuleSet()


def rules_from_dev_server(raw_config: Mapping[str, Any]) -> ProxyRuleSet:
    """Read declarative ``devServer.proxy`` settings.

    A string proxies everything to that target; a mapping is one rule per
    key; a list (webpack-dev-server 4 and later) holds option objects whose
    ``context`` is a string or a list of strings.
    """
    rules = ProxyRuleSet()
    dev_server = raw_config.get("devServer")
    if not isinstance(dev_server, Mapping):
        return rules
    proxy = cast(Mapping[str, Any], dev_server).get("proxy")
    if isinstance(proxy, str):
        rules.register("/", {"target": proxy, "changeOrigin": True})
    elif isinstance(proxy, Mapping):
        for pattern, options in cast(Mapping[str, Any], proxy).items():
            if isinstance(options, str):
                rules.register(pattern, {"target": options})
            elif isinstance(options, Mapping):
                rules.register(pattern, cast(Mapping[str, Any], options))
    elif isinstance(proxy, list):
        for item in cast(list[Any], proxy):
            if not isinstance(item, Mapping):
                print_warning("devServer.proxy entry that is not an object was skipped")
                continue
            entry = dict(cast(Mapping[str, Any], item))
            context = entry.pop("context", "/")
            _register_context(rules, context, entry)
    return rules


def extract_proxy_rules(
    root: Path,
    flavor: Flavor,
    config: NormalizedConfig,
    runner: NodeRunner | None = None,
) -> ProxyRuleSet:
    """Proxy rules for the project's flavor (empty for OTHER)."""
    if flavor.is_react:
        return extract_setup_proxy(root, runner)
    if flavor.is_vue:
        return rules_from_dev_server(config.raw_config)
    return ProxyRuleSet()
