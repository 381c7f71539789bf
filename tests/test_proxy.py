"""Tests for proxy rule extraction and the interception harness."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from wp2vite.core.config_loader import NormalizedConfig
from wp2vite.core.flavor import Flavor
from wp2vite.core.interception import BindingShape, InterceptionHarness
from wp2vite.core.proxy import (
    PROXY_PACKAGE,
    SETUP_PROXY_SCRIPT,
    ProxyApiPolicy,
    ProxyRule,
    ProxyRuleSet,
    extract_proxy_rules,
    extract_setup_proxy,
    rules_from_dev_server,
    rules_from_events,
    select_binding_shape,
)
from wp2vite.helpers.node_runner import NodeRunner

HPM_MANIFEST = "node_modules/http-proxy-middleware/package.json"
HPM_INDEX = "node_modules/http-proxy-middleware/index.js"

NAMED_EXPORT_MODULE = """\
function createProxyMiddleware() { return function realMiddleware() {}; }
module.exports = { createProxyMiddleware, responseInterceptor() {} };
"""

DEFAULT_EXPORT_MODULE = """\
module.exports = function proxy() { return function realMiddleware() {}; };
"""

SETUP_PROXY_V1 = """\
const { createProxyMiddleware } = require('http-proxy-middleware');

module.exports = function (app) {
  app.use(createProxyMiddleware('/api', { target: 'http://localhost:3000' }));
};
"""

SETUP_PROXY_V0 = """\
const proxy = require('http-proxy-middleware');

module.exports = function (app) {
  app.use(proxy('/api', { target: 'http://localhost:3000' }));
};
"""

SETUP_PROXY_FAILING = """\
const { createProxyMiddleware } = require('http-proxy-middleware');

module.exports = function (app) {
  app.use(createProxyMiddleware('/api', { target: 'http://localhost:3000' }));
  throw new Error('kaput');
};
"""


def _hpm_files(version: str, index: str, setup: str) -> dict[str, str]:
    return {
        HPM_MANIFEST: json.dumps({"name": PROXY_PACKAGE, "version": version, "main": "index.js"}),
        HPM_INDEX: index,
        SETUP_PROXY_SCRIPT: setup,
    }


# ---------------------------------------------------------------------------
# Version policy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("version", "shape"),
    [
        ("1.0.0", BindingShape.NAMED_EXPORT),
        ("2.0.6", BindingShape.NAMED_EXPORT),
        ("0.19.1", BindingShape.DEFAULT_EXPORT),
        ("0.0.0", BindingShape.DEFAULT_EXPORT),
    ],
)
def test_select_binding_shape(version: str, shape: BindingShape) -> None:
    assert select_binding_shape(version) is shape


def test_policy_table_order_does_not_matter() -> None:
    policies = (
        ProxyApiPolicy("0.0.0", BindingShape.DEFAULT_EXPORT),
        ProxyApiPolicy("3.0.0", BindingShape.DEFAULT_EXPORT),
        ProxyApiPolicy("1.0.0", BindingShape.NAMED_EXPORT),
    )
    assert select_binding_shape("2.1.0", policies) is BindingShape.NAMED_EXPORT
    assert select_binding_shape("3.0.1", policies) is BindingShape.DEFAULT_EXPORT


# ---------------------------------------------------------------------------
# Rule model
# ---------------------------------------------------------------------------


class TestRulesFromEvents:
    """Recorded factory calls become rules."""

    def test_context_and_options(self) -> None:
        rules = rules_from_events((("/api", {"target": "http://localhost:3000"}),))
        assert rules.to_dict() == {"/api": {"target": "http://localhost:3000"}}

    def test_context_list_gives_one_rule_each(self) -> None:
        rules = rules_from_events(((["/a", "/b"], {"target": "http://t"}),))
        assert [r.match_pattern for r in rules] == ["/a", "/b"]

    def test_options_only_call(self) -> None:
        rules = rules_from_events((({"target": "http://t", "pathFilter": "/api"},),))
        assert list(rules.to_dict()) == ["/api"]

    def test_reregistering_a_pattern_overrides(self) -> None:
        rules = rules_from_events((
            ("/api", {"target": "http://old"}),
            ("/ws", {"target": "http://ws"}),
            ("/api", {"target": "http://new"}),
        ))
        assert len(rules) == 2
        assert rules.to_dict()["/api"] == {"target": "http://new"}

    def test_unserializable_context_is_skipped(
        self, capsys: pytest.CaptureFixture[str],
    ) -> None:
        rules = rules_from_events(((None, {"target": "http://t"}),))
        assert len(rules) == 0
        assert "skipped" in capsys.readouterr().out


def test_rule_set_equality() -> None:
    a = ProxyRuleSet([ProxyRule("/api", {"target": "x"})])
    b = ProxyRuleSet()
    b.register("/api", {"target": "x"})
    assert a == b
    assert a != ProxyRuleSet()


class TestRulesFromDevServer:
    """Declarative devServer.proxy settings."""

    def test_string_proxies_everything(self) -> None:
        rules = rules_from_dev_server({"devServer": {"proxy": "http://localhost:4000"}})
        assert rules.to_dict() == {
            "/": {"target": "http://localhost:4000", "changeOrigin": True},
        }

    def test_mapping(self) -> None:
        rules = rules_from_dev_server({
            "devServer": {
                "proxy": {
                    "/api": {"target": "http://localhost:3000", "ws": True},
                    "/img": "http://cdn.local",
                },
            },
        })
        assert rules.to_dict() == {
            "/api": {"target": "http://localhost:3000", "ws": True},
            "/img": {"target": "http://cdn.local"},
        }

    def test_absent(self) -> None:
        assert len(rules_from_dev_server({})) == 0


# ---------------------------------------------------------------------------
# Extraction with a fake node
# ---------------------------------------------------------------------------


class TestExtractSetupProxy:
    """setupProxy.js extraction never raises."""

    def test_missing_script(self, make_project: Any, fake_runner: Any) -> None:
        runner = fake_runner()
        assert len(extract_setup_proxy(make_project(), runner)) == 0
        assert runner.calls == []

    def test_missing_package(self, make_project: Any, fake_runner: Any) -> None:
        root = make_project(files={SETUP_PROXY_SCRIPT: SETUP_PROXY_V1})
        runner = fake_runner()
        assert len(extract_setup_proxy(root, runner)) == 0
        assert runner.calls == []

    def test_shape_follows_installed_version(self, make_project: Any, fake_runner: Any) -> None:
        root = make_project(files=_hpm_files("0.19.1", DEFAULT_EXPORT_MODULE, SETUP_PROXY_V0))
        runner = fake_runner(lambda _p, _payload: {
            "events": [["/api", {"target": "http://localhost:3000"}]],
            "restored": True,
            "error": None,
        })

        rules = extract_setup_proxy(root, runner)

        assert runner.calls[0][1]["shape"] == "default"
        assert rules.to_dict() == {"/api": {"target": "http://localhost:3000"}}

    def test_script_error_gives_empty_rules(
        self, make_project: Any, fake_runner: Any, capsys: pytest.CaptureFixture[str],
    ) -> None:
        root = make_project(files=_hpm_files("1.0.0", NAMED_EXPORT_MODULE, SETUP_PROXY_V1))
        runner = fake_runner(lambda _p, _payload: {
            "events": [["/api", {"target": "x"}]],
            "restored": True,
            "error": "Error: kaput",
        })

        assert len(extract_setup_proxy(root, runner)) == 0
        assert "continuing without proxy rules" in capsys.readouterr().out

    def test_harness_crash_gives_empty_rules(self, make_project: Any, fake_runner: Any) -> None:
        root = make_project(files=_hpm_files("1.0.0", NAMED_EXPORT_MODULE, SETUP_PROXY_V1))
        assert len(extract_setup_proxy(root, fake_runner())) == 0

    def test_unrestored_binding_is_reported(
        self, make_project: Any, fake_runner: Any, capsys: pytest.CaptureFixture[str],
    ) -> None:
        root = make_project(files=_hpm_files("1.0.0", NAMED_EXPORT_MODULE, SETUP_PROXY_V1))
        runner = fake_runner(lambda _p, _payload: {"events": [], "restored": False})

        extract_setup_proxy(root, runner)

        assert "not restored" in capsys.readouterr().out


def test_extract_proxy_rules_by_flavor(tmp_path: Path, fake_runner: Any) -> None:
    config = NormalizedConfig(raw_config={"devServer": {"proxy": "http://localhost:4000"}})
    runner = fake_runner()

    assert len(extract_proxy_rules(tmp_path, Flavor.OTHER, config, runner)) == 0
    assert len(extract_proxy_rules(tmp_path, Flavor.VUE_CLI, config, runner)) == 1
    assert len(extract_proxy_rules(tmp_path, Flavor.CRA_NO_EJECT, config, runner)) == 0
    assert runner.calls == []


# ---------------------------------------------------------------------------
# Real node
# ---------------------------------------------------------------------------


class TestInterceptionWithNode:
    """Both middleware API generations through the real harness."""

    @pytest.mark.parametrize(
        ("version", "index", "setup"),
        [
            ("1.0.0", NAMED_EXPORT_MODULE, SETUP_PROXY_V1),
            ("0.19.1", DEFAULT_EXPORT_MODULE, SETUP_PROXY_V0),
        ],
    )
    def test_both_api_generations_yield_the_same_rules(
        self,
        node_runner: NodeRunner,
        make_project: Any,
        version: str,
        index: str,
        setup: str,
    ) -> None:
        root = make_project(files=_hpm_files(version, index, setup))

        rules = extract_setup_proxy(root, node_runner)

        assert rules.to_dict() == {"/api": {"target": "http://localhost:3000"}}

    def test_binding_restored_after_success(
        self, node_runner: NodeRunner, make_project: Any,
    ) -> None:
        root = make_project(files=_hpm_files("1.0.0", NAMED_EXPORT_MODULE, SETUP_PROXY_V1))
        harness = InterceptionHarness(root, node_runner)

        result = harness.with_substituted_binding(
            PROXY_PACKAGE, BindingShape.NAMED_EXPORT, root / SETUP_PROXY_SCRIPT,
            export_name="createProxyMiddleware",
        )

        assert result.error is None
        assert result.restored is True
        assert len(result.events) == 1

    def test_binding_restored_after_failure(
        self, node_runner: NodeRunner, make_project: Any,
    ) -> None:
        root = make_project(files=_hpm_files("1.0.0", NAMED_EXPORT_MODULE, SETUP_PROXY_FAILING))
        harness = InterceptionHarness(root, node_runner)

        result = harness.with_substituted_binding(
            PROXY_PACKAGE, BindingShape.NAMED_EXPORT, root / SETUP_PROXY_SCRIPT,
            export_name="createProxyMiddleware",
        )

        assert result.error is not None
        assert "kaput" in result.error
        assert result.restored is True
        assert result.events == (("/api", {"target": "http://localhost:3000"}),)


class TestDevServerProxyList:
    """Array form of devServer.proxy (webpack-dev-server 4 and later)."""

    def test_context_list_gives_one_rule_each(self) -> None:
        rules = rules_from_dev_server({
            "devServer": {
                "proxy": [
                    {"context": ["/api", "/auth"], "target": "http://localhost:3000"},
                    {"context": "/ws", "target": "ws://localhost:3001", "ws": True},
                ],
            },
        })
        assert rules.to_dict() == {
            "/api": {"target": "http://localhost:3000"},
            "/auth": {"target": "http://localhost:3000"},
            "/ws": {"target": "ws://localhost:3001", "ws": True},
        }

    def test_entry_without_context_proxies_everything(self) -> None:
        rules = rules_from_dev_server({"devServer": {"proxy": [{"target": "http://t"}]}})
        assert rules.to_dict() == {"/": {"target": "http://t"}}

    def test_non_object_entries_are_skipped(
        self, capsys: pytest.CaptureFixture[str],
    ) -> None:
        rules = rules_from_dev_server({"devServer": {"proxy": [None, {"context": "/a"}]}})
        assert list(rules.to_dict()) == ["/a"]
        assert "skipped" in capsys.readouterr().out


class TestShorthandCalls:
    """Single-URL calls of the 0.x middleware API."""

    def test_url_is_split_into_path_and_target(self) -> None:
        rules = rules_from_events((("http://localhost:3000/api",),))
        assert rules.to_dict() == {"/api": {"target": "http://localhost:3000"}}

    def test_explicit_options_are_kept(self) -> None:
        rules = rules_from_events((("http://localhost:3000", {"changeOrigin": True}),))
        assert rules.to_dict() == {
            "/": {"target": "http://localhost:3000", "changeOrigin": True},
        }

    def test_non_path_context_warns(self, capsys: pytest.CaptureFixture[str]) -> None:
        rules = rules_from_events((("api", {"target": "http://t"}),))
        assert list(rules.to_dict()) == ["api"]
        assert "is not a path" in capsys.readouterr().out

    def test_glob_context_does_not_warn(self, capsys: pytest.CaptureFixture[str]) -> None:
        rules_from_events((("**/*.json", {"target": "http://t"}),))
        assert "is not a path" not in capsys.readouterr().out
