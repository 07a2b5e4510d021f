"""Tests for rule evaluation over whole pipelines."""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest

from pipecompat.compat.evaluator import check_compatibility_parsed, check_pipeline_compatibility
from pipecompat.compat.rules import COMPATIBILITY_RULES, CompatibilityRule, RuleRegistry, default_registry
from pipecompat.contracts import CompatibilityWarning, ParsedPipeline, RuleCategory, Severity
from tests.conftest import make_pipeline


def rule_ids(warnings: list[CompatibilityWarning]) -> list[str]:
    return [w.rule for w in warnings]


def _always(pipeline: ParsedPipeline) -> bool:
    return True


def _explode(pipeline: ParsedPipeline) -> bool:
    raise RuntimeError("condition bug")


def _rule(rule_id: str, condition: Any, severity: Severity = Severity.WARNING) -> CompatibilityRule:
    return CompatibilityRule(
        id=rule_id,
        name=rule_id,
        description=rule_id,
        condition=condition,
        severity=severity,
        message=f"{rule_id} message",
        suggestion=f"Fix {rule_id}",
        category=RuleCategory.OUTPUT,
    )


class TestScenarios:
    """End-to-end scenarios over the built-in registry."""

    def test_sync_response_behind_kafka(self) -> None:
        raw = {
            "input": {"kafka": {"addresses": ["localhost:9092"], "topics": ["test"]}},
            "output": {"sync_response": {}},
        }
        warnings = check_pipeline_compatibility(raw)
        matching = [w for w in warnings if w.rule == "sync-response-without-http-server"]
        assert len(matching) == 1
        assert matching[0].severity == Severity.ERROR

    def test_sync_response_behind_http_server(self) -> None:
        raw = {
            "input": {"http_server": {"address": "0.0.0.0:8080"}},
            "pipeline": {"processors": [{"mapping": "root = this"}]},
            "output": {"sync_response": {}},
        }
        assert "sync-response-without-http-server" not in rule_ids(check_pipeline_compatibility(raw))

    def test_try_then_catch(self) -> None:
        raw = make_pipeline(processors=[{"try": [{"mapping": "root = this"}]}, {"catch": [{"log": {"message": "x"}}]}])
        ids = rule_ids(check_pipeline_compatibility(raw))
        assert "try-without-catch" not in ids
        assert "catch-before-try" not in ids

    def test_catch_then_try(self) -> None:
        raw = make_pipeline(processors=[{"catch": [{"log": {"message": "x"}}]}, {"try": [{"mapping": "root = this"}]}])
        warnings = check_pipeline_compatibility(raw)
        catch_first = [w for w in warnings if w.rule == "catch-before-try"]
        assert len(catch_first) == 1
        assert catch_first[0].severity == Severity.ERROR

    def test_cdc_with_parallel(self) -> None:
        raw = {
            "input": {"postgres_cdc": {"dsn": "postgres://u@db/app"}},
            "pipeline": {"processors": [{"parallel": {"processors": [{"mapping": "root = this"}]}}]},
            "output": {"kafka": {"addresses": ["localhost:9092"], "topic": "changes"}},
        }
        assert "cdc-without-ordering" in rule_ids(check_pipeline_compatibility(raw))

    def test_switch_default_case(self) -> None:
        cases: list[dict[str, Any]] = [
            {"check": 'this.type=="a"', "output": {"kafka": {"topic": "a"}}},
            {"check": 'this.type=="b"', "output": {"kafka": {"topic": "b"}}},
        ]
        raw = make_pipeline(output={"switch": {"cases": cases}})
        assert "switch-without-default" in rule_ids(check_pipeline_compatibility(raw))

        cases.append({"output": {"drop": {}}})
        assert "switch-without-default" not in rule_ids(check_pipeline_compatibility(raw))

    def test_clean_pipeline_has_no_warnings(self, clean_pipeline: dict[str, Any]) -> None:
        assert check_pipeline_compatibility(clean_pipeline) == []


class TestEvaluationContract:
    """Ordering, determinism and isolation."""

    def test_warnings_follow_registry_order(self) -> None:
        raw = make_pipeline(
            input={"postgres_cdc": {}},
            processors=[{"catch": []}, {"try": []}, {"parallel": {"processors": []}}],
            output={"sync_response": {}},
        )
        ids = rule_ids(check_pipeline_compatibility(raw))
        order = [r.id for r in COMPATIBILITY_RULES]
        assert ids == sorted(ids, key=order.index)
        assert len(ids) >= 4

    def test_deterministic(self) -> None:
        raw = make_pipeline(input={"csv": {}}, processors=[{"mapping": "root = this.parse_json()"}], output={"stdout": {}})
        assert check_pipeline_compatibility(raw) == check_pipeline_compatibility(raw)

    def test_raw_not_mutated(self) -> None:
        raw = make_pipeline(
            input={"kafka": {"batching": {"count": 2000}}},
            processors=[{"parallel": {"processors": [{"http": {"url": "http://api.example.com"}}]}}],
            output={"http_client": {}},
        )
        before = copy.deepcopy(raw)
        check_pipeline_compatibility(raw)
        assert raw == before

    def test_warning_carries_rule_text(self) -> None:
        raw = make_pipeline(input={"kafka": {}}, output={"sync_response": {}})
        warning = check_pipeline_compatibility(raw)[0]
        rule = default_registry().get(warning.rule)
        assert warning.message == rule.message
        assert warning.suggestion == rule.suggestion
        assert warning.severity == rule.severity

    def test_custom_registry_is_used(self) -> None:
        registry = RuleRegistry([_rule("always", _always)])
        assert rule_ids(check_compatibility_parsed(ParsedPipeline(), registry)) == ["always"]

    def test_min_severity_filters(self) -> None:
        registry = RuleRegistry(
            [
                _rule("e", _always, Severity.ERROR),
                _rule("w", _always, Severity.WARNING),
                _rule("i", _always, Severity.INFO),
            ]
        )
        pipeline = ParsedPipeline()
        assert rule_ids(check_compatibility_parsed(pipeline, registry, min_severity=Severity.WARNING)) == ["e", "w"]
        assert rule_ids(check_compatibility_parsed(pipeline, registry, min_severity=Severity.ERROR)) == ["e"]
        assert rule_ids(check_compatibility_parsed(pipeline, registry)) == ["e", "w", "i"]


class TestRuleFaultIsolation:
    """A failing condition never stops evaluation."""

    def test_failing_rule_is_not_triggered(self) -> None:
        registry = RuleRegistry([_rule("before", _always), _rule("broken", _explode), _rule("after", _always)])
        assert rule_ids(check_compatibility_parsed(ParsedPipeline(), registry)) == ["before", "after"]

    def test_failing_rule_is_logged(self, capsys: pytest.CaptureFixture[str]) -> None:
        from pipecompat.core.logging import configure_logging

        configure_logging(json_output=True)
        registry = RuleRegistry([_rule("broken", _explode)])

        check_compatibility_parsed(ParsedPipeline(), registry)

        captured = capsys.readouterr()
        events = [json.loads(line) for line in captured.err.strip().splitlines()]
        failures = [e for e in events if e["event"] == "compatibility_rule_failed"]
        assert len(failures) == 1
        assert failures[0]["rule_id"] == "broken"
        assert failures[0]["error_type"] == "RuntimeError"
        assert failures[0]["error"] == "condition bug"
        assert failures[0]["level"] == "warning"
