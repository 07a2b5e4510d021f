"""Tests for the check_compatibility library entry point."""

from __future__ import annotations

import json
from typing import Any

from pipecompat import COMPATIBILITY_RULES, __version__, check_compatibility
from pipecompat.compat.rules import default_registry
from pipecompat.contracts import Severity
from tests.conftest import make_pipeline


class TestCheckCompatibility:
    def test_clean_pipeline(self, clean_pipeline: dict[str, Any]) -> None:
        assert check_compatibility(clean_pipeline) == {"warnings": []}

    def test_warning_records(self) -> None:
        result = check_compatibility(make_pipeline(input={"kafka": {"consumer_group": "g"}}, output={"sync_response": {}}))
        assert result["warnings"][0] == {
            "rule": "sync-response-without-http-server",
            "severity": "error",
            "message": "sync_response output requires http_server input to work correctly",
            "suggestion": "Change input to http_server or use a different output type",
        }

    def test_report_included_by_default(self) -> None:
        result = check_compatibility(make_pipeline(input={"kafka": {}}, output={"sync_response": {}}))
        assert result["report"].startswith("Compatibility Warnings:\n\n")

    def test_report_can_be_suppressed(self) -> None:
        result = check_compatibility(make_pipeline(input={"kafka": {}}, output={"sync_response": {}}), include_report=False)
        assert "report" not in result
        assert result["warnings"]

    def test_result_is_json_serializable(self) -> None:
        result = check_compatibility(make_pipeline(processors=[{"try": []}], output={"sync_response": {}}))
        assert json.loads(json.dumps(result)) == result

    def test_non_mapping_config(self) -> None:
        assert check_compatibility("not a pipeline") == {"warnings": []}
        assert check_compatibility(None) == {"warnings": []}

    def test_registry_and_min_severity(self) -> None:
        raw = make_pipeline(input={"http_server": {}}, output={"kafka": {}})
        assert [w["rule"] for w in check_compatibility(raw)["warnings"]] == ["http-server-without-sync-response"]

        registry = default_registry().without(["http-server-without-sync-response"])
        assert check_compatibility(raw, registry=registry) == {"warnings": []}
        assert check_compatibility(raw, min_severity=Severity.WARNING) == {"warnings": []}

    def test_package_exports(self) -> None:
        assert __version__
        assert len(COMPATIBILITY_RULES) >= 20
