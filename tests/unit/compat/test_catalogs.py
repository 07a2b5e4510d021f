"""Tests for rule catalogs."""

from __future__ import annotations

import pytest

from pipecompat.compat.catalogs import DEFAULT_CATALOGS, RuleCatalogs


class TestRuleCatalogs:
    def test_defaults_documented_members(self) -> None:
        assert "http" in DEFAULT_CATALOGS.blocking_processors
        assert "password" in DEFAULT_CATALOGS.sensitive_keywords
        assert "kafka" in DEFAULT_CATALOGS.idempotent_outputs
        assert "postgres_cdc" in DEFAULT_CATALOGS.cdc_inputs

    def test_extended_adds_members(self) -> None:
        extended = DEFAULT_CATALOGS.extended(blocking_processors=["grpc_call"], cdc_inputs=("oracle_cdc",))
        assert extended.blocking_processors == DEFAULT_CATALOGS.blocking_processors | {"grpc_call"}
        assert "oracle_cdc" in extended.cdc_inputs
        assert extended.json_outputs == DEFAULT_CATALOGS.json_outputs

    def test_extended_returns_new_instance(self) -> None:
        extended = DEFAULT_CATALOGS.extended(json_outputs=["solr"])
        assert extended is not DEFAULT_CATALOGS
        assert "solr" not in DEFAULT_CATALOGS.json_outputs

    def test_unknown_catalog(self) -> None:
        with pytest.raises(ValueError, match="Unknown catalog"):
            DEFAULT_CATALOGS.extended(no_such_catalog=["x"])

    def test_string_value_rejected(self) -> None:
        with pytest.raises(TypeError, match="list of strings"):
            DEFAULT_CATALOGS.extended(json_outputs="solr")

    def test_non_string_member_rejected(self) -> None:
        with pytest.raises(TypeError, match="only strings"):
            DEFAULT_CATALOGS.extended(json_outputs=["solr", 3])  # type: ignore[list-item]

    def test_frozen(self) -> None:
        catalogs = RuleCatalogs()
        with pytest.raises(AttributeError):
            catalogs.json_outputs = frozenset()  # type: ignore[misc]
