"""Compatibility rule registry.

Each rule is a value: identity, human-facing text, severity and a pure
condition over a ParsedPipeline. Conditions never read another rule's
outcome, so every rule can be tested on its own against a synthetic
pipeline.

The table is ordered and the order is observable: triggered rules are
reported in declaration order. ``COMPATIBILITY_RULES`` is built once at
import time against the default catalogs and never mutated; deployments
that extend catalogs or disable rules build their own table with
``build_rules()`` / ``RuleRegistry.without()``.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any, TypeAlias
from urllib.parse import urlsplit

from pipecompat.compat.catalogs import DEFAULT_CATALOGS, RuleCatalogs
from pipecompat.compat.scanners import (
    component_types,
    first_index,
    has_unmatched_open,
    identifiers,
    interpolations,
    iter_processors,
    last_index,
    mapping_texts,
    nested_processors,
)
from pipecompat.contracts import (
    ComponentRef,
    DuplicateRuleError,
    ParsedPipeline,
    RuleCategory,
    Severity,
    UnknownRuleError,
)

Condition: TypeAlias = Callable[[ParsedPipeline], bool]
CatalogCondition: TypeAlias = Callable[[ParsedPipeline, RuleCatalogs], bool]

_LARGE_BATCH_COUNT = 1000
_LARGE_WORKFLOW_BRANCHES = 10
_REPEATED_PARSE_THRESHOLD = 3


@dataclass(frozen=True, slots=True)
class CompatibilityRule:
    """One diagnostic rule.

    ``condition`` returns True iff the anti-pattern is present. It must be
    pure: no side effects and no dependency on other rules.
    """

    id: str
    name: str
    description: str
    condition: Condition
    severity: Severity
    message: str
    suggestion: str | None = None
    category: RuleCategory = RuleCategory.OUTPUT

    def evaluate(self, pipeline: ParsedPipeline) -> bool:
        """Run the condition against ``pipeline``."""
        return bool(self.condition(pipeline))


# =============================================================================
# Shared predicates
# =============================================================================


def _walk(pipeline: ParsedPipeline, catalogs: RuleCatalogs) -> Iterator[ComponentRef]:
    return iter_processors(pipeline.processors, nested_types=catalogs.nested_processor_types)


def _walk_type(pipeline: ParsedPipeline, catalogs: RuleCatalogs, component_type: str) -> Iterator[ComponentRef]:
    return (ref for ref in _walk(pipeline, catalogs) if ref.type == component_type)


def _input_settings(pipeline: ParsedPipeline) -> Mapping[str, Any]:
    return pipeline.input.settings if pipeline.input is not None else {}


def _input_declares_batching(pipeline: ParsedPipeline) -> bool:
    settings = _input_settings(pipeline)
    return "batching" in settings or "batch_count" in settings


def _input_batching(pipeline: ParsedPipeline) -> Mapping[str, Any] | None:
    batching = _input_settings(pipeline).get("batching")
    return batching if isinstance(batching, Mapping) else None


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_csv_input(pipeline: ParsedPipeline) -> bool:
    if pipeline.input is None:
        return False
    if pipeline.input.type == "csv":
        return True
    return pipeline.input.type == "file" and pipeline.input.settings.get("codec") == "csv"


# Field naming the declared resource, per processor type
_RESOURCE_FIELDS: dict[str, str] = {"cache": "resource", "cached": "cache", "rate_limit": "resource"}


def _resource_label(ref: ComponentRef) -> str | None:
    label = ref.settings.get(_RESOURCE_FIELDS.get(ref.type, "resource"))
    return label if isinstance(label, str) and label else None


def _is_plaintext_external(url: Any, loopback_hosts: frozenset[str]) -> bool:
    """Whether ``url`` is an absolute ``http://`` URL to a non-loopback host."""
    if not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        # Unparseable (e.g. broken IPv6 literal): not provably plaintext
        return False
    host = parts.hostname
    if parts.scheme.lower() != "http" or not host:
        return False
    if host in loopback_hosts or host.endswith(".localhost"):
        return False
    try:
        return not ipaddress.ip_address(host).is_loopback
    except ValueError:
        return True


# =============================================================================
# Sync response patterns
# =============================================================================


def _sync_response_without_http_server(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return p.output_type == "sync_response" and p.input_type != "http_server"


def _sync_response_with_batching(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return p.output_type == "sync_response" and _input_declares_batching(p)


def _http_server_without_sync_response(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return p.input_type == "http_server" and p.output_type != "sync_response"


# =============================================================================
# Batching
# =============================================================================


def _input_batching_output_no_batching(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return _input_declares_batching(p) and p.output is not None and p.output.type not in c.batching_outputs


def _kafka_batch_mismatch(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if p.input is None or p.output is None:
        return False
    if p.input.type not in c.kafka_components or p.output.type not in c.kafka_components:
        return False
    return "batching" in p.input.settings and "batching" not in p.output.settings


def _large_batch_small_output(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    batching = _input_batching(p)
    if batching is None:
        return False
    count = batching.get("count")
    return _is_number(count) and count > _LARGE_BATCH_COUNT and p.output_type in c.small_outputs


def _batch_without_window(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    batching = _input_batching(p)
    return batching is not None and batching.get("count") is not None and "period" not in batching


# =============================================================================
# Format compatibility
# =============================================================================


def _csv_input_json_processor(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if not _is_csv_input(p):
        return False
    return any("parse_json" in text for text in mapping_texts(_walk(p, c), c.mapping_processors))


def _binary_to_json_output(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if p.output_type not in c.json_outputs:
        return False
    return has_unmatched_open(p.processors, "compress", "decompress")


def _avro_without_schema_registry(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if not p.has_processor("avro"):
        return False
    return not (p.has_processor("schema_registry_encode") or p.has_processor("schema_registry_decode"))


def _protobuf_without_schema(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return any(
        not ref.settings.get("message") and not ref.settings.get("import_paths") for ref in p.processors_of_type("protobuf")
    )


# =============================================================================
# Resource sharing
# =============================================================================


def _multiple_db_connections(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    seen = {ref.type for ref in p.processors}
    if p.input is not None:
        seen.add(p.input.type)
    if p.output is not None:
        seen.add(p.output.type)
    return len(seen & c.database_components) > 1


def _cache_without_resource(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    declared = p.resources.cache_labels()
    return any(
        _resource_label(ref) not in declared for ref in _walk(p, c) if ref.type in ("cache", "cached")
    )


def _rate_limit_without_resource(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    declared = p.resources.rate_limiter_labels()
    return any(_resource_label(ref) not in declared for ref in _walk_type(p, c, "rate_limit"))


def _duplicate_cache_keys(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    cache_procs = list(_walk_type(p, c, "cache"))
    if len(cache_procs) < 2:
        return False
    operators: dict[str, set[str]] = {}
    for ref in cache_procs:
        resource = str(ref.settings.get("resource", ""))
        operators.setdefault(resource, set()).add(str(ref.settings.get("operator", "")))
    return any({"get", "set"} <= ops for ops in operators.values())


# =============================================================================
# Error handling
# =============================================================================


def _http_without_retry(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return any("retries" not in ref.settings and "retry" not in ref.settings for ref in _walk_type(p, c, "http"))


def _try_without_catch(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    last_try = last_index(p.processors, "try")
    return last_try != -1 and last_index(p.processors, "catch") < last_try


def _catch_before_try(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    first_try = first_index(p.processors, "try")
    first_catch = first_index(p.processors, "catch")
    return first_try != -1 and first_catch != -1 and first_catch < first_try


# =============================================================================
# Performance
# =============================================================================


def _blocking_in_parallel(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    for parallel in _walk_type(p, c, "parallel"):
        children = iter_processors(nested_processors(parallel), nested_types=c.nested_processor_types)
        if any(child.type in c.blocking_processors for child in children):
            return True
    return False


def _unbounded_parallel(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return any("cap" not in ref.settings for ref in _walk_type(p, c, "parallel"))


def _large_workflow_dag(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    for workflow in _walk_type(p, c, "workflow"):
        branches = workflow.settings.get("branches")
        if isinstance(branches, Mapping) and len(branches) > _LARGE_WORKFLOW_BRANCHES:
            return True
    return False


def _json_parse_every_message(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    parsing = [text for text in mapping_texts(_walk(p, c), c.mapping_processors) if "parse_json()" in text]
    return len(parsing) >= _REPEATED_PARSE_THRESHOLD


# =============================================================================
# CDC patterns
# =============================================================================


def _cdc_without_ordering(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if p.input_type not in c.cdc_inputs:
        return False
    return any(True for _ in _walk_type(p, c, "parallel"))


def _cdc_to_non_idempotent_output(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if p.input_type not in c.cdc_inputs or p.output is None:
        return False
    return p.output.type not in c.idempotent_outputs


# =============================================================================
# Security
# =============================================================================


def _http_without_tls(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return any(_is_plaintext_external(ref.settings.get("url"), c.loopback_hosts) for ref in _walk_type(p, c, "http"))


def _sensitive_data_logging(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    for log in _walk_type(p, c, "log"):
        message = log.settings.get("message")
        if not isinstance(message, str):
            continue
        for expression in interpolations(message):
            if any(keyword in name for name in identifiers(expression) for keyword in c.sensitive_keywords):
                return True
    return False


# =============================================================================
# Messaging
# =============================================================================


def _kafka_consumer_group_missing(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if p.input is None or p.input.type not in c.kafka_components:
        return False
    return not p.input.settings.get("consumer_group")


def _nats_request_timeout(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    return any(not ref.settings.get("timeout") for ref in _walk_type(p, c, "nats_request_reply"))


# =============================================================================
# Output patterns
# =============================================================================


def _switch_without_default(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if p.output is None or p.output.type != "switch":
        return False
    cases = p.output.settings.get("cases")
    if not isinstance(cases, list):
        return False
    # A case with no check (or an empty one) matches everything
    return not any(isinstance(case, Mapping) and not case.get("check") for case in cases)


def _broker_fanout_unbalanced(p: ParsedPipeline, c: RuleCatalogs) -> bool:
    if p.output is None or p.output.type != "broker":
        return False
    if p.output.settings.get("pattern") != "fan_out":
        return False
    outputs = p.output.settings.get("outputs")
    if not isinstance(outputs, list) or len(outputs) < 2:
        return False
    types = set(component_types(outputs))
    return bool(types & c.fast_outputs) and bool(types & c.slow_outputs)


# =============================================================================
# Rule table
# =============================================================================


@dataclass(frozen=True, slots=True)
class _RuleDef:
    id: str
    name: str
    description: str
    condition: CatalogCondition
    severity: Severity
    message: str
    suggestion: str | None
    category: RuleCategory


_RULE_DEFS: tuple[_RuleDef, ...] = (
    # --- Sync response ---
    _RuleDef(
        id="sync-response-without-http-server",
        name="Sync Response Without HTTP Server",
        description="sync_response output requires http_server input",
        condition=_sync_response_without_http_server,
        severity=Severity.ERROR,
        message="sync_response output requires http_server input to work correctly",
        suggestion="Change input to http_server or use a different output type",
        category=RuleCategory.SYNC_RESPONSE,
    ),
    _RuleDef(
        id="sync-response-with-batching",
        name="Sync Response with Batching",
        description="Batching is incompatible with synchronous responses",
        condition=_sync_response_with_batching,
        severity=Severity.ERROR,
        message="Batching on input is incompatible with sync_response pattern",
        suggestion="Remove batching from input when using sync_response",
        category=RuleCategory.SYNC_RESPONSE,
    ),
    _RuleDef(
        id="http-server-without-sync-response",
        name="HTTP Server Without Sync Response",
        description="http_server input typically needs sync_response for request-reply",
        condition=_http_server_without_sync_response,
        severity=Severity.INFO,
        message="http_server input without sync_response will not return responses to clients",
        suggestion="Add sync_response output if you need request-reply pattern",
        category=RuleCategory.SYNC_RESPONSE,
    ),
    # --- Batching ---
    _RuleDef(
        id="input-batching-output-no-batching",
        name="Input Batching Without Output Support",
        description="Input batching should match output batching capabilities",
        condition=_input_batching_output_no_batching,
        severity=Severity.WARNING,
        message="Output type may not efficiently handle batched messages",
        suggestion="Consider adding batching to output or removing from input",
        category=RuleCategory.BATCHING,
    ),
    _RuleDef(
        id="kafka-batch-mismatch",
        name="Kafka Batch Size Mismatch",
        description="Kafka consumer and producer batch sizes should be considered together",
        condition=_kafka_batch_mismatch,
        severity=Severity.INFO,
        message="Kafka input has batching but output does not - consider output batching for efficiency",
        suggestion="Add batching to kafka output: batching: { count: 100, period: 1s }",
        category=RuleCategory.BATCHING,
    ),
    _RuleDef(
        id="large-batch-small-output",
        name="Large Batch to Small Output",
        description="Large input batches to outputs with size limits",
        condition=_large_batch_small_output,
        severity=Severity.WARNING,
        message="Large batch size (>1000) may cause issues with HTTP-based outputs",
        suggestion="Consider reducing batch size or using batching on output with byte_size limit",
        category=RuleCategory.BATCHING,
    ),
    _RuleDef(
        id="batch-without-window",
        name="Batch Without Time Window",
        description="Count-based batching without time window may cause delays",
        condition=_batch_without_window,
        severity=Severity.INFO,
        message="Count-based batching without time period may cause messages to wait indefinitely",
        suggestion="Add period to batching: batching: { count: 100, period: 10s }",
        category=RuleCategory.BATCHING,
    ),
    # --- Format compatibility ---
    _RuleDef(
        id="csv-input-json-processor",
        name="CSV Input with JSON Processor",
        description="CSV input produces structured data, not JSON strings",
        condition=_csv_input_json_processor,
        severity=Severity.WARNING,
        message="CSV input already produces structured data - parse_json() is unnecessary",
        suggestion="Access CSV fields directly: root.field = this.column_name",
        category=RuleCategory.FORMAT,
    ),
    _RuleDef(
        id="binary-to-json-output",
        name="Binary Data to JSON Output",
        description="Compressed data must be decompressed before reaching a JSON output",
        condition=_binary_to_json_output,
        severity=Severity.ERROR,
        message="Compressed data sent to JSON-based output will cause errors",
        suggestion="Add decompress processor before JSON output or use a binary-compatible output",
        category=RuleCategory.FORMAT,
    ),
    _RuleDef(
        id="avro-without-schema-registry",
        name="Avro Without Schema Registry",
        description="Avro encoding/decoding typically requires schema registry",
        condition=_avro_without_schema_registry,
        severity=Severity.INFO,
        message="Using Avro processor without schema registry may cause schema evolution issues",
        suggestion="Consider using schema_registry_encode/decode for schema management",
        category=RuleCategory.FORMAT,
    ),
    _RuleDef(
        id="protobuf-without-schema",
        name="Protobuf Without Schema Definition",
        description="Protobuf processor needs schema configuration",
        condition=_protobuf_without_schema,
        severity=Severity.ERROR,
        message="Protobuf processor requires message type and schema configuration",
        suggestion="Add message type and import_paths to protobuf processor config",
        category=RuleCategory.FORMAT,
    ),
    # --- Resource sharing ---
    _RuleDef(
        id="multiple-db-connections",
        name="Multiple Database Connections",
        description="Multiple database connections should use connection pooling",
        condition=_multiple_db_connections,
        severity=Severity.WARNING,
        message="Multiple database connections detected - consider using resource pooling",
        suggestion="Consider defining database connections in resources section and reference by label",
        category=RuleCategory.RESOURCES,
    ),
    _RuleDef(
        id="cache-without-resource",
        name="Cache Processor Without Resource",
        description="Cache processor must reference a declared cache resource",
        condition=_cache_without_resource,
        severity=Severity.ERROR,
        message="Cache processor references a cache resource that is not declared in cache_resources",
        suggestion="Add a cache_resources entry whose label matches the processor's resource (cache) or cache (cached) field",
        category=RuleCategory.RESOURCES,
    ),
    _RuleDef(
        id="rate-limit-without-resource",
        name="Rate Limit Without Resource",
        description="Rate limit processor must reference a declared rate limit resource",
        condition=_rate_limit_without_resource,
        severity=Severity.ERROR,
        message="Rate limit processor references a rate limit that is not declared in rate_limit_resources",
        suggestion="Add a rate_limit_resources entry whose label matches the processor's resource field",
        category=RuleCategory.RESOURCES,
    ),
    _RuleDef(
        id="duplicate-cache-keys",
        name="Potential Cache Key Conflicts",
        description="Multiple cache operations on same resource may conflict",
        condition=_duplicate_cache_keys,
        severity=Severity.INFO,
        message="Multiple cache operations on same resource - ensure key patterns do not conflict",
        suggestion="Consider using different key prefixes or separate cache resources",
        category=RuleCategory.RESOURCES,
    ),
    # --- Error handling ---
    _RuleDef(
        id="http-without-retry",
        name="HTTP Processor Without Retry",
        description="HTTP processors should have retry configuration",
        condition=_http_without_retry,
        severity=Severity.INFO,
        message="HTTP processor without explicit retry configuration may fail on transient errors",
        suggestion="Add retries: 3 and retry_period: 1s to http processor config",
        category=RuleCategory.ERROR_HANDLING,
    ),
    _RuleDef(
        id="try-without-catch",
        name="Try Without Catch",
        description="Try processors should be followed by catch handling",
        condition=_try_without_catch,
        severity=Severity.WARNING,
        message="try processor without catch - errors will propagate unhandled",
        suggestion="Add catch processor after try to handle errors gracefully",
        category=RuleCategory.ERROR_HANDLING,
    ),
    _RuleDef(
        id="catch-before-try",
        name="Catch Before Try",
        description="Catch processor should come after try",
        condition=_catch_before_try,
        severity=Severity.ERROR,
        message="catch processor appears before try - catch must come after try",
        suggestion="Reorder processors: try should come before catch",
        category=RuleCategory.ERROR_HANDLING,
    ),
    # --- Performance ---
    _RuleDef(
        id="blocking-in-parallel",
        name="Blocking Operations in Parallel",
        description="Long-running operations in parallel may exhaust the worker pool",
        condition=_blocking_in_parallel,
        severity=Severity.WARNING,
        message="Blocking operations (http, sleep, subprocess) in parallel may exhaust resources",
        suggestion="Consider limiting parallel cap or using async patterns",
        category=RuleCategory.PERFORMANCE,
    ),
    _RuleDef(
        id="unbounded-parallel",
        name="Unbounded Parallel Processing",
        description="Parallel processor without cap may cause resource exhaustion",
        condition=_unbounded_parallel,
        severity=Severity.WARNING,
        message="Parallel processor without cap may spawn unlimited workers",
        suggestion="Add cap to parallel processor: parallel: { cap: 10, processors: [...] }",
        category=RuleCategory.PERFORMANCE,
    ),
    _RuleDef(
        id="large-workflow-dag",
        name="Large Workflow DAG",
        description="Very large workflow DAGs may impact performance",
        condition=_large_workflow_dag,
        severity=Severity.INFO,
        message="Large workflow DAG (>10 branches) may be hard to debug and maintain",
        suggestion="Consider splitting into multiple pipelines or simplifying the workflow",
        category=RuleCategory.PERFORMANCE,
    ),
    _RuleDef(
        id="json-parse-every-message",
        name="Repeated JSON Parsing",
        description="Multiple parse_json calls on same data is inefficient",
        condition=_json_parse_every_message,
        severity=Severity.INFO,
        message="Multiple parse_json() calls detected - consider parsing once and storing in variable",
        suggestion="Use let: let data = this.parse_json(); then access $data.field",
        category=RuleCategory.PERFORMANCE,
    ),
    # --- CDC ---
    _RuleDef(
        id="cdc-without-ordering",
        name="CDC Without Ordering Guarantee",
        description="CDC sources need careful ordering for consistency",
        condition=_cdc_without_ordering,
        severity=Severity.WARNING,
        message="CDC source with parallel processing may cause out-of-order updates",
        suggestion="Ensure ordering is preserved by using sequential processing or key-based partitioning",
        category=RuleCategory.CDC,
    ),
    _RuleDef(
        id="cdc-to-non-idempotent-output",
        name="CDC to Non-Idempotent Output",
        description="CDC replays require idempotent outputs",
        condition=_cdc_to_non_idempotent_output,
        severity=Severity.WARNING,
        message="CDC source to non-idempotent output may cause duplicates on replay",
        suggestion="Use outputs that support upsert/idempotent writes (Kafka key, ES id, MongoDB upsert)",
        category=RuleCategory.CDC,
    ),
    # --- Security ---
    _RuleDef(
        id="http-without-tls",
        name="HTTP Without TLS",
        description="HTTP connections should use TLS for security",
        condition=_http_without_tls,
        severity=Severity.WARNING,
        message="HTTP processor using non-TLS connection to external host",
        suggestion="Use HTTPS for external connections to protect data in transit",
        category=RuleCategory.SECURITY,
    ),
    _RuleDef(
        id="sensitive-data-logging",
        name="Sensitive Data in Logs",
        description="Log processor may expose sensitive data",
        condition=_sensitive_data_logging,
        severity=Severity.WARNING,
        message="Log processor may expose sensitive data - review logged fields",
        suggestion="Redact sensitive fields before logging or use field-level masking",
        category=RuleCategory.SECURITY,
    ),
    # --- Messaging ---
    _RuleDef(
        id="kafka-consumer-group-missing",
        name="Kafka Without Consumer Group",
        description="Kafka input should specify consumer group for offset management",
        condition=_kafka_consumer_group_missing,
        severity=Severity.INFO,
        message="Kafka input without consumer_group will not commit offsets",
        suggestion="Add consumer_group for reliable offset tracking and scaling",
        category=RuleCategory.MESSAGING,
    ),
    _RuleDef(
        id="nats-request-timeout",
        name="NATS Request Without Timeout",
        description="NATS request-reply should have timeout configured",
        condition=_nats_request_timeout,
        severity=Severity.WARNING,
        message="NATS request-reply without timeout may hang indefinitely",
        suggestion="Add timeout: 5s to nats_request_reply processor",
        category=RuleCategory.MESSAGING,
    ),
    # --- Output patterns ---
    _RuleDef(
        id="switch-without-default",
        name="Switch Output Without Default",
        description="Switch output should have a default case",
        condition=_switch_without_default,
        severity=Severity.WARNING,
        message="Switch output without default case - unmatched messages will error",
        suggestion="Add a default case without check: - output: drop: {}",
        category=RuleCategory.OUTPUT,
    ),
    _RuleDef(
        id="broker-fanout-unbalanced",
        name="Broker Fan-Out Unbalanced",
        description="Fan-out with slow output may block faster outputs",
        condition=_broker_fanout_unbalanced,
        severity=Severity.INFO,
        message="Fan-out broker with mixed output speeds - slow outputs may bottleneck fast ones",
        suggestion="Consider using broker with pattern: fan_out_sequential or separate pipelines",
        category=RuleCategory.OUTPUT,
    ),
)


def build_rules(catalogs: RuleCatalogs = DEFAULT_CATALOGS) -> tuple[CompatibilityRule, ...]:
    """Build the ordered rule table with conditions bound to ``catalogs``."""
    return tuple(
        CompatibilityRule(
            id=d.id,
            name=d.name,
            description=d.description,
            condition=partial(d.condition, c=catalogs),
            severity=d.severity,
            message=d.message,
            suggestion=d.suggestion,
            category=d.category,
        )
        for d in _RULE_DEFS
    )


class RuleRegistry:
    """Ordered, immutable collection of compatibility rules.

    Construction rejects duplicate ids. Every "modification" returns a new
    registry; the rule tuple itself is never mutated.
    """

    __slots__ = ("_by_id", "_rules")

    def __init__(self, rules: Iterable[CompatibilityRule]) -> None:
        self._rules: tuple[CompatibilityRule, ...] = tuple(rules)
        ids = [rule.id for rule in self._rules]
        duplicates = sorted({rule_id for rule_id in ids if ids.count(rule_id) > 1})
        if duplicates:
            raise DuplicateRuleError(duplicates)
        self._by_id: dict[str, CompatibilityRule] = {rule.id: rule for rule in self._rules}

    @property
    def rules(self) -> tuple[CompatibilityRule, ...]:
        return self._rules

    def __iter__(self) -> Iterator[CompatibilityRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def ids(self) -> list[str]:
        return [rule.id for rule in self._rules]

    def get(self, rule_id: str) -> CompatibilityRule:
        """Look up a rule by id.

        Raises:
            UnknownRuleError: No rule has this id.
        """
        if rule_id not in self._by_id:
            raise UnknownRuleError([rule_id], self.ids())
        return self._by_id[rule_id]

    def without(self, rule_ids: Iterable[str]) -> RuleRegistry:
        """Return a registry with the given rules removed, order preserved.

        Raises:
            UnknownRuleError: An id is not in this registry.
        """
        excluded = set(rule_ids)
        unknown = sorted(excluded - self._by_id.keys())
        if unknown:
            raise UnknownRuleError(unknown, self.ids())
        return RuleRegistry(rule for rule in self._rules if rule.id not in excluded)


COMPATIBILITY_RULES: tuple[CompatibilityRule, ...] = build_rules(DEFAULT_CATALOGS)

_DEFAULT_REGISTRY = RuleRegistry(COMPATIBILITY_RULES)


def default_registry() -> RuleRegistry:
    """Process-wide registry over COMPATIBILITY_RULES."""
    return _DEFAULT_REGISTRY
