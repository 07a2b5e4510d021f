"""Component-type catalogs consulted by compatibility rules.

Each catalog is an explicit list of component types that share a property
relevant to one or more rules (can batch, emits JSON, is a CDC source...).
The defaults below cover the component types whose behaviour is known; they
are deliberately not exhaustive. Deployments extend them through
``CatalogSettings`` rather than by editing rule bodies, and extension only
ever adds members.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, fields, replace


@dataclass(frozen=True, slots=True)
class RuleCatalogs:
    """Immutable set of catalogs a rule table is built against."""

    # Outputs that accept batched messages natively
    batching_outputs: frozenset[str] = frozenset(
        {
            "aws_s3",
            "gcp_cloud_storage",
            "azure_blob_storage",
            "elasticsearch_v8",
            "opensearch",
            "http_client",
            "kafka",
            "kafka_franz",
            "nats",
            "nats_jetstream",
            "gcp_bigquery",
            "snowflake_streaming",
            "mongodb",
            "qdrant",
            "pinecone",
            "sql_insert",
        }
    )
    # Outputs that require JSON documents
    json_outputs: frozenset[str] = frozenset({"elasticsearch_v8", "opensearch", "mongodb", "gcp_bigquery"})
    # Components that hold their own database connection, wherever they appear
    database_components: frozenset[str] = frozenset(
        {
            "sql_select",
            "sql_insert",
            "sql_raw",
            "mongodb",
            "couchbase",
            "postgres_cdc",
            "mysql_cdc",
            "elasticsearch_v8",
        }
    )
    cdc_inputs: frozenset[str] = frozenset({"postgres_cdc", "mysql_cdc", "mongodb_cdc", "cockroachdb_changefeed"})
    # Outputs where replaying the same change event overwrites rather than duplicates
    # (message key, document id, upsert)
    idempotent_outputs: frozenset[str] = frozenset({"kafka", "kafka_franz", "elasticsearch_v8", "opensearch", "mongodb"})
    # Processors that block their worker on network or process I/O
    blocking_processors: frozenset[str] = frozenset({"http", "sleep", "subprocess"})
    sensitive_keywords: frozenset[str] = frozenset({"password", "secret", "token", "key", "credential", "ssn"})
    # Processors whose config is mapping-language source text
    mapping_processors: frozenset[str] = frozenset({"mapping", "bloblang"})
    kafka_components: frozenset[str] = frozenset({"kafka", "kafka_franz"})
    loopback_hosts: frozenset[str] = frozenset({"localhost", "127.0.0.1", "::1"})
    # Outputs with small request-size limits
    small_outputs: frozenset[str] = frozenset({"http_client", "http_server", "websocket"})
    fast_outputs: frozenset[str] = frozenset({"kafka", "nats", "redis_pubsub"})
    slow_outputs: frozenset[str] = frozenset({"http_client", "aws_s3", "elasticsearch_v8"})
    # Processors that carry child processor lists
    nested_processor_types: frozenset[str] = frozenset(
        {"branch", "try", "catch", "workflow", "parallel", "retry", "for_each", "while", "switch", "cached"}
    )

    def extended(self, **extra: Iterable[str]) -> RuleCatalogs:
        """Return a copy with ``extra`` members unioned into the named catalogs.

        Raises:
            ValueError: A keyword does not name a catalog.
            TypeError: A value is not an iterable of strings.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(extra) - known)
        if unknown:
            raise ValueError(f"Unknown catalog(s): {', '.join(unknown)}. Available: {', '.join(sorted(known))}")

        changes: dict[str, frozenset[str]] = {}
        for name, members in extra.items():
            if isinstance(members, str) or not hasattr(members, "__iter__"):
                raise TypeError(f"Catalog '{name}' extension must be a list of strings, got {type(members).__name__}")
            additions = frozenset(members)
            if not all(isinstance(m, str) for m in additions):
                raise TypeError(f"Catalog '{name}' extension must contain only strings")
            changes[name] = getattr(self, name) | additions
        return replace(self, **changes)


DEFAULT_CATALOGS = RuleCatalogs()
