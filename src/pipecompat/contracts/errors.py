"""Exceptions raised for programming and configuration faults.

These are distinct from diagnostic severities: a pipeline that triggers
ERROR rules never raises. The exceptions below signal a broken rule
registry or invalid engine configuration, and they propagate.
"""


class RegistryError(Exception):
    """Base class for rule registry faults."""

    pass


class DuplicateRuleError(RegistryError, ValueError):
    """Raised when two rules in one registry share an id."""

    def __init__(self, rule_ids: list[str]) -> None:
        self.rule_ids = rule_ids
        super().__init__(f"Duplicate compatibility rule id(s): {', '.join(rule_ids)}")


class UnknownRuleError(RegistryError, KeyError):
    """Raised when a rule id is not present in the registry."""

    def __init__(self, rule_ids: list[str], available: list[str]) -> None:
        self.rule_ids = rule_ids
        self.available = available
        super().__init__(f"Unknown compatibility rule id(s): {', '.join(rule_ids)}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])
