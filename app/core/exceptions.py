"""
Error taxonomy for the query engine.

QueryValidationError is raised while normalizing request input, before any
predicate is built. StoreError wraps failures of the underlying store.
"""


class QueryValidationError(ValueError):
    """Malformed filter input (bad date, non-numeric age bound)."""

    def __init__(self, field: str, value: str, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {value!r} ({reason})")


class StoreError(RuntimeError):
    """Read or aggregation failure in the transaction store."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Store {operation} failed: {cause}")
