"""
Pipeline error taxonomy. Every error is fatal for the run; nothing is retried.
Connection failures raised by duckdb are not wrapped and propagate as-is.
"""


class PipelineError(Exception):
    """Base class for failures raised by the pipeline itself."""


class RelationNotFound(PipelineError, LookupError):
    """A named relation does not exist at the source."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"Relation not found at source: {name!r} (available: {', '.join(available) or 'none'})")


class JoinKeyViolation(PipelineError, ValueError):
    """Duplicate keys on the right side of a join, or row count changed by a join."""


class MissingColumnError(PipelineError, KeyError):
    """A column required by a stage is absent."""

    def __init__(self, columns: list[str], context: str):
        self.columns = columns
        self.context = context
        super().__init__(f"Missing column(s) for {context}: {', '.join(columns)}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]
