"""Exceptions raised by Tabground.

All the errors share :class:`TabgroundError` as their base,
so an analysis session can abort on any of them at the step
that detected the problem.

None of the errors is ever retried or recovered internally,
they always propagate to the caller of the operation
that detected them.
"""


class TabgroundError(Exception):
    """Base exception for all Tabground errors."""

    pass


class SchemaError(TabgroundError):
    """Raised when a referenced field does not exist in a table schema.

    Also raised when a dataset does not respect the
    invariants of its declared schema, like duplicated
    ``(country, year)`` observations.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    @classmethod
    def unknown_field(cls, field: str, available: list[str]) -> "SchemaError":
        """Build the error for a field missing from the available ones."""
        return cls(
            f"Unknown field {field!r}, available fields are: {', '.join(available)}",
            field=field,
        )


class ComputationError(TabgroundError):
    """Raised when computing a derived column fails.

    When the failure can be attributed to a specific record,
    ``row`` holds its index and ``record`` its values.
    """

    def __init__(
        self, message: str, row: int | None = None, record: dict | None = None
    ) -> None:
        super().__init__(message)
        self.row = row
        self.record = record


class DatasetNotFoundError(TabgroundError):
    """Raised when a dataset is not registered or its file is missing."""

    pass


class RenderError(TabgroundError):
    """Raised for chart descriptions referencing invalid fields or kinds.

    Also covers failures of the rendering backend itself.
    """

    pass


class ConfigurationError(TabgroundError):
    """Raised when a configuration value is invalid."""

    pass
