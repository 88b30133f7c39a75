"""
Error taxonomy for the admin API.

  DataSourceUnavailable  - the event store could not be queried
                           (connection, timeout). Degrades the dashboard;
                           503 on the raw analytics endpoints.
  MalformedAggregateRow  - a numeric aggregate field is null/garbage.
                           Recovered by zero-coercion, never surfaced.
  InvalidMetricLogInput  - the metric log write is missing a required
                           field. 400 to the client.
"""
from typing import Any


class AdminApiError(Exception):
    """Base class for errors raised by this service."""


class DataSourceUnavailable(AdminApiError):
    def __init__(self, view: str, reason: str = "event store unavailable") -> None:
        self.view = view
        self.reason = reason
        super().__init__(f"{view}: {reason}")


class MalformedAggregateRow(AdminApiError):
    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Non-numeric aggregate field {field!r}: {value!r}")


class InvalidMetricLogInput(AdminApiError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
