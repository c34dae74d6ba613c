"""Exception types raised by the simulation core."""

from typing import Any


class LeadTimeError(Exception):
    """Base class for all leadtime_sim errors."""


class ValidationError(LeadTimeError):
    """
    A production line carries an invalid input value.

    Fatal for the offending line only. The orchestrator converts it into a
    LineFailure so the remaining lines are still simulated.
    """

    def __init__(
        self,
        line: str,
        field: str,
        value: Any,
        message: str,
        product: str | None = None,
    ) -> None:
        self.line = line
        self.field = field
        self.value = value
        self.product = product
        self.message = message
        super().__init__(f"Line {line!r}: {message} ({field}={value!r})")


class ConfigurationError(LeadTimeError):
    """A global run parameter is invalid. Fatal for the whole run."""
