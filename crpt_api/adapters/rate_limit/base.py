"""Rate gate interfaces and the immutable rate window they enforce.

The dispatcher depends on this abstraction (not the concrete gate) so a
different pacing strategy can be swapped in without touching it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from crpt_api.core.errors import ValidationAppError


class TimeUnit(Enum):
    """Time granularities a rate window can be expressed in.

    Each member's value is its length in nanoseconds.
    """

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 3_600 * 1_000_000_000
    DAYS = 86_400 * 1_000_000_000

    @property
    def nanos(self) -> int:
        return self.value


@dataclass(frozen=True)
class RateWindow:
    """At most ``request_limit`` calls per ``time_unit``.

    Attributes:
        time_unit: Length of the rolling window.
        request_limit: Maximum calls permitted per window.

    Raises:
        ValidationAppError: If the unit cannot be subdivided or the limit
            is not positive.
    """

    time_unit: TimeUnit
    request_limit: int

    def __post_init__(self) -> None:
        if not isinstance(self.time_unit, TimeUnit):
            raise ValidationAppError(
                code="rate_window_invalid_unit",
                message=f"time_unit must be a TimeUnit, got {type(self.time_unit).__name__}",
            )
        if self.time_unit is TimeUnit.NANOSECONDS:
            raise ValidationAppError(
                code="rate_window_unit_too_fine",
                message="NANOSECONDS cannot be divided into subintervals",
                details={"time_unit": self.time_unit.name},
            )
        # bool is an int subclass; True would silently mean a limit of 1
        if isinstance(self.request_limit, bool) or not isinstance(self.request_limit, int):
            raise ValidationAppError(
                code="rate_window_invalid_limit",
                message="request_limit must be an integer",
            )
        if self.request_limit <= 0:
            raise ValidationAppError(
                code="rate_window_invalid_limit",
                message="request_limit must be >= 1",
                details={"request_limit": self.request_limit},
            )

    @property
    def min_interval_ns(self) -> int:
        """Minimum spacing between two granted reservations, in nanoseconds."""
        return self.time_unit.nanos // self.request_limit


class AbstractRateGate(ABC):
    """Interface for components that pace calls by handing out delays."""

    @abstractmethod
    def reserve_slot(self) -> int:
        """Reserve the next call slot.

        Returns:
            Non-negative delay in nanoseconds the caller must wait before
            acting.
        """
        raise NotImplementedError
