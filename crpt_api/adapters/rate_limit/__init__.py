"""Rate limiting adapters.

The gate is the only piece of shared mutable state in the client; keeping it
behind an interface lets the dispatcher stay unaware of how pacing works.
"""

from crpt_api.adapters.rate_limit.base import AbstractRateGate, RateWindow, TimeUnit
from crpt_api.adapters.rate_limit.interval_gate import IntervalRateGate

__all__ = [
    "AbstractRateGate",
    "IntervalRateGate",
    "RateWindow",
    "TimeUnit",
]
