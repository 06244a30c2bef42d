"""
Pipeline Data Contracts
-----------------------

Defines the state the detection loop keeps between ticks:
LatestResult (what the UI shows), TickState (in-flight tracking) and the
CancellationToken tied to one activation of the loop.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict

# -----------------------------------------------------------------------------
# Latest result
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class LatestResult:
    """
    Summary of the first detected face of the most recent completed tick.

    age is the rounded estimate as display text (e.g. "24"); gender and emotion
    are the analyzer's labels, unchanged.
    """

    age: str
    gender: str
    emotion: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


# -----------------------------------------------------------------------------
# Tick tracking
# -----------------------------------------------------------------------------


class TickState(str, Enum):
    """State of the most recent inference call."""

    IDLE = "idle"          # nothing issued yet
    PENDING = "pending"    # call in flight; no new tick may be issued
    SETTLED = "settled"    # last call resolved (applied or discarded)


class CancellationToken:
    """
    One per activation of the detection loop.

    Checked before an inference call is issued and again before its result is
    applied; once cancelled it stays cancelled.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
