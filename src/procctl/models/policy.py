"""
Termination policy and outcome models.
"""

from dataclasses import dataclass
from enum import Enum

from ..constants import TimeoutConstants
from ..validation import validate_positive_float
from .config import ProcessConfig


class TerminationOutcome(Enum):
    """Result of a single ProcessController.terminate call."""
    ALREADY_STOPPED = "already_stopped"
    STOPPED_GRACEFULLY = "stopped_gracefully"
    STOPPED_FORCIBLY = "stopped_forcibly"
    FAILED = "failed"

    @property
    def stopped(self) -> bool:
        """True when this call actually brought the process down."""
        return self in (TerminationOutcome.STOPPED_GRACEFULLY, TerminationOutcome.STOPPED_FORCIBLY)


@dataclass(frozen=True)
class TerminationPolicy:
    """
    How a termination request escalates.

    Attributes:
        force: Skip the graceful phase and kill immediately.
        timeout: Seconds allowed for a graceful exit.
        poll_interval: Seconds between liveness checks, and the wait after a kill.
    """

    force: bool = False
    timeout: float = TimeoutConstants.STOP_TIMEOUT
    poll_interval: float = TimeoutConstants.POLL_INTERVAL

    def __post_init__(self):
        validate_positive_float(self.timeout, min_value=0.0, field_name="timeout")
        validate_positive_float(self.poll_interval, min_value=0.001, field_name="poll_interval")

    @classmethod
    def from_config(cls, process_config: ProcessConfig, force: bool = False) -> "TerminationPolicy":
        return cls(
            force=force,
            timeout=process_config.stop_timeout,
            poll_interval=process_config.poll_interval,
        )
