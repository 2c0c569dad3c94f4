"""
Wait Operations Configuration

Defines how long a caller is willing to wait for a long-running operation
(TimeoutPolicy) and the tunables of the operation manager
(WaitOperationConfig).

Typical usage:
    from wait_operations import TimeoutPolicy

    # Poll every 200ms for at most 30 seconds
    policy = TimeoutPolicy.bounded(30.0, poll_interval=0.2)

    # Check progress once and return
    policy = TimeoutPolicy.instant()

    status = await manager.load_collection("documents", timeout=policy)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_POLL_INTERVAL = 0.5


class WaitMode(str, Enum):
    """
    How a TimeoutPolicy waits.

    Attributes:
        INSTANT: Check progress exactly once and return
        BOUNDED: Poll until done, failed, or the timeout elapses
    """
    INSTANT = "instant"
    BOUNDED = "bounded"


@dataclass(frozen=True)
class TimeoutPolicy:
    """
    Wait budget and poll cadence for a long-running operation.

    Attributes:
        timeout: Wait budget in seconds. None means INSTANT mode.
                 A non-positive value is treated as INSTANT.
        poll_interval: Seconds between successive progress checks.
                       Non-positive values fall back to DEFAULT_POLL_INTERVAL.

    There is no unlimited mode; every bounded wait has a finite ceiling.
    """
    timeout: Optional[float] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self):
        """Normalize invalid values after initialization."""
        if self.timeout is not None and self.timeout <= 0:
            logger.warning(
                f"timeout ({self.timeout}) must be positive for a bounded wait. "
                f"Checking progress once instead."
            )
            object.__setattr__(self, "timeout", None)

        if self.poll_interval is None or self.poll_interval <= 0:
            logger.warning(
                f"poll_interval ({self.poll_interval}) must be positive. "
                f"Setting to {DEFAULT_POLL_INTERVAL}."
            )
            object.__setattr__(self, "poll_interval", DEFAULT_POLL_INTERVAL)

    @classmethod
    def instant(cls) -> "TimeoutPolicy":
        """Policy that checks progress once without waiting."""
        return cls()

    @classmethod
    def bounded(cls, timeout: float, poll_interval: Optional[float] = None) -> "TimeoutPolicy":
        """
        Policy that polls for at most `timeout` seconds.

        Args:
            timeout: Wait budget in seconds
            poll_interval: Seconds between polls; DEFAULT_POLL_INTERVAL if None
        """
        if poll_interval is None:
            poll_interval = DEFAULT_POLL_INTERVAL
        return cls(timeout=timeout, poll_interval=poll_interval)

    @property
    def mode(self) -> WaitMode:
        return WaitMode.INSTANT if self.timeout is None else WaitMode.BOUNDED

    @property
    def is_instant(self) -> bool:
        return self.mode == WaitMode.INSTANT

    @classmethod
    def from_dict(cls, policy_dict: Dict[str, Any]) -> "TimeoutPolicy":
        """
        Create a policy from a dictionary, e.g. loaded from YAML.

        Unknown keys are ignored.
        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_dict = {k: v for k, v in policy_dict.items() if k in valid_fields}
        return cls(**filtered_dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode.value,
            'timeout': self.timeout,
            'poll_interval': self.poll_interval
        }


@dataclass
class WaitOperationConfig:
    """
    Configuration for OperationManager.

    Attributes:
        default_poll_interval: Poll interval used when a caller passes the
                               timeout as a plain number of seconds.
        progress_log_every: Log progress at INFO level every N polls.
                            0 disables periodic progress logging.

    Example:
        ```python
        config = WaitOperationConfig(default_poll_interval=1.0)
        manager = OperationManager(transport, config=config)

        # 30 second budget, polled every second
        status = await manager.load_collection("documents", timeout=30)
        ```
    """

    default_poll_interval: float = DEFAULT_POLL_INTERVAL
    progress_log_every: int = 5

    def __post_init__(self):
        """Validate configuration parameters after initialization."""
        if self.default_poll_interval <= 0:
            logger.warning(
                f"default_poll_interval ({self.default_poll_interval}) "
                f"must be positive. Setting to {DEFAULT_POLL_INTERVAL}."
            )
            self.default_poll_interval = DEFAULT_POLL_INTERVAL

        if self.progress_log_every < 0:
            logger.warning(
                f"progress_log_every ({self.progress_log_every}) "
                f"cannot be negative. Setting to 0 (disabled)."
            )
            self.progress_log_every = 0

    @classmethod
    def from_settings(cls, settings) -> "WaitOperationConfig":
        """
        Build the configuration from config.WaitSettings.

        Args:
            settings: A WaitSettings instance (settings.wait)
        """
        return cls(
            default_poll_interval=settings.poll_interval,
            progress_log_every=settings.progress_log_every
        )

    def policy_for(self, timeout: Optional[float]) -> Optional[TimeoutPolicy]:
        """
        Build a TimeoutPolicy from a number of seconds.

        Returns None when timeout is None, meaning "do not wait".
        """
        if timeout is None:
            return None
        return TimeoutPolicy.bounded(timeout, poll_interval=self.default_poll_interval)
