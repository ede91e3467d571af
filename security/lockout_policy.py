from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping


class LockoutConfigError(ValueError):
    pass


@dataclass(frozen=True)
class LockoutPolicy:
    """
    Thresholds for brute-force protection.

    max_failed_attempts: failures in the window that trigger a permanent lockout
    backoff_start_attempt: failures in the window at which throttling begins
    backoff_window_seconds: minimum spacing between attempts while throttled
    attempt_window_minutes: trailing window over which failures are counted
    """
    max_failed_attempts: int = 10
    backoff_start_attempt: int = 5
    backoff_window_seconds: int = 60
    attempt_window_minutes: int = 15

    def __post_init__(self):
        for name in (
            "max_failed_attempts",
            "backoff_start_attempt",
            "backoff_window_seconds",
            "attempt_window_minutes",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise LockoutConfigError(f"{name} must be a positive integer, got {value!r}")

        if self.backoff_start_attempt > self.max_failed_attempts:
            raise LockoutConfigError(
                "backoff_start_attempt must not exceed max_failed_attempts "
                f"({self.backoff_start_attempt} > {self.max_failed_attempts})"
            )

    @property
    def attempt_window(self) -> timedelta:
        return timedelta(minutes=self.attempt_window_minutes)

    @property
    def backoff_window(self) -> timedelta:
        return timedelta(seconds=self.backoff_window_seconds)

    @classmethod
    def from_config(cls, config: Mapping) -> "LockoutPolicy":
        defaults = cls.__dataclass_fields__
        return cls(
            max_failed_attempts=config.get(
                "LOCKOUT_MAX_FAILED_ATTEMPTS", defaults["max_failed_attempts"].default
            ),
            backoff_start_attempt=config.get(
                "LOCKOUT_BACKOFF_START_ATTEMPT", defaults["backoff_start_attempt"].default
            ),
            backoff_window_seconds=config.get(
                "LOCKOUT_BACKOFF_WINDOW_SECONDS", defaults["backoff_window_seconds"].default
            ),
            attempt_window_minutes=config.get(
                "LOCKOUT_ATTEMPT_WINDOW_MINUTES", defaults["attempt_window_minutes"].default
            ),
        )
