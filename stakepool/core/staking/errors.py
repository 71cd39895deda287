"""Exception types for the staking engine.

Raised by ``step_or_raise()`` in ``engine.py`` for callers that prefer
exceptions over ``StepResult`` inspection. ``accrue()`` raises
``ClockRegression`` directly.
"""

from __future__ import annotations


class StakingError(Exception):
    """Base class for rejected staking operations."""


class InvalidAmount(StakingError):
    """Amount is non-positive, malformed, or overflows the amount domain."""


class InsufficientStaked(StakingError):
    """Withdraw exceeds the participant's staked amount."""


class InsufficientFunds(StakingError):
    """Withdraw exceeds the pool total; the sum invariant is broken."""


class InvalidClaim(StakingError):
    """Nothing to claim."""


class ClockRegression(StakingError):
    """A timestamp earlier than the pool's last update was supplied."""

    def __init__(self, last_update_time: int, now: int) -> None:
        self.last_update_time = last_update_time
        self.now = now
        super().__init__(f"clock regression: now={now} < last_update_time={last_update_time}")


class StakingInvariantError(StakingError):
    """Raised when a post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
