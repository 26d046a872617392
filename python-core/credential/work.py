"""
Work-Factor Policy.

Converts a relative work multiplier and a point in time into a concrete
PBKDF2 iteration count. The count doubles every two years, following
Moore's law, starting from 1000 iterations at a fixed epoch:

    iterations = floor(1000 * 2 ** (years_since_epoch / 2) * work)

The same formula judges stored records: a record is behind the policy
when its iteration count is lower than what the policy asks for at some
reference instant (see CredentialEngine.is_expired).

The clock is injected so tests can evaluate any instant deterministically.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .errors import InvalidConfig

Clock = Callable[[], datetime]

# 1e12 milliseconds after the Unix epoch: 2001-09-09T01:46:40Z
EPOCH = datetime.fromtimestamp(1_000_000_000, tz=timezone.utc)
YEAR = timedelta(days=365.25)

BASE_ITERATIONS = 1000
DOUBLING_YEARS = 2


def utc_now() -> datetime:
    """Default clock: the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class WorkFactorPolicy:
    """
    Time-based iteration policy.

    Attributes:
        base_iterations: Iterations demanded at the epoch for work=1
        doubling_years: Years for the demanded iterations to double
        epoch: Reference instant of the formula
        clock: Zero-argument callable returning an aware datetime

    Example:
        >>> policy = WorkFactorPolicy()
        >>> policy.iterations_for(1, EPOCH)
        1000
        >>> policy.iterations_for(1, EPOCH + 2 * YEAR)
        2000
    """

    def __init__(
        self,
        base_iterations: int = BASE_ITERATIONS,
        doubling_years: float = DOUBLING_YEARS,
        epoch: datetime = EPOCH,
        clock: Optional[Clock] = None,
    ):
        if base_iterations <= 0:
            raise InvalidConfig(f"Base iterations must be positive, got {base_iterations}")
        if doubling_years <= 0:
            raise InvalidConfig(f"Doubling period must be positive, got {doubling_years}")

        self.base_iterations = base_iterations
        self.doubling_years = doubling_years
        self.epoch = epoch
        self.clock = clock or utc_now

    def now(self) -> datetime:
        """Read the injected clock."""
        return self.clock()

    def iterations_for(
        self,
        work: float,
        at_time: Optional[datetime] = None,
        minimum: int = 1,
    ) -> int:
        """
        Compute the iteration count the policy demands at a given instant.

        Args:
            work: Relative work multiplier, must be > 0
            at_time: Aware datetime to evaluate at (default: clock reading)
            minimum: Smallest acceptable result. Hashing needs at least one
                iteration; expiry thresholds pass 0.

        Returns:
            Iteration count, at least minimum

        Raises:
            InvalidConfig: If work is not positive, the result is below
                minimum, or it is too large to represent
        """
        if isinstance(work, bool) or not isinstance(work, (int, float)) or not 0 < work < math.inf:
            raise InvalidConfig(f"Work must be a positive number, got {work!r}", details={"work": work})

        if at_time is None:
            at_time = self.now()

        years = (at_time - self.epoch) / YEAR
        try:
            iterations = math.floor(self.base_iterations * 2 ** (years / self.doubling_years) * work)
        except OverflowError as e:
            raise InvalidConfig(
                f"Iteration count out of range at {at_time.isoformat()}",
                details={"work": work},
            ) from e

        if iterations < minimum:
            raise InvalidConfig(
                f"Work {work} yields fewer than {minimum} iteration(s) at {at_time.isoformat()}",
                details={"work": work},
            )
        return iterations
