from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded polling policy.

    Both bounds apply: polling stops after `max_attempts` tries or once
    `timeout_s` has elapsed, whichever comes first.
    """

    max_attempts: int = 20
    interval_s: float = 0.5
    timeout_s: float = 10.0

    @classmethod
    def immediate(cls, max_attempts: int = 3) -> "RetryPolicy":
        return cls(max_attempts=max_attempts, interval_s=0.0, timeout_s=0.0)


@dataclass(frozen=True)
class PollOutcome:
    ok: bool
    attempts: int
    elapsed_s: float
    last_error: Optional[Exception] = None


def poll_until(
    attempt: Callable[[], bool],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> PollOutcome:
    """
    Call `attempt` until it returns True or the policy is exhausted.

    Exceptions from `attempt` count as a failed try; the last one is kept on the
    outcome. A zero timeout still allows up to `max_attempts` tries.
    """
    start = clock()
    attempts = 0
    last_error: Optional[Exception] = None
    while attempts < max(1, policy.max_attempts):
        attempts += 1
        try:
            if attempt():
                return PollOutcome(ok=True, attempts=attempts, elapsed_s=clock() - start)
        except Exception as e:  # noqa: BLE001
            last_error = e

        elapsed = clock() - start
        if attempts >= policy.max_attempts:
            break
        if policy.timeout_s > 0 and elapsed + policy.interval_s > policy.timeout_s:
            break
        if policy.interval_s > 0:
            sleep(policy.interval_s)

    return PollOutcome(ok=False, attempts=attempts, elapsed_s=clock() - start, last_error=last_error)
