from __future__ import annotations

import time
from typing import Callable, Optional

from cluster_auth.logger import get_logger
from cluster_auth.oauth.base import (
    OutcomeKind,
    RetrievalOutcome,
    RetryOutcome,
    RetryPolicy,
)

logger = get_logger(__name__)


def retry_with_backoff(
    attempt: Callable[[], RetrievalOutcome],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome:
    """
    Run attempt() until it succeeds, fails terminally, or policy.max_retries
    attempts have been made. Sleeps follow policy.schedule() and never happen
    after the last attempt.
    """
    waits = policy.schedule()
    last: Optional[RetrievalOutcome] = None

    for number in range(1, policy.max_retries + 1):
        outcome = attempt()

        if outcome.kind is OutcomeKind.SUCCESS:
            logger.info("OAuth token retrieved on attempt %d", number)
            return RetryOutcome(outcome=outcome, attempts=number, exhausted=False)

        if outcome.kind is OutcomeKind.TERMINAL:
            logger.error(
                "OAuth token retrieval failed permanently on attempt %d (%s)",
                number,
                outcome.reason.value if outcome.reason else "unknown",
            )
            return RetryOutcome(outcome=outcome, attempts=number, exhausted=False)

        last = outcome
        if number == policy.max_retries:
            break

        wait = next(waits)
        logger.warning(
            "OAuth token retrieval attempt %d failed (%s), retrying in %ds...",
            number,
            outcome.reason.value if outcome.reason else "unknown",
            wait,
        )
        sleep(wait)

    if last is None:
        raise ValueError("retry policy must allow at least one attempt")

    return RetryOutcome(outcome=last, attempts=policy.max_retries, exhausted=True)
