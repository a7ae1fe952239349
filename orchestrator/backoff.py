"""
Orchestrator - Backoff Policy.

Maps the number of consecutive failed cycles to the wait before the
next attempt: a linear ramp of one step per failure, capped at the
nominal interval.
"""

from datetime import timedelta


DEFAULT_RETRY_STEP = timedelta(seconds=1)


def compute_next_delay(
    failure_count: int,
    nominal_interval: timedelta,
    step: timedelta = DEFAULT_RETRY_STEP,
) -> timedelta:
    """
    Delay before the next cycle.

    Args:
        failure_count: Consecutive failed cycles (0 after a success)
        nominal_interval: Delay between successful cycles
        step: Ramp increment per failure

    Returns:
        nominal_interval when failure_count is 0, otherwise
        min(failure_count * step, nominal_interval)
    """
    if failure_count < 0:
        raise ValueError(f"failure_count must not be negative, got {failure_count}")

    if failure_count == 0:
        return nominal_interval

    return min(step * failure_count, nominal_interval)
