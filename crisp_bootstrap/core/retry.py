"""
Fixed-delay retry for fallible commands.
"""

import logging
import time
from typing import Callable, Optional

from pydantic import BaseModel, Field

from ..models.command import CommandResult


class RetryPolicy(BaseModel):
    """How many times to try a command and how long to wait in between."""
    max_attempts: int = Field(default=3, ge=1, description="Total attempts, including the first")
    delay_seconds: float = Field(default=5.0, ge=0, description="Fixed delay between attempts")

    class Config:
        frozen = True


def retry(operation: Callable[[], CommandResult],
          policy: RetryPolicy,
          sleep: Callable[[float], None] = time.sleep,
          logger: Optional[logging.Logger] = None) -> CommandResult:
    """
    Run an operation until it succeeds or the policy's attempts are exhausted.

    Every non-zero exit is treated the same way. There is no backoff and no
    sleep after the final attempt.

    Args:
        operation: Zero-argument callable returning a command result
        policy: Attempt count and delay
        sleep: Sleep function, replaceable in tests
        logger: Logger for the between-attempt messages

    Returns:
        The first successful result, or the last failed one
    """
    logger = logger or logging.getLogger(__name__)

    attempt = 0
    while True:
        result = operation()
        if result.ok:
            return result

        attempt += 1
        if attempt < policy.max_attempts:
            logger.warning(
                f"Command failed (attempt {attempt}/{policy.max_attempts}). "
                f"Retrying in {policy.delay_seconds:g}s..."
            )
            sleep(policy.delay_seconds)
        else:
            logger.error(f"Command failed after {policy.max_attempts} attempts")
            return result
