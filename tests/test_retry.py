#!/usr/bin/env python3
"""
Test suite for the fixed-delay retry helper
"""

import logging

import pytest
from pydantic import ValidationError

from crisp_bootstrap.core.retry import RetryPolicy, retry
from crisp_bootstrap.models.command import CommandResult


class FlakyCommand:
    """Fails a given number of times, then succeeds"""

    def __init__(self, failures: int, exit_code: int = 1):
        self.failures = failures
        self.exit_code = exit_code
        self.calls = 0

    def __call__(self) -> CommandResult:
        self.calls += 1
        if self.calls <= self.failures:
            return CommandResult(args=["flaky"], returncode=self.exit_code)
        return CommandResult(args=["flaky"], returncode=0)


class TestRetryPolicy:
    """Test policy validation"""

    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.delay_seconds == 5.0

    def test_zero_attempts_rejected(self):
        with pytest.raises(ValidationError):
            RetryPolicy(max_attempts=0)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValidationError):
            RetryPolicy(delay_seconds=-1)


class TestRetry:
    """Test retry behaviour"""

    def test_success_first_time(self):
        command = FlakyCommand(failures=0)
        sleeps = []

        result = retry(command, RetryPolicy(max_attempts=3, delay_seconds=5), sleep=sleeps.append)

        assert result.ok
        assert command.calls == 1
        assert sleeps == []

    @pytest.mark.parametrize("attempts,failures", [(2, 1), (3, 1), (3, 2), (5, 4), (10, 3)])
    def test_recovers_after_failures(self, attempts, failures):
        """A command failing k < N times succeeds after k+1 invocations"""
        command = FlakyCommand(failures=failures)
        sleeps = []

        result = retry(command, RetryPolicy(max_attempts=attempts, delay_seconds=2),
                       sleep=sleeps.append)

        assert result.ok
        assert command.calls == failures + 1
        assert sleeps == [2] * failures

    @pytest.mark.parametrize("attempts", [1, 2, 3, 7])
    def test_always_failing_runs_exactly_n_times(self, attempts):
        command = FlakyCommand(failures=100, exit_code=42)
        sleeps = []

        result = retry(command, RetryPolicy(max_attempts=attempts, delay_seconds=1),
                       sleep=sleeps.append)

        assert not result.ok
        assert result.returncode == 42
        assert command.calls == attempts
        # No sleep after the final attempt
        assert len(sleeps) == attempts - 1

    def test_last_exit_code_is_reported(self):
        codes = iter([3, 4, 5])

        def operation():
            return CommandResult(args=["x"], returncode=next(codes))

        result = retry(operation, RetryPolicy(max_attempts=3, delay_seconds=0), sleep=lambda s: None)

        assert result.returncode == 5

    def test_logs_between_attempts(self, caplog):
        command = FlakyCommand(failures=5)

        with caplog.at_level(logging.WARNING):
            retry(command, RetryPolicy(max_attempts=3, delay_seconds=5), sleep=lambda s: None)

        messages = [r.getMessage() for r in caplog.records]
        assert "Command failed (attempt 1/3). Retrying in 5s..." in messages
        assert "Command failed (attempt 2/3). Retrying in 5s..." in messages
        assert "Command failed after 3 attempts" in messages
        assert caplog.records[-1].levelno == logging.ERROR
