"""
Subprocess execution against an explicit environment.
"""

import logging
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from ..models.command import CommandResult
from .environment import Environment
from .errors import CommandFailedError
from .retry import RetryPolicy, retry

# Shell convention for "command not found"
EXIT_COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Runs external commands to completion, one at a time."""

    def __init__(self, sleep: Optional[Callable[[float], None]] = None):
        """
        Initialize the runner.

        Args:
            sleep: Sleep function used between retries (defaults to time.sleep)
        """
        self.logger = logging.getLogger(__name__)
        self.sleep = sleep or time.sleep

    def run(self,
            args: Sequence[str],
            env: Environment,
            cwd: Optional[Path] = None,
            extra_env: Optional[Mapping[str, str]] = None,
            input: Optional[bytes] = None,
            capture: bool = False) -> CommandResult:
        """
        Run a command and wait for it to finish.

        Args:
            args: Command and arguments
            env: Environment whose search path resolves the command
            cwd: Working directory
            extra_env: Variables set for this command only
            input: Bytes written to the command's stdin
            capture: Capture stdout instead of inheriting it

        Returns:
            Command result; a missing executable yields exit code 127
        """
        args = [str(a) for a in args]
        self.logger.debug(f"Running: {' '.join(args)} (cwd={cwd or '.'})")

        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                env=env.to_env(extra_env),
                input=input,
                stdout=subprocess.PIPE if capture else None,
            )
        except FileNotFoundError:
            self.logger.debug(f"Command not found: {args[0]}")
            return CommandResult(args=args, returncode=EXIT_COMMAND_NOT_FOUND)
        except PermissionError:
            self.logger.debug(f"Command not executable: {args[0]}")
            return CommandResult(args=args, returncode=126)

        return CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout if capture else None
        )

    def run_with_retry(self,
                       args: Sequence[str],
                       env: Environment,
                       policy: RetryPolicy,
                       **kwargs) -> CommandResult:
        """Run a command through the retry helper."""
        def operation() -> CommandResult:
            return self.run(args, env, **kwargs)

        return retry(operation, policy, sleep=self.sleep, logger=self.logger)

    def check(self, result: CommandResult, message: str) -> CommandResult:
        """Raise CommandFailedError for a non-zero result."""
        if not result.ok:
            raise CommandFailedError(
                f"{message} (exit code {result.returncode})",
                returncode=result.returncode,
                command=result.describe()
            )
        return result

    def run_checked(self, args: Sequence[str], env: Environment, message: str,
                    **kwargs) -> CommandResult:
        """Run a command once and raise if it fails."""
        return self.check(self.run(args, env, **kwargs), message)

    def run_script(self,
                   download: List[str],
                   env: Environment,
                   policy: RetryPolicy,
                   name: str,
                   shell: str = "bash") -> CommandResult:
        """
        Download an installer script and pipe it into a shell.

        The download is retried; the installer itself runs once.

        Args:
            download: curl command printing the script to stdout
            env: Environment for both processes
            policy: Retry policy for the download
            name: Tool name for error messages
            shell: Shell that executes the script

        Returns:
            Result of the shell
        """
        fetched = self.run_with_retry(download, env, policy, capture=True)
        self.check(fetched, f"Failed to download {name} installer")
        return self.run_checked(
            [shell], env, f"{name} installer script failed", input=fetched.stdout or b""
        )
