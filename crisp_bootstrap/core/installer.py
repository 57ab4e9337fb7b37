"""
Idempotent toolchain installation.
"""

import time
from typing import Tuple

from ..models.installation import StepResult, StepStatus
from ..models.tool import ToolSpec
from ..utils.logging import get_logger
from .environment import Environment, find_in_directories
from .errors import ToolNotFoundError
from .retry import RetryPolicy
from .runner import CommandRunner


class ToolInstaller:
    """Installs a tool unless its binary already resolves on the search path."""

    def __init__(self, runner: CommandRunner, policy: RetryPolicy):
        """
        Initialize the installer.

        Args:
            runner: Command runner used for every external call
            policy: Retry policy for downloads and package-manager commands
        """
        self.logger = get_logger(__name__)
        self.runner = runner
        self.policy = policy

    def ensure(self, spec: ToolSpec, env: Environment) -> Tuple[Environment, StepResult]:
        """
        Make sure a tool is installed.

        Args:
            spec: Tool specification
            env: Current environment

        Returns:
            Environment with the tool's bin directory on the search path, and the step result

        Raises:
            CommandFailedError: A download, installer or command failed after retries
            ToolNotFoundError: Installation finished but the binary is still not found
        """
        started = time.monotonic()

        location = env.which(spec.binary)
        if location:
            self.logger.success(f"{spec.name} already installed")
            return env, StepResult(
                step=spec.name,
                status=StepStatus.SKIPPED,
                detail=location,
                duration_seconds=time.monotonic() - started
            )

        if spec.prerequisite is not None:
            env, _ = self.ensure(spec.prerequisite, env)

        self.logger.step(f"Installing {spec.name}...")
        self._install(spec, env)

        env = self._extend_search_path(spec, env)
        location = env.which(spec.binary)
        if not location:
            raise ToolNotFoundError(
                f"{spec.name} installation failed - {spec.binary} command not found in PATH"
            )

        for command in spec.post_install:
            self.runner.run_checked(command, env, f"{spec.name} post-install step failed")

        self.logger.success(f"{spec.name} installed successfully")
        return env, StepResult(
            step=spec.name,
            status=StepStatus.INSTALLED,
            detail=location,
            duration_seconds=time.monotonic() - started
        )

    def _install(self, spec: ToolSpec, env: Environment) -> None:
        if spec.script_url:
            self.runner.run_script(spec.download_command(), env, self.policy, spec.name)

        for command in spec.commands:
            result = self.runner.run_with_retry(command, env, self.policy)
            self.runner.check(result, f"Failed to install {spec.name}")

    def _extend_search_path(self, spec: ToolSpec, env: Environment) -> Environment:
        """Prepend the first candidate directory holding the binary, else every existing one."""
        found = find_in_directories(spec.binary, spec.bin_dirs)
        if found is not None:
            if found not in env.search_path:
                self.logger.detail(f"Found {spec.binary} at {found}")
            return env.with_search_path(env.search_path.prepend(found))
        return env.with_search_path(env.search_path.prepend_existing(spec.bin_dirs))
