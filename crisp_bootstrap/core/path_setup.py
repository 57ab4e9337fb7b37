"""
Search path setup: shell rc persistence, tool bin directories and pnpm.
"""

import time
from typing import Tuple

from config.settings import PathsConfig
from ..models.installation import StepResult, StepStatus
from ..utils.logging import get_logger
from .environment import Environment
from .errors import FileSystemError
from .retry import RetryPolicy
from .runner import CommandRunner


class PathConfigurator:
    """Builds the starting environment every later step runs in."""

    def __init__(self, paths: PathsConfig, runner: CommandRunner, policy: RetryPolicy):
        self.logger = get_logger(__name__)
        self.paths = paths
        self.runner = runner
        self.policy = policy

    def export_line(self) -> str:
        return f'export PATH="{self.paths.local_bin}:$PATH"'

    def persist_local_bin(self) -> bool:
        """
        Append a PATH export for the local bin directory to the shell rc file.

        Returns:
            True if the file was changed
        """
        rc_file = self.paths.bashrc_file
        local_bin = str(self.paths.local_bin)

        try:
            content = rc_file.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            content = ""
        except OSError as e:
            raise FileSystemError(f"Cannot read {rc_file}: {e}")

        if local_bin in content:
            return False

        self.logger.detail(f"Adding {local_bin} to PATH in {rc_file}")
        try:
            rc_file.parent.mkdir(parents=True, exist_ok=True)
            with open(rc_file, "a", encoding="utf-8") as f:
                if content and not content.endswith("\n"):
                    f.write("\n")
                f.write(self.export_line() + "\n")
        except OSError as e:
            raise FileSystemError(f"Cannot update {rc_file}: {e}")
        return True

    def tool_search_path(self, env: Environment) -> Environment:
        """Put the local bin and any existing toolchain bin directories in front."""
        # Package-manager bins stay behind the local bin
        search_path = env.search_path.prepend_existing([self.paths.brew_bin, self.paths.cargo_bin])
        search_path = search_path.prepend(self.paths.local_bin)
        search_path = search_path.prepend_existing([
            self.paths.foundry_bin,
            self.paths.risc0_bin,
            self.paths.nargo_bin,
        ])
        return env.with_search_path(search_path)

    def setup_pnpm(self, env: Environment) -> Environment:
        """Run pnpm setup, export PNPM_HOME and update pnpm itself."""
        self.runner.run_checked(
            ["pnpm", "setup"], env, "pnpm setup failed",
            extra_env={"SHELL": "/bin/bash"}
        )

        pnpm_home = self.paths.pnpm_home_dir
        env = env.with_variables(PNPM_HOME=str(pnpm_home))
        env = env.with_search_path(env.search_path.prepend_if_missing(pnpm_home))

        result = self.runner.run_with_retry(["pnpm", "self-update"], env, self.policy)
        self.runner.check(result, "pnpm self-update failed")
        return env

    def configure(self, env: Environment) -> Tuple[Environment, StepResult]:
        """
        Prepare the environment for the install steps.

        Args:
            env: Environment inherited from the calling process

        Returns:
            New environment and the step result
        """
        started = time.monotonic()

        changed = self.persist_local_bin()
        env = self.tool_search_path(env)
        env = self.setup_pnpm(env)

        return env, StepResult(
            step="PATH setup",
            status=StepStatus.COMPLETED,
            detail=f"{self.paths.bashrc_file} updated" if changed else None,
            duration_seconds=time.monotonic() - started
        )
