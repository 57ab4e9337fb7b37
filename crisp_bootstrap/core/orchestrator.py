"""
Bootstrap orchestrator - runs every setup step in order, then the dev server.
"""

from typing import List, Optional

from config.settings import Settings
from ..models.installation import BootstrapResult, StepResult, StepStatus
from ..models.tool import ToolSpec
from ..utils.logging import get_logger
from .environment import Environment
from .errors import BootstrapError
from .installer import ToolInstaller
from .path_setup import PathConfigurator
from .project import ProjectBootstrapper
from .runner import CommandRunner
from .toolchain import default_toolchain


class BootstrapOrchestrator:
    """Sets up the CRISP development environment, one blocking step at a time."""

    def __init__(self,
                 settings: Settings,
                 runner: Optional[CommandRunner] = None,
                 toolchain: Optional[List[ToolSpec]] = None):
        """
        Initialize the orchestrator.

        Args:
            settings: Application settings
            runner: Command runner (default: a real subprocess runner)
            toolchain: Install steps (default: the CRISP toolchain)
        """
        self.logger = get_logger(__name__)
        self.settings = settings
        self.runner = runner or CommandRunner()

        policy = settings.retry.policy()
        self.toolchain = toolchain if toolchain is not None else default_toolchain(settings)
        self.path_configurator = PathConfigurator(settings.paths, self.runner, policy)
        self.installer = ToolInstaller(self.runner, policy)
        self.project = ProjectBootstrapper(
            paths=settings.paths,
            repo_url=settings.toolchain.enclave_repo_url,
            runner=self.runner,
            policy=policy,
            patches=settings.patches
        )

    def run(self, env: Optional[Environment] = None) -> BootstrapResult:
        """
        Run the whole bootstrap sequence.

        Args:
            env: Starting environment (default: snapshot of the current process)

        Returns:
            Summary of the run

        Raises:
            BootstrapError: The first fatal failure; later steps do not run
        """
        self.logger.step("Setting up Enclave CRISP template development environment...")
        result = BootstrapResult()
        if env is None:
            env = Environment.from_process()
        current = "PATH setup"

        try:
            env, step = self.path_configurator.configure(env)
            result.add(step)

            for spec in self.toolchain:
                current = spec.name
                env, step = self.installer.ensure(spec, env)
                result.add(step)

            current = "Project initialization"
            result.add(self.project.initialize(env))
            current = "Project dependencies"
            result.add(self.project.prepare(env))
            current = "Script patches"
            result.add(self.project.apply_patches())
        except BootstrapError as e:
            result.add(StepResult(step=current, status=StepStatus.FAILED, detail=str(e)))
            result.complete(success=False, exit_code=e.exit_code)
            self._log_summary(result)
            e.result = result
            raise

        self._log_summary(result)

        if self.settings.start_dev_server:
            try:
                dev_server = self.project.start(env)
            except BootstrapError as e:
                result.add(StepResult(step="Development environment", status=StepStatus.FAILED, detail=str(e)))
                result.complete(success=False, exit_code=e.exit_code)
                e.result = result
                raise
            result.complete(success=True, exit_code=dev_server.returncode)
        else:
            result.complete(success=True, exit_code=0)
        return result

    def _log_summary(self, result: BootstrapResult) -> None:
        installed = result.count(StepStatus.INSTALLED)
        skipped = result.count(StepStatus.SKIPPED)
        failed = [s.step for s in result.steps if s.status == StepStatus.FAILED]
        if failed:
            self.logger.info(f"Setup stopped at {failed[0]}: {installed} installed, {skipped} already present")
        else:
            self.logger.info(f"Setup finished: {installed} installed, {skipped} already present")
        for step in result.steps:
            self.logger.debug(f"{step.step}: {step.status.value} ({step.detail or '-'})")
