"""
Template project materialization, dependency installation and dev server launch.
"""

import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import List, Optional

from config.settings import PathsConfig
from ..models.command import CommandResult
from ..models.installation import StepResult, StepStatus
from ..models.project import ScriptPatch
from ..utils.logging import get_logger
from .environment import Environment
from .errors import FileSystemError, PatchError
from .retry import RetryPolicy, retry
from .runner import CommandRunner

PNPM_INSTALL = ["pnpm", "install", "--frozen-lockfile", "-s"]
CI_ENV = {"CI": "true"}


def merge_tree(source: Path, destination: Path) -> int:
    """
    Copy a directory tree into another without overwriting anything.

    Symlinks are copied as symlinks. Existing files, directories and links in
    the destination are left alone.

    Returns:
        Number of entries created
    """
    created = 0
    destination.mkdir(parents=True, exist_ok=True)

    for dirpath, dirnames, filenames in os.walk(source):
        rel = Path(dirpath).relative_to(source)
        target_dir = destination / rel

        for name in list(dirnames):
            src = Path(dirpath) / name
            dst = target_dir / name
            if src.is_symlink():
                # os.walk does not descend into links; copy the link itself
                dirnames.remove(name)
                if not os.path.lexists(dst):
                    os.symlink(os.readlink(src), dst)
                    created += 1
            elif not os.path.lexists(dst):
                dst.mkdir()
                shutil.copystat(src, dst)
                created += 1

        for name in filenames:
            src = Path(dirpath) / name
            dst = target_dir / name
            if os.path.lexists(dst):
                continue
            if src.is_symlink():
                os.symlink(os.readlink(src), dst)
            else:
                shutil.copy2(src, dst)
            created += 1

    return created


def set_permissions(root: Path, mode: int) -> None:
    """Apply a mode to a tree recursively, like chmod -R. Symlinks are skipped."""
    os.chmod(root, mode)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                os.chmod(path, mode)


def patch_lines(content: str, pattern: "re.Pattern[str]", replacement: str) -> str:
    """Replace the first match on every line, as sed 's/re/text/' does."""
    out = []
    for line in content.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        out.append(pattern.sub(replacement, body, count=1) + ending)
    return "".join(out)


class ProjectBootstrapper:
    """Materializes and runs the CRISP template project."""

    def __init__(self,
                 paths: PathsConfig,
                 repo_url: str,
                 runner: CommandRunner,
                 policy: RetryPolicy,
                 patches: Optional[List[ScriptPatch]] = None):
        """
        Initialize the project bootstrapper.

        Args:
            paths: Filesystem layout
            repo_url: Git remote holding the template
            runner: Command runner
            policy: Retry policy for the clone
            patches: Text patches applied after dependencies install
        """
        self.logger = get_logger(__name__)
        self.paths = paths
        self.repo_url = repo_url
        self.runner = runner
        self.policy = policy
        self.patches = patches or []

    @property
    def project_dir(self) -> Path:
        return self.paths.project_dir

    @property
    def crisp_dir(self) -> Path:
        return self.paths.crisp_dir

    @property
    def marker(self) -> Path:
        return self.project_dir / self.paths.marker_file

    def is_initialized(self) -> bool:
        return self.marker.is_file()

    def initialize(self, env: Environment) -> StepResult:
        """Clone the template into the project directory unless the marker file exists."""
        started = time.monotonic()

        if self.is_initialized():
            self.logger.success("Enclave CRISP template project already initialized")
            return StepResult(
                step="Project initialization",
                status=StepStatus.SKIPPED,
                detail=str(self.marker),
                duration_seconds=time.monotonic() - started
            )

        self.logger.step("Initializing Enclave CRISP template project...")
        try:
            created = self._clone_and_merge(env)
            set_permissions(self.project_dir, self.paths.project_permissions)
        except OSError as e:
            raise FileSystemError(f"Cannot set up project in {self.project_dir}: {e}")

        self.logger.success("Enclave CRISP template project initialized")
        return StepResult(
            step="Project initialization",
            status=StepStatus.COMPLETED,
            detail=f"{created} entries copied",
            duration_seconds=time.monotonic() - started
        )

    def _clone_and_merge(self, env: Environment) -> int:
        workspace = self.paths.workspace
        workspace.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(dir=workspace, prefix=".enclave-clone-") as tmp:
            clone_dir = Path(tmp) / "enclave"
            args = ["git", "clone", self.repo_url, "--recurse-submodules", str(clone_dir), "-q"]

            def clone() -> CommandResult:
                # git refuses a non-empty destination left by a failed attempt
                shutil.rmtree(clone_dir, ignore_errors=True)
                return self.runner.run(args, env, cwd=workspace)

            result = retry(clone, self.policy, sleep=self.runner.sleep, logger=self.logger.logger)
            self.runner.check(result, "Failed to initialize Enclave CRISP template project")

            self.logger.step("Copying files to project directory...")
            return merge_tree(clone_dir, self.project_dir)

    def prepare(self, env: Environment) -> StepResult:
        """Install pnpm dependencies for the project and the CRISP example."""
        started = time.monotonic()

        self.logger.step("Ensuring pnpm dependencies are installed...")
        self.runner.run_checked(
            PNPM_INSTALL, env, "pnpm install failed in project",
            cwd=self.project_dir, extra_env=CI_ENV
        )
        self.runner.run_checked(
            ["pnpm", "dev:setup"], env, "pnpm dev:setup failed", cwd=self.crisp_dir
        )
        self.runner.run_checked(
            PNPM_INSTALL, env, "pnpm install failed in CRISP example",
            cwd=self.crisp_dir, extra_env=CI_ENV
        )

        self.logger.step("Ensuring permissions are set correctly...")
        try:
            set_permissions(self.project_dir, self.paths.project_permissions)
        except OSError as e:
            raise FileSystemError(f"Cannot set permissions on {self.project_dir}: {e}")

        return StepResult(
            step="Project dependencies",
            status=StepStatus.COMPLETED,
            duration_seconds=time.monotonic() - started
        )

    def apply_patches(self) -> StepResult:
        """Apply the configured one-line patches to downstream scripts."""
        started = time.monotonic()
        applied = 0

        for patch in self.patches:
            target = self.project_dir / patch.path
            label = patch.description or str(patch.path)

            try:
                content = target.read_text(encoding="utf-8")
            except FileNotFoundError:
                raise PatchError(f"Cannot patch {target}: file not found")
            except OSError as e:
                raise PatchError(f"Cannot read {target}: {e}")

            updated = patch_lines(content, re.compile(patch.pattern), patch.replacement)
            if updated == content:
                self.logger.detail(f"Patch already applied: {label}")
                continue

            try:
                target.write_text(updated, encoding="utf-8")
            except OSError as e:
                raise PatchError(f"Cannot write {target}: {e}")
            self.logger.detail(f"Patched {label}")
            applied += 1

        return StepResult(
            step="Script patches",
            status=StepStatus.COMPLETED if applied else StepStatus.SKIPPED,
            detail=f"{applied}/{len(self.patches)} applied",
            duration_seconds=time.monotonic() - started
        )

    def start(self, env: Environment) -> CommandResult:
        """Launch the CRISP development environment and wait for it to exit."""
        self.logger.step("Starting development environment...")
        result = self.runner.run(["pnpm", "dev:up"], env, cwd=self.crisp_dir)
        return self.runner.check(result, "Development environment exited with an error")
