#!/usr/bin/env python3
"""
End-to-end tests for the bootstrap sequence
"""

from pathlib import Path

import pytest

from crisp_bootstrap.core.errors import CommandFailedError, ToolNotFoundError
from crisp_bootstrap.core.orchestrator import BootstrapOrchestrator
from crisp_bootstrap.core.toolchain import default_toolchain
from crisp_bootstrap.models.installation import StepStatus

from conftest import FakeRunner, make_executable


class SimulatedMachine:
    """Installers that drop their binaries where the real ones would."""

    def __init__(self, settings):
        self.settings = settings
        paths = settings.paths
        toolchain = settings.toolchain
        self.script_targets = {
            toolchain.foundry_install_url: (paths.foundry_bin, "foundryup"),
            toolchain.risc0_install_url: (paths.risc0_bin, "rzup"),
            toolchain.noirup_install_url: (paths.nargo_bin, "noirup"),
            toolchain.wasm_pack_install_url: (paths.cargo_bin, "wasm-pack"),
            toolchain.enclave_install_url: (paths.local_bin, "enclaveup"),
        }
        self.last_url = None

    def curl(self, call) -> int:
        self.last_url = call.args[-1]
        return 0

    def bash(self, call) -> int:
        directory, binary = self.script_targets[self.last_url]
        make_executable(directory, binary)
        return 0

    def clone(self, call) -> int:
        destination = Path(call.args[4])
        (destination / "examples" / "CRISP").mkdir(parents=True)
        (destination / "package.json").write_text("{}")
        return 0

    def runner(self, **overrides) -> FakeRunner:
        paths = self.settings.paths
        runner = FakeRunner({
            ("curl",): self.curl,
            ("bash",): self.bash,
            ("brew", "install", "solidity"): lambda call: make_executable(paths.brew_bin, "solc") and 0,
            ("rzup", "install"): lambda call: make_executable(paths.risc0_bin, "cargo-risczero") and 0,
            ("enclaveup", "install"): lambda call: make_executable(paths.local_bin, "enclave") and 0,
            ("git", "clone"): self.clone,
        })
        for prefix, handler in overrides.items():
            runner.on(tuple(prefix.split()), handler)
        return runner


@pytest.fixture
def machine(settings):
    settings.paths.brew_prefix = settings.paths.home / "brew"
    return SimulatedMachine(settings)


class TestFreshMachine:
    """Nothing installed, project absent"""

    def test_full_run_succeeds(self, settings, machine, env):
        runner = machine.runner()

        result = BootstrapOrchestrator(settings, runner=runner).run(env)

        assert result.success
        assert result.exit_code == 0
        assert len(runner.matching("pnpm", "dev:up")) == 1
        assert runner.calls[-1].args == ["pnpm", "dev:up"]
        assert (settings.paths.project_dir / "package.json").exists()

        installed = [s.step for s in result.steps if s.status == StepStatus.INSTALLED]
        assert installed == [
            "Foundry", "rzup", "noirup", "wasm-pack", "solc", "RISC Zero toolchain", "Enclave CLI"
        ]
        # foundryup and noirup run once installed
        assert len(runner.matching("foundryup")) == 1
        assert len(runner.matching("noirup")) == 1
        assert runner.sleeps == []

    def test_install_order(self, settings, machine, env):
        runner = machine.runner()

        BootstrapOrchestrator(settings, runner=runner).run(env)

        urls = [c.args[-1] for c in runner.matching("curl")]
        toolchain = settings.toolchain
        assert urls == [
            toolchain.foundry_install_url,
            toolchain.risc0_install_url,
            toolchain.noirup_install_url,
            toolchain.wasm_pack_install_url,
            toolchain.enclave_install_url,
        ]
        first = [c.args[0] for c in runner.calls]
        assert first.index("brew") < first.index("rzup") < first.index("enclaveup")
        assert first.index("enclaveup") < first.index("git")

    def test_dev_server_sees_every_toolchain(self, settings, machine, env):
        runner = machine.runner()

        BootstrapOrchestrator(settings, runner=runner).run(env)

        dev_up = runner.matching("pnpm", "dev:up")[0]
        for binary in ("foundryup", "rzup", "noirup", "wasm-pack", "solc", "cargo-risczero", "enclave"):
            assert dev_up.env.which(binary), binary
        assert dev_up.env.variables["PNPM_HOME"] == str(settings.paths.pnpm_home_dir)

    def test_without_noir(self, settings, machine, env):
        settings.toolchain.install_noir = False
        runner = machine.runner()

        result = BootstrapOrchestrator(settings, runner=runner).run(env)

        assert "noirup" not in [s.step for s in result.steps]
        assert runner.matching("noirup") == []

    def test_start_can_be_disabled(self, settings, machine, env):
        settings.start_dev_server = False
        runner = machine.runner()

        result = BootstrapOrchestrator(settings, runner=runner).run(env)

        assert result.success
        assert runner.matching("pnpm", "dev:up") == []


class TestFailures:
    """Fatal errors stop the sequence"""

    def test_foundry_failure_stops_before_later_installers(self, settings, machine, env):
        foundry_url = settings.toolchain.foundry_install_url

        def curl(call):
            return 6 if call.args[-1] == foundry_url else machine.curl(call)

        runner = machine.runner(curl=curl)

        with pytest.raises(CommandFailedError) as excinfo:
            BootstrapOrchestrator(settings, runner=runner).run(env)

        assert excinfo.value.exit_code == 6
        assert len(runner.matching("curl")) == 3
        assert all(c.args[-1] == foundry_url for c in runner.matching("curl"))
        assert runner.matching("bash") == []
        assert runner.matching("brew") == []
        assert runner.matching("git") == []
        assert runner.matching("pnpm", "dev:up") == []
        assert runner.sleeps == [5, 5]

    def test_failure_summary_attached(self, settings, machine, env):
        foundry_url = settings.toolchain.foundry_install_url

        def curl(call):
            return 6 if call.args[-1] == foundry_url else machine.curl(call)

        runner = machine.runner(curl=curl)

        with pytest.raises(CommandFailedError) as excinfo:
            BootstrapOrchestrator(settings, runner=runner).run(env)

        result = excinfo.value.result
        assert result is not None
        assert not result.success
        assert result.exit_code == 6
        assert [s.step for s in result.steps] == ["PATH setup", "Foundry"]
        assert result.steps[-1].status == StepStatus.FAILED
        assert "Foundry" in result.steps[-1].detail

    def test_missing_binary_after_install(self, settings, machine, env):
        runner = machine.runner(bash=lambda call: 0)

        with pytest.raises(ToolNotFoundError):
            BootstrapOrchestrator(settings, runner=runner).run(env)

        assert len(runner.matching("curl")) == 1

    def test_dev_server_exit_code(self, settings, machine, env):
        runner = machine.runner(**{"pnpm dev:up": 2})

        with pytest.raises(CommandFailedError) as excinfo:
            BootstrapOrchestrator(settings, runner=runner).run(env)

        assert excinfo.value.exit_code == 2
        result = excinfo.value.result
        assert result.steps[-1].step == "Development environment"
        assert result.steps[-1].status == StepStatus.FAILED
        assert result.count(StepStatus.INSTALLED) == 7


class TestSecondRun:
    """Everything already in place"""

    def test_no_network_calls(self, settings, machine, env):
        BootstrapOrchestrator(settings, runner=machine.runner()).run(env)
        runner = machine.runner()

        result = BootstrapOrchestrator(settings, runner=runner).run(env)

        assert runner.matching("curl") == []
        assert runner.matching("git") == []
        assert runner.matching("brew") == []
        assert all(
            s.status == StepStatus.SKIPPED
            for s in result.steps
            if s.step in [spec.name for spec in default_toolchain(settings)]
        )
        assert len(runner.matching("pnpm", "dev:up")) == 1
