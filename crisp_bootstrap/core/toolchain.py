"""
The fixed set of toolchains the CRISP example needs.
"""

from pathlib import Path
from typing import List

from config.settings import Settings
from ..models.tool import ToolSpec


def foundry(settings: Settings) -> ToolSpec:
    return ToolSpec(
        name="Foundry",
        binary="foundryup",
        script_url=settings.toolchain.foundry_install_url,
        curl_flags=["-L"],
        bin_dirs=[settings.paths.foundry_bin],
        # foundryup pulls forge, cast and anvil
        post_install=[["foundryup"]]
    )


def rzup(settings: Settings) -> ToolSpec:
    return ToolSpec(
        name="rzup",
        binary="rzup",
        script_url=settings.toolchain.risc0_install_url,
        curl_flags=["-fsSL"],
        bin_dirs=[settings.paths.risc0_bin]
    )


def noirup(settings: Settings) -> ToolSpec:
    return ToolSpec(
        name="noirup",
        binary="noirup",
        script_url=settings.toolchain.noirup_install_url,
        curl_flags=["-L"],
        bin_dirs=[settings.paths.nargo_bin],
        post_install=[["noirup"]]
    )


def wasm_pack(settings: Settings) -> ToolSpec:
    return ToolSpec(
        name="wasm-pack",
        binary="wasm-pack",
        script_url=settings.toolchain.wasm_pack_install_url,
        curl_flags=["-fsSf"],
        bin_dirs=[settings.paths.local_bin, settings.paths.cargo_bin]
    )


def solc(settings: Settings) -> ToolSpec:
    return ToolSpec(
        name="solc",
        binary="solc",
        commands=[
            ["brew", "update"],
            ["brew", "upgrade"],
            ["brew", "tap", "ethereum/ethereum"],
            ["brew", "install", "solidity"],
        ],
        bin_dirs=[settings.paths.brew_bin, Path("/opt/homebrew/bin")]
    )


def risczero_toolchain(settings: Settings) -> ToolSpec:
    return ToolSpec(
        name="RISC Zero toolchain",
        binary="cargo-risczero",
        commands=[["rzup", "install", "cargo-risczero"]],
        bin_dirs=[settings.paths.risc0_bin, settings.paths.cargo_bin]
    )


def enclave(settings: Settings) -> ToolSpec:
    home = settings.paths.home
    enclaveup = ToolSpec(
        name="enclaveup",
        binary="enclaveup",
        script_url=settings.toolchain.enclave_install_url,
        curl_flags=["-fsSL"],
        bin_dirs=[settings.paths.local_bin, Path("/root/.local/bin"), home / ".cargo" / "bin"]
    )
    return ToolSpec(
        name="Enclave CLI",
        binary="enclave",
        commands=[["enclaveup", "install"]],
        bin_dirs=[settings.paths.local_bin],
        prerequisite=enclaveup
    )


def default_toolchain(settings: Settings) -> List[ToolSpec]:
    """Install steps in execution order."""
    specs = [foundry(settings), rzup(settings)]
    if settings.toolchain.install_noir:
        specs.append(noirup(settings))
    specs.extend([
        wasm_pack(settings),
        solc(settings),
        risczero_toolchain(settings),
        enclave(settings),
    ])
    return specs
