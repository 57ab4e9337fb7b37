"""
Configuration settings for the CRISP development environment bootstrap.
"""

from typing import Optional, List
from pathlib import Path
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings

from crisp_bootstrap.core.retry import RetryPolicy
from crisp_bootstrap.models.project import ScriptPatch


class RetryConfig(BaseModel):
    """Retry configuration for network-bound commands."""
    attempts: int = Field(default=3, ge=1, description="Attempts per command")
    delay_seconds: float = Field(default=5.0, ge=0, description="Fixed delay between attempts")

    def policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.attempts, delay_seconds=self.delay_seconds)


class PathsConfig(BaseModel):
    """Filesystem layout."""
    home: Path = Field(default_factory=Path.home, description="User home directory")
    workspace: Path = Field(default_factory=Path.cwd, description="Directory holding the project")
    project_dir_name: str = Field(default="project", description="Project directory under the workspace")
    crisp_subdir: Path = Field(default=Path("examples/CRISP"), description="CRISP example inside the project")
    marker_file: str = Field(default="package.json", description="Marks an initialized project")
    brew_prefix: Path = Field(default=Path("/home/linuxbrew/.linuxbrew"), description="Homebrew prefix")
    pnpm_home: Optional[Path] = Field(None, description="PNPM_HOME (default: ~/.local/share/pnpm)")
    bashrc: Optional[Path] = Field(None, description="Shell rc file (default: ~/.bashrc)")
    project_permissions: int = Field(default=0o777, description="Mode applied recursively to the project")

    @validator('crisp_subdir')
    def validate_relative(cls, v):
        if v.is_absolute():
            raise ValueError(f"crisp_subdir must be relative to the project: {v}")
        return v

    @property
    def local_bin(self) -> Path:
        return self.home / ".local" / "bin"

    @property
    def foundry_bin(self) -> Path:
        return self.home / ".foundry" / "bin"

    @property
    def risc0_bin(self) -> Path:
        return self.home / ".risc0" / "bin"

    @property
    def nargo_bin(self) -> Path:
        return self.home / ".nargo" / "bin"

    @property
    def cargo_bin(self) -> Path:
        return self.home / ".cargo" / "bin"

    @property
    def brew_bin(self) -> Path:
        return self.brew_prefix / "bin"

    @property
    def pnpm_home_dir(self) -> Path:
        return self.pnpm_home or self.home / ".local" / "share" / "pnpm"

    @property
    def bashrc_file(self) -> Path:
        return self.bashrc or self.home / ".bashrc"

    @property
    def project_dir(self) -> Path:
        return self.workspace / self.project_dir_name

    @property
    def crisp_dir(self) -> Path:
        return self.project_dir / self.crisp_subdir


class ToolchainConfig(BaseModel):
    """Installer endpoints and optional tools."""
    foundry_install_url: str = Field(default="https://foundry.paradigm.xyz")
    risc0_install_url: str = Field(default="https://risczero.com/install")
    noirup_install_url: str = Field(
        default="https://raw.githubusercontent.com/noir-lang/noirup/refs/heads/main/install"
    )
    wasm_pack_install_url: str = Field(default="https://drager.github.io/wasm-pack/installer/init.sh")
    enclave_install_url: str = Field(
        default="https://raw.githubusercontent.com/gnosisguild/enclave/main/install"
    )
    enclave_repo_url: str = Field(default="https://github.com/gnosisguild/enclave.git")
    install_noir: bool = Field(default=True, description="Install the Noir toolchain manager")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    file_path: Optional[Path] = Field(default=None, description="Optional rotating log file")
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")

    @validator('level')
    def validate_level(cls, v):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """Main application settings."""
    # Component configs
    retry: RetryConfig = Field(default_factory=RetryConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # One-line fixes applied to downstream scripts after dependencies install
    patches: List[ScriptPatch] = Field(default_factory=list)

    # Operational settings
    start_dev_server: bool = Field(default=True, description="Launch pnpm dev:up at the end")

    class Config:
        env_prefix = "CRISP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"  # Ignore extra fields from environment
