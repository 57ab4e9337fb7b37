"""
Toolchain installer models.
"""

from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field


class ToolSpec(BaseModel):
    """Specification for one idempotent toolchain install step."""
    name: str = Field(..., description="Display name used in log output")
    binary: str = Field(..., description="Command that must resolve on the search path")
    script_url: Optional[str] = Field(None, description="Remote installer script piped into bash")
    curl_flags: List[str] = Field(default_factory=lambda: ["-fsSL"], description="Flags for curl")
    commands: List[List[str]] = Field(default_factory=list, description="Package-manager commands")
    bin_dirs: List[Path] = Field(default_factory=list, description="Candidate directories, in order")
    post_install: List[List[str]] = Field(default_factory=list, description="Commands run after install")
    prerequisite: Optional["ToolSpec"] = Field(
        None, description="Tool installed first, only when this binary is missing"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Foundry",
                "binary": "foundryup",
                "script_url": "https://foundry.paradigm.xyz",
                "curl_flags": ["-L"],
                "bin_dirs": ["~/.foundry/bin"],
                "post_install": [["foundryup"]]
            }
        }

    def download_command(self) -> List[str]:
        """curl invocation that fetches the installer script."""
        if not self.script_url:
            raise ValueError(f"{self.name} has no installer script URL")
        return ["curl", *self.curl_flags, self.script_url]


ToolSpec.model_rebuild()
