"""
Result of running an external command.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Outcome of a single subprocess invocation."""
    args: List[str] = Field(..., description="Command and arguments as executed")
    returncode: int = Field(..., description="Process exit code")
    stdout: Optional[bytes] = Field(None, description="Captured standard output, if requested")

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        return " ".join(self.args)
