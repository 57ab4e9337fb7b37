"""
Project-level models.
"""

import re
from pathlib import Path
from pydantic import BaseModel, Field, validator


class ScriptPatch(BaseModel):
    """A one-line text substitution applied to a downstream script."""
    path: Path = Field(..., description="Target file, relative to the project directory")
    pattern: str = Field(..., description="Regular expression to replace")
    replacement: str = Field(..., description="Replacement text")
    description: str = Field(default="", description="Shown in log output")

    @validator('pattern')
    def validate_pattern(cls, v):
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid patch pattern {v!r}: {e}")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "path": "examples/CRISP/scripts/dev.sh",
                "pattern": "^set -e$",
                "replacement": "set -eu",
                "description": "Fail on unset variables"
            }
        }
