"""
Data models for the CRISP bootstrap.
"""

from .command import CommandResult
from .tool import ToolSpec
from .project import ScriptPatch
from .installation import StepStatus, StepResult, BootstrapResult

__all__ = [
    "CommandResult",
    "ToolSpec",
    "ScriptPatch",
    "StepStatus",
    "StepResult",
    "BootstrapResult"
]
