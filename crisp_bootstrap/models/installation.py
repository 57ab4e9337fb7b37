"""
Step and run result models.
"""

from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class StepStatus(str, Enum):
    """Status of a bootstrap step."""
    INSTALLED = "installed"
    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"


class StepResult(BaseModel):
    """Result of a bootstrap step."""
    step: str = Field(..., description="Step name")
    status: StepStatus = Field(..., description="Step status")
    detail: Optional[str] = Field(None, description="Additional information")
    duration_seconds: Optional[float] = Field(None, description="Step duration")

    class Config:
        json_schema_extra = {
            "example": {
                "step": "Foundry",
                "status": "skipped",
                "detail": "foundryup already on PATH",
                "duration_seconds": 0.01
            }
        }


class BootstrapResult(BaseModel):
    """Summary of a whole bootstrap run."""
    steps: List[StepResult] = Field(default_factory=list)
    success: bool = Field(default=False, description="Overall success status")
    exit_code: Optional[int] = Field(None, description="Exit code of the dev server or failing step")

    # Timing
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    def add(self, result: StepResult) -> None:
        self.steps.append(result)

    def count(self, status: StepStatus) -> int:
        return sum(1 for s in self.steps if s.status == status)

    def complete(self, success: bool, exit_code: Optional[int] = None) -> None:
        """Mark the run as complete."""
        self.success = success
        self.exit_code = exit_code
        self.completed_at = datetime.utcnow()
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
