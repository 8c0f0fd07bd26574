"""
DTOs for the build notifier.

Pydantic V2 models describing the build that may trigger a job and the
notifier configuration attached to it.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.domain.entities import Execution


# =============================================================================
# REQUEST DTOs
# =============================================================================

class ChangeEntry(BaseModel):
    """One commit of the build's changelog."""

    model_config = ConfigDict(frozen=True)

    message: str = ""
    author: Optional[str] = None


class BuildContext(BaseModel):
    """
    What the notifier needs to know about the finished build.
    
    Upstream builds are the builds that caused this one; their changelogs
    are searched for the tag too.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(..., description="Full display name, e.g. 'my-project #12'")
    job_name: str = Field(default="", description="Name of the building project")
    number: int = Field(default=0, ge=0)
    succeeded: bool = True
    changes: List[ChangeEntry] = Field(default_factory=list)
    upstream_builds: List["BuildContext"] = Field(default_factory=list)
    environment: Dict[str, str] = Field(default_factory=dict)

    def variables(self) -> Dict[str, str]:
        """Variables available to option expansion."""
        values = {"BUILD_NUMBER": str(self.number), "JOB_NAME": self.job_name}
        values.update(self.environment)
        return values


class NotifierConfig(BaseModel):
    """
    Notifier configuration for one project.
    
    ``options`` and ``node_filters`` use the ``key=value`` properties
    format, one pair per line. ``tail_log`` left unset means the output
    is not tailed.
    """

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(..., description="Identifier of the job to trigger")
    options: Optional[str] = None
    node_filters: Optional[str] = None
    tag: Optional[str] = None
    should_wait_for_job: bool = False
    should_fail_the_build: bool = False
    tail_log: Optional[bool] = None

    @field_validator("job_id")
    @classmethod
    def validate_job_id(cls, v: str) -> str:
        """Job id must not be blank."""
        if not v or not v.strip():
            raise ValueError("Job id is required")
        return v.strip()


# =============================================================================
# RESPONSE
# =============================================================================

@dataclass
class NotificationResult:
    """
    Outcome of one notifier run.
    
    ``should_fail_build`` tells the build system to mark the build as
    failed; the notifier itself never changes the build.
    """
    notified: bool
    succeeded: bool
    execution: Optional[Execution] = None
    summary: Optional[str] = None
    should_fail_build: bool = False
    error: Optional[str] = None


BuildContext.model_rebuild()
