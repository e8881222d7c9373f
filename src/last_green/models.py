"""CircleCI API v2 data models.

This module defines the records returned by the two read-only endpoints the
resolver consumes:

- PipelineState / WorkflowStatus: closed enumerations of lifecycle values
- Pipeline: one triggered run of the CI configuration for a commit
- Workflow: a named sub-run within a pipeline
- PipelinePage / WorkflowPage: the paginated list envelopes

Records are read-only snapshots fetched per invocation. Unknown fields in the
API payloads are ignored, and unknown enum values fall back to an UNKNOWN
member instead of failing validation.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    """Lifecycle state of a CircleCI pipeline.

    Only CREATED pipelines have resolved VCS metadata and workflows that
    can be judged. Every other state is treated as incomplete.

    Attributes:
        CREATED: Pipeline configuration was compiled and workflows started.
        ERRORED: Pipeline configuration failed to compile.
        SETUP_PENDING: Setup workflow has not started yet.
        SETUP: Setup workflow is running (dynamic configuration).
        PENDING: Pipeline is waiting to be processed.
        UNKNOWN: Any state value not recognized by this client.
    """

    CREATED = "created"
    ERRORED = "errored"
    SETUP_PENDING = "setup-pending"
    SETUP = "setup"
    PENDING = "pending"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "PipelineState":
        return cls.UNKNOWN


class WorkflowStatus(str, Enum):
    """Status of a CircleCI workflow.

    Attributes:
        SUCCESS: All jobs in the workflow passed.
        RUNNING: The workflow is still executing.
        NOT_RUN: The workflow was skipped.
        FAILED: At least one job failed.
        ERROR: The workflow errored out.
        FAILING: A job failed but others are still running.
        ON_HOLD: Waiting on a manual approval job.
        CANCELED: The workflow was canceled.
        UNAUTHORIZED: The triggering user lacks permission to run it.
        UNKNOWN: Any status value not recognized by this client.
    """

    SUCCESS = "success"
    RUNNING = "running"
    NOT_RUN = "not_run"
    FAILED = "failed"
    ERROR = "error"
    FAILING = "failing"
    ON_HOLD = "on_hold"
    CANCELED = "canceled"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "WorkflowStatus":
        return cls.UNKNOWN


class _ApiModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class PipelineError(_ApiModel):
    """An error recorded on a pipeline (e.g. a config compilation error)."""

    type: str = Field(..., description="Error category reported by CircleCI")
    message: str = Field(default="", description="Human-readable error message")


class VcsInfo(_ApiModel):
    """Source-control metadata of the commit that triggered a pipeline.

    Attributes:
        provider_name: VCS provider, e.g. "GitHub" or "Bitbucket".
        revision: Commit identifier the pipeline was triggered for.
        branch: Branch the pipeline was triggered on, when reported.
    """

    provider_name: str = Field(default="", description="VCS provider name")
    revision: Optional[str] = Field(
        default=None,
        description="Commit identifier in the source-control system",
    )
    branch: Optional[str] = Field(default=None, description="Triggering branch")


class Pipeline(_ApiModel):
    """One triggered run of the CI configuration.

    Attributes:
        id: Pipeline UUID.
        state: Lifecycle state of the pipeline.
        errors: Errors recorded while setting up the pipeline.
        vcs: Source-control metadata; only meaningful once CREATED.
    """

    id: str = Field(..., min_length=1, description="Pipeline identifier")
    state: PipelineState = Field(..., description="Pipeline lifecycle state")
    errors: List[PipelineError] = Field(default_factory=list)
    vcs: Optional[VcsInfo] = Field(default=None)

    @property
    def revision(self) -> Optional[str]:
        """Commit identifier of the pipeline, if the VCS info carries one."""
        if self.vcs is None:
            return None
        return self.vcs.revision


class Workflow(_ApiModel):
    """A named sub-run within a pipeline.

    Names are not unique within a pipeline: reruns of the same logical
    workflow produce several entries sharing a name.
    """

    id: str = Field(..., min_length=1, description="Workflow identifier")
    name: str = Field(..., description="Logical workflow name")
    status: WorkflowStatus = Field(..., description="Workflow status")


class PipelinePage(_ApiModel):
    """Response envelope of ``GET /project/{slug}/pipeline``."""

    items: List[Pipeline] = Field(default_factory=list)
    next_page_token: Optional[str] = None


class WorkflowPage(_ApiModel):
    """Response envelope of ``GET /pipeline/{id}/workflow``."""

    items: List[Workflow] = Field(default_factory=list)
    next_page_token: Optional[str] = None
