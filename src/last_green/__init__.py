"""Last green build lookup for CircleCI.

This package determines, for a branch, the revision of the most recent
pipeline whose workflows all passed, by querying the CircleCI API v2:

- Ranking and deduplication of rerun workflows
- Sequential scanning of a branch's pipelines, most recent first
- A resolver that collapses lookup failures to "no revision"
- An async CircleCI API client and environment-based configuration
"""

from last_green.models import (
    Pipeline,
    PipelineError,
    PipelineState,
    VcsInfo,
    Workflow,
    WorkflowStatus,
)
from last_green.ranking import (
    GREEN_STATUSES,
    STATUS_PRIORITY,
    dedupe_workflows,
    is_green,
    rank_status,
)
from last_green.resolver import ResolutionResult, RevisionResolver
from last_green.scanner import BuildScanner, PipelineEvaluator

__all__ = [
    # Models
    "Pipeline",
    "PipelineError",
    "PipelineState",
    "VcsInfo",
    "Workflow",
    "WorkflowStatus",
    # Ranking
    "GREEN_STATUSES",
    "STATUS_PRIORITY",
    "dedupe_workflows",
    "is_green",
    "rank_status",
    # Scanning
    "BuildScanner",
    "PipelineEvaluator",
    "ResolutionResult",
    "RevisionResolver",
]
