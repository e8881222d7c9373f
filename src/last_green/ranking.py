"""Workflow status ranking and deduplication.

A pipeline may contain several workflows sharing a logical name when a
workflow is rerun. Before a pipeline is judged, its workflows are collapsed
to one representative per name, keeping the one whose status ranks highest.
The ranking is used only to pick representatives; whether a pipeline is
green is decided separately by ``is_green``.
"""

from typing import Dict, FrozenSet, List, Optional, Sequence

from last_green.models import Workflow, WorkflowStatus


# Deduplication priority of each workflow status. Higher wins.
STATUS_PRIORITY: Dict[WorkflowStatus, int] = {
    WorkflowStatus.SUCCESS: 5,
    WorkflowStatus.ON_HOLD: 4,
    WorkflowStatus.RUNNING: 3,
    WorkflowStatus.NOT_RUN: 2,
    WorkflowStatus.FAILED: 1,
    WorkflowStatus.ERROR: 1,
    WorkflowStatus.FAILING: 1,
    WorkflowStatus.CANCELED: 1,
    WorkflowStatus.UNAUTHORIZED: 0,
    WorkflowStatus.UNKNOWN: 0,
}

# Statuses that count as passed when judging a pipeline.
GREEN_STATUSES: FrozenSet[WorkflowStatus] = frozenset(
    {WorkflowStatus.SUCCESS, WorkflowStatus.ON_HOLD}
)


def rank_status(status: Optional[WorkflowStatus]) -> int:
    """Return the deduplication priority of a workflow status.

    Args:
        status: The workflow status to rank.

    Returns:
        The priority from STATUS_PRIORITY, or 0 for anything not in it.
    """
    return STATUS_PRIORITY.get(status, 0)


def should_prefer(candidate: Workflow, existing: Workflow) -> bool:
    """Check whether ``candidate`` should replace ``existing`` for its name.

    Only a strictly better status replaces the stored workflow, so among
    equally ranked workflows the first one seen is kept.
    """
    return rank_status(candidate.status) > rank_status(existing.status)


def dedupe_workflows(workflows: Sequence[Workflow]) -> List[Workflow]:
    """Collapse workflows to one representative per logical name.

    Workflows are processed in input order. The first workflow seen for a
    name is stored, and is replaced only by a later same-named workflow with
    a strictly higher rank.

    Args:
        workflows: Workflows of a single pipeline, in API order.

    Returns:
        One workflow per distinct name, ordered by first appearance of
        the name.
    """
    best: Dict[str, Workflow] = {}
    for workflow in workflows:
        existing = best.get(workflow.name)
        if existing is None or should_prefer(workflow, existing):
            best[workflow.name] = workflow
    return list(best.values())


def is_green(workflows: Sequence[Workflow]) -> bool:
    """Judge whether a pipeline's workflows represent a fully green build.

    The workflows are deduplicated first. The build is green when at least
    one workflow remains and every remaining workflow succeeded or is on hold.
    """
    unique = dedupe_workflows(workflows)
    if not unique:
        return False
    return all(workflow.status in GREEN_STATUSES for workflow in unique)
