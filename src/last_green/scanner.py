"""Pipeline evaluation and sequential build scanning.

The scanner walks a branch's pipelines in the order the API returns them
(most recent first) and stops at the first one whose workflows are all
green. Workflows are fetched lazily, one pipeline at a time, and only for
pipelines in the CREATED state.
"""

import logging
from typing import Awaitable, Callable, Optional, Sequence

from last_green.models import Pipeline, PipelineState, Workflow
from last_green.ranking import dedupe_workflows, is_green


logger = logging.getLogger(__name__)

WorkflowFetcher = Callable[[str], Awaitable[Sequence[Workflow]]]


class PipelineEvaluator:
    """Decides whether a single pipeline is fully green.

    Attributes:
        fetch_workflows: Coroutine function returning the workflows of a
            pipeline given its id. Errors it raises are not caught here.
    """

    def __init__(self, fetch_workflows: WorkflowFetcher):
        self.fetch_workflows = fetch_workflows

    @staticmethod
    def is_eligible(pipeline: Pipeline) -> bool:
        """Only pipelines that reached the CREATED state can be judged."""
        return pipeline.state is PipelineState.CREATED

    async def is_green(self, pipeline: Pipeline) -> bool:
        """Evaluate a pipeline, fetching its workflows if it is eligible.

        Args:
            pipeline: The pipeline to evaluate.

        Returns:
            True if the pipeline is CREATED and its deduplicated workflow
            set is non-empty with every workflow in success or on_hold.

        Raises:
            Exception: Whatever the workflow fetcher raises.
        """
        if not self.is_eligible(pipeline):
            logger.debug(
                "Skipping pipeline that is not in created state",
                extra={"pipeline_id": pipeline.id, "state": pipeline.state.value},
            )
            return False

        workflows = await self.fetch_workflows(pipeline.id)
        green = is_green(workflows)

        logger.debug(
            "Evaluated pipeline",
            extra={
                "pipeline_id": pipeline.id,
                "workflow_count": len(workflows),
                "unique_workflow_count": len(dedupe_workflows(workflows)),
                "green": green,
            },
        )
        return green


class BuildScanner:
    """Finds the most recent green pipeline in an ordered pipeline list."""

    def __init__(self, evaluator: PipelineEvaluator):
        self.evaluator = evaluator

    async def scan(self, pipelines: Sequence[Pipeline]) -> Optional[Pipeline]:
        """Return the first green pipeline, or None if there is none.

        Pipelines are evaluated one after another; no pipeline after the
        first green one is evaluated.
        """
        for pipeline in pipelines:
            if await self.evaluator.is_green(pipeline):
                logger.info(
                    "Found green pipeline",
                    extra={"pipeline_id": pipeline.id, "revision": pipeline.revision},
                )
                return pipeline

        logger.info(
            "No green pipeline found",
            extra={"pipelines_scanned": len(pipelines)},
        )
        return None
