"""Resolution of the last green revision on a branch.

RevisionResolver is the boundary between the scanning logic and its callers.
Failures anywhere below it (transport errors, malformed responses) are logged
and reported as absence rather than raised. Callers that need to tell "no
green build exists" apart from "the lookup failed" use ``resolve_detailed``.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from last_green.models import Pipeline, Workflow
from last_green.scanner import BuildScanner, PipelineEvaluator


logger = logging.getLogger(__name__)


class PipelineSource(Protocol):
    """Read access to a CI provider's pipelines and workflows."""

    async def list_pipelines(self, slug: str, branch: str) -> List[Pipeline]:
        ...

    async def list_workflows(self, pipeline_id: str) -> List[Workflow]:
        ...


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of a resolution attempt.

    Attributes:
        revision: Revision of the last green pipeline, if one was found.
        pipeline_id: Id of the last green pipeline, if one was found.
        error: Description of the failure that aborted the lookup, if any.
    """

    revision: Optional[str] = None
    pipeline_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.revision is not None

    @property
    def failed(self) -> bool:
        return self.error is not None


class RevisionResolver:
    """Determines the revision of the most recent green build on a branch.

    Attributes:
        source: Provider of pipelines and workflows.
        slug: Project slug in the form "{vcs}/{org}/{repo}".

    Example:
        >>> async with CircleCIClient(token="xxx") as client:
        ...     resolver = RevisionResolver(client, "gh/acme/widgets")
        ...     revision = await resolver.resolve("main")
    """

    def __init__(self, source: PipelineSource, slug: str):
        self.source = source
        self.slug = slug
        self.scanner = BuildScanner(PipelineEvaluator(source.list_workflows))

    async def resolve_detailed(self, branch: str) -> ResolutionResult:
        """Resolve the last green revision, keeping failures distinguishable.

        Args:
            branch: Branch whose pipelines are scanned.

        Returns:
            ResolutionResult with the revision and pipeline id on success,
            with ``error`` set if a fetch or parse failed, or empty when
            no green pipeline exists.
        """
        try:
            pipelines = await self.source.list_pipelines(self.slug, branch)
            pipeline = await self.scanner.scan(pipelines)
        except Exception as e:
            logger.warning(
                f"Failed to call CircleCI API v2 with error: {e}",
                extra={"slug": self.slug, "branch": branch},
            )
            return ResolutionResult(error=str(e) or type(e).__name__)

        if pipeline is None:
            return ResolutionResult()

        if pipeline.revision is None:
            logger.warning(
                "Green pipeline has no VCS revision",
                extra={"slug": self.slug, "branch": branch, "pipeline_id": pipeline.id},
            )
        return ResolutionResult(revision=pipeline.revision, pipeline_id=pipeline.id)

    async def resolve(self, branch: str) -> Optional[str]:
        """Return the last green revision on ``branch``, or None.

        None is returned both when no green pipeline exists and when the
        lookup failed.
        """
        result = await self.resolve_detailed(branch)
        return result.revision
