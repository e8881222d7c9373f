"""Unit tests for PipelineEvaluator and BuildScanner.

Workflow fetching is stubbed with in-memory fetchers so the tests can assert
exactly which pipelines had their workflows requested.
"""

from typing import List
from unittest.mock import AsyncMock

import pytest

from factories import make_pipeline, make_workflow, run_async, workflows_fetcher
from last_green.models import PipelineState, WorkflowStatus
from last_green.scanner import BuildScanner, PipelineEvaluator


# ---------------------------------------------------------------------------
# PipelineEvaluator
# ---------------------------------------------------------------------------


class TestPipelineEvaluator:
    @pytest.mark.parametrize(
        "state",
        [
            PipelineState.ERRORED,
            PipelineState.SETUP_PENDING,
            PipelineState.SETUP,
            PipelineState.PENDING,
            PipelineState.UNKNOWN,
        ],
    )
    def test_ineligible_pipeline_is_not_green_and_not_fetched(self, state):
        fetch = AsyncMock(return_value=[make_workflow()])
        evaluator = PipelineEvaluator(fetch)

        assert run_async(evaluator.is_green(make_pipeline(state=state))) is False
        fetch.assert_not_called()

    def test_created_pipeline_with_all_success_is_green(self):
        fetch = AsyncMock(
            return_value=[make_workflow("build"), make_workflow("test")]
        )
        evaluator = PipelineEvaluator(fetch)

        assert run_async(evaluator.is_green(make_pipeline("p1"))) is True
        fetch.assert_awaited_once_with("p1")

    def test_pipeline_without_workflows_is_not_green(self):
        evaluator = PipelineEvaluator(AsyncMock(return_value=[]))
        assert run_async(evaluator.is_green(make_pipeline())) is False

    def test_pipeline_with_failed_workflow_is_not_green(self):
        evaluator = PipelineEvaluator(
            AsyncMock(
                return_value=[
                    make_workflow("build", WorkflowStatus.SUCCESS),
                    make_workflow("test", WorkflowStatus.FAILED),
                ]
            )
        )
        assert run_async(evaluator.is_green(make_pipeline())) is False

    def test_rerun_workflow_is_deduplicated(self):
        evaluator = PipelineEvaluator(
            AsyncMock(
                return_value=[
                    make_workflow("build", WorkflowStatus.SUCCESS, "w1"),
                    make_workflow("build", WorkflowStatus.FAILED, "w2"),
                ]
            )
        )
        assert run_async(evaluator.is_green(make_pipeline())) is True

    def test_success_and_on_hold_is_green(self):
        evaluator = PipelineEvaluator(
            AsyncMock(
                return_value=[
                    make_workflow("build", WorkflowStatus.SUCCESS),
                    make_workflow("deploy", WorkflowStatus.ON_HOLD),
                ]
            )
        )
        assert run_async(evaluator.is_green(make_pipeline())) is True

    def test_fetch_error_propagates(self):
        evaluator = PipelineEvaluator(AsyncMock(side_effect=RuntimeError("boom")))
        with pytest.raises(RuntimeError, match="boom"):
            run_async(evaluator.is_green(make_pipeline()))


# ---------------------------------------------------------------------------
# BuildScanner
# ---------------------------------------------------------------------------


def _scanner(workflows_by_pipeline: dict, calls: List[str]) -> BuildScanner:
    return BuildScanner(PipelineEvaluator(workflows_fetcher(workflows_by_pipeline, calls)))


class TestBuildScanner:
    def test_returns_first_eligible_green_pipeline(self):
        p1 = make_pipeline("p1", PipelineState.PENDING)
        p2 = make_pipeline("p2", revision="rev2")
        p3 = make_pipeline("p3", revision="rev3")
        calls: List[str] = []
        scanner = _scanner(
            {
                "p1": [make_workflow("build")],
                "p2": [make_workflow("build")],
                "p3": [make_workflow("build")],
            },
            calls,
        )

        assert run_async(scanner.scan([p1, p2, p3])) == p2
        assert calls == ["p2"]

    def test_skips_red_pipelines_in_order(self):
        p1 = make_pipeline("p1")
        p2 = make_pipeline("p2")
        calls: List[str] = []
        scanner = _scanner(
            {
                "p1": [make_workflow("build", WorkflowStatus.FAILED)],
                "p2": [make_workflow("build", WorkflowStatus.SUCCESS)],
            },
            calls,
        )

        assert run_async(scanner.scan([p1, p2])) == p2
        assert calls == ["p1", "p2"]

    def test_returns_none_when_nothing_is_green(self):
        calls: List[str] = []
        scanner = _scanner(
            {"p2": [make_workflow("build", WorkflowStatus.RUNNING)]},
            calls,
        )
        pipelines = [
            make_pipeline("p1", PipelineState.ERRORED),
            make_pipeline("p2"),
            make_pipeline("p3"),
        ]

        assert run_async(scanner.scan(pipelines)) is None
        assert calls == ["p2", "p3"]

    def test_empty_pipeline_list(self):
        scanner = _scanner({}, [])
        assert run_async(scanner.scan([])) is None

    def test_fetch_error_aborts_scan(self):
        fetch = AsyncMock(side_effect=[RuntimeError("network down"), [make_workflow()]])
        scanner = BuildScanner(PipelineEvaluator(fetch))

        with pytest.raises(RuntimeError, match="network down"):
            run_async(scanner.scan([make_pipeline("p1"), make_pipeline("p2")]))
        assert fetch.await_count == 1
