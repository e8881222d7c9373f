"""Property-based tests for workflow deduplication.

Verifies universal properties of dedupe_workflows and is_green across
randomized workflow lists.

Testing Configuration:
- Library: Hypothesis (Python)
- Minimum iterations: 100 per property test
"""

from hypothesis import given, settings, strategies as st

from last_green.models import Workflow, WorkflowStatus
from last_green.ranking import GREEN_STATUSES, dedupe_workflows, is_green, rank_status


status_strategy = st.sampled_from(list(WorkflowStatus))

name_strategy = st.sampled_from(["build", "test", "lint", "deploy", "nightly"])


@st.composite
def workflow_list_strategy(draw, max_size=12):
    entries = draw(
        st.lists(st.tuples(name_strategy, status_strategy), min_size=0, max_size=max_size)
    )
    return [
        Workflow(id=f"wf-{index}", name=name, status=status)
        for index, (name, status) in enumerate(entries)
    ]


class TestDedupeIdempotenceProperty:
    """Property: deduplicating twice gives the same result as once."""

    @given(workflows=workflow_list_strategy())
    @settings(max_examples=100)
    def test_dedupe_is_idempotent(self, workflows):
        once = dedupe_workflows(workflows)
        assert dedupe_workflows(once) == once


class TestDedupeUniquenessProperty:
    """Property: output has exactly one entry per distinct input name."""

    @given(workflows=workflow_list_strategy())
    @settings(max_examples=100)
    def test_one_entry_per_name(self, workflows):
        result = dedupe_workflows(workflows)
        names = [workflow.name for workflow in result]
        assert len(names) == len(set(names))
        assert set(names) == {workflow.name for workflow in workflows}


class TestDedupeMaximalityProperty:
    """Property: each representative is the first max-rank workflow of its name."""

    @given(workflows=workflow_list_strategy())
    @settings(max_examples=100)
    def test_representative_is_first_with_max_rank(self, workflows):
        for representative in dedupe_workflows(workflows):
            same_name = [w for w in workflows if w.name == representative.name]
            top = max(rank_status(w.status) for w in same_name)
            first_top = next(w for w in same_name if rank_status(w.status) == top)
            assert representative == first_top

    @given(
        better=status_strategy,
        worse=status_strategy,
        better_first=st.booleans(),
    )
    @settings(max_examples=100)
    def test_higher_rank_wins_regardless_of_order(self, better, worse, better_first):
        if rank_status(better) <= rank_status(worse):
            better, worse = worse, better
        if rank_status(better) == rank_status(worse):
            return
        w_better = Workflow(id="better", name="build", status=better)
        w_worse = Workflow(id="worse", name="build", status=worse)
        ordered = [w_better, w_worse] if better_first else [w_worse, w_better]
        assert dedupe_workflows(ordered) == [w_better]


class TestIsGreenProperty:
    """Property: a set is green iff it is non-empty and every name has a green workflow."""

    @given(workflows=workflow_list_strategy())
    @settings(max_examples=100)
    def test_green_matches_per_name_best_status(self, workflows):
        names = {w.name for w in workflows}
        expected = bool(names) and all(
            any(w.status in GREEN_STATUSES for w in workflows if w.name == name)
            for name in names
        )
        assert is_green(workflows) == expected
