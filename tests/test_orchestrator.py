"""
Tests for the batch orchestrator
"""
import dataclasses

import pytest

from snappair.errors import ImageProcessingError
from snappair.matching import Matcher, MatchResult
from snappair.orchestrator import BatchOrchestrator, run_batch, sort_results
from tests.conftest import FakeProcessor


def _orchestrator(config, proc, files_b, **kwargs):
    kwargs.setdefault("progress", False)
    return BatchOrchestrator(Matcher(config, proc, files_b), **kwargs)


@pytest.mark.asyncio
async def test_cat_and_dog_scenario(config):
    proc = FakeProcessor(
        dims={"cat.jpg": (200, 150), "cat_v2.jpg": (200, 150), "dog.jpg": (150, 200)},
        scores={("cat.jpg", "cat_v2.jpg"): 0.01},
    )
    outcome = await _orchestrator(config, proc, ["cat_v2.jpg", "dog.jpg"]).run_all(["cat.jpg"])

    assert outcome.results == [
        MatchResult(equality=0.01, file_name_from_b="cat_v2.jpg", file_name_from_a="cat.jpg")
    ]
    assert outcome.failures == []
    assert ("compare", "cat.jpg", "dog.jpg") not in proc.calls


@pytest.mark.asyncio
async def test_results_sorted_and_absent_items_dropped(config):
    names_a = ["p.jpg", "q.jpg", "r.jpg", "notes.txt"]
    proc = FakeProcessor(
        dims={n: (200, 150) for n in ["p.jpg", "q.jpg", "r.jpg", "b.jpg"]},
        scores={("p.jpg", "b.jpg"): 0.4, ("q.jpg", "b.jpg"): 0.1, ("r.jpg", "b.jpg"): 0.2},
    )
    outcome = await _orchestrator(config, proc, ["b.jpg"]).run_all(names_a)

    assert [r.file_name_from_a for r in outcome.results] == ["q.jpg", "r.jpg", "p.jpg"]
    assert [r.equality for r in outcome.results] == [0.1, 0.2, 0.4]


@pytest.mark.asyncio
async def test_failures_are_isolated_per_item(config):
    proc = FakeProcessor(
        dims={n: (200, 150) for n in ["ok.jpg", "bad.jpg", "b.jpg"]},
        scores={("ok.jpg", "b.jpg"): 0.3, ("bad.jpg", "b.jpg"): ImageProcessingError("corrupt")},
    )
    outcome = await _orchestrator(config, proc, ["b.jpg"]).run_all(["bad.jpg", "ok.jpg"])

    assert [r.file_name_from_a for r in outcome.results] == ["ok.jpg"]
    assert len(outcome.failures) == 1
    assert outcome.failures[0].file_name_from_a == "bad.jpg"
    assert isinstance(outcome.failures[0].error, ImageProcessingError)


@pytest.mark.asyncio
async def test_fail_fast_aborts_batch(config):
    proc = FakeProcessor(
        dims={n: (200, 150) for n in ["ok.jpg", "bad.jpg", "b.jpg"]},
        scores={("ok.jpg", "b.jpg"): 0.3, ("bad.jpg", "b.jpg"): ImageProcessingError("corrupt")},
    )
    orchestrator = _orchestrator(config, proc, ["b.jpg"], fail_fast=True)
    with pytest.raises(ImageProcessingError, match="corrupt"):
        await orchestrator.run_all(["bad.jpg", "ok.jpg"])


@pytest.mark.asyncio
async def test_at_most_two_items_in_flight(config):
    names_a = [f"a{i}.jpg" for i in range(6)]
    names_b = ["b0.jpg", "b1.jpg"]
    proc = FakeProcessor(
        dims={n: (200, 150) for n in names_a + names_b},
        scores={(a, b): 0.5 for a in names_a for b in names_b},
        delay=0.01,
    )
    outcome = await _orchestrator(config, proc, names_b, concurrency=2).run_all(names_a)

    assert len(outcome.results) == 6
    assert proc.max_in_flight == 2


def test_run_batch_sync_wrapper(config):
    proc = FakeProcessor()
    cfg = dataclasses.replace(config, outer_concurrency=1)
    outcome = run_batch(Matcher(cfg, proc, ["x.jpg"]), ["x.jpg"], concurrency=1, progress=False)
    assert outcome.results[0].equality == 0


def test_sort_results_is_stable():
    rs = [MatchResult(0.2, "b1", "a1"), MatchResult(0.1, "b2", "a2"), MatchResult(0.2, "b3", "a3")]
    assert [r.file_name_from_a for r in sort_results(rs)] == ["a2", "a1", "a3"]
