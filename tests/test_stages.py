"""Tests for the linear stage runner."""

import pytest

from anamnesis.documents.stages import StagePipeline, StageStatus


def test_stages_run_in_order_and_share_context():
    order = []

    def render(ctx):
        order.append("render")
        return {"markup": f"<p>{ctx['name']}</p>"}

    def embed(ctx):
        order.append("embed")
        return {"markup": ctx["markup"] + "<img/>"}

    def assemble(ctx):
        order.append("assemble")
        return {"document": ctx["markup"].encode()}

    pipeline = (
        StagePipeline("test")
        .add_stage("render", render)
        .add_stage("embed", embed)
        .add_stage("assemble", assemble)
    )
    result = pipeline.run({"name": "Max"})

    assert order == ["render", "embed", "assemble"]
    assert result["document"] == b"<p>Max</p><img/>"
    assert pipeline.succeeded


def test_stage_returning_none_keeps_context():
    pipeline = StagePipeline("test").add_stage("noop", lambda ctx: None)
    assert pipeline.run({"a": 1}) == {"a": 1}


def test_failure_skips_remaining_stages_and_propagates():
    class Boom(Exception):
        pass

    def fail(ctx):
        raise Boom("render failed")

    ran = []
    pipeline = (
        StagePipeline("test")
        .add_stage("ok", lambda ctx: {"x": 1})
        .add_stage("fail", fail)
        .add_stage("after", lambda ctx: ran.append("after"))
    )

    with pytest.raises(Boom):
        pipeline.run()

    assert ran == []
    assert pipeline.stages[0].status == StageStatus.SUCCESS
    assert pipeline.stages[1].status == StageStatus.FAILED
    assert pipeline.stages[1].error == "Boom: render failed"
    assert pipeline.stages[2].status == StageStatus.SKIPPED
    assert not pipeline.succeeded


def test_duplicate_stage_name_rejected():
    pipeline = StagePipeline("test").add_stage("render", lambda ctx: None)
    with pytest.raises(ValueError, match="Duplicate"):
        pipeline.add_stage("render", lambda ctx: None)


def test_summary_reports_status_per_stage():
    pipeline = StagePipeline("test").add_stage("a", lambda ctx: None)
    pipeline.run()
    summary = pipeline.summary()
    assert summary["a"]["status"] == "success"
    assert summary["a"]["error"] is None
    assert summary["a"]["duration_ms"] >= 0


def test_initial_context_not_mutated():
    initial = {"a": 1}
    StagePipeline("test").add_stage("b", lambda ctx: {"b": 2}).run(initial)
    assert initial == {"a": 1}
