from math import factorial

import pytest

from message import Channel
from pipeline import Topology, TopologyError
from roles import NO_OPS, Op
from source import Source
from stages import IntermediateStage, SinkStage, StageStatus


@pytest.mark.parametrize("size", [0, 1])
def test_topology_needs_source_and_sink(size):
    with pytest.raises(TopologyError):
        Topology(size)


def test_topology_kinds_and_roles():
    topo = Topology(5)
    assert topo.workers == 4
    assert topo.sink_rank == 4
    assert [topo.kind(r) for r in range(5)] == [
        "source", "intermediate", "intermediate", "intermediate", "sink"]
    assert topo.ops_for(0) == NO_OPS
    assert topo.ops_for(3) == {Op.MUL}
    assert topo.ops_for(4) == NO_OPS
    with pytest.raises(TopologyError):
        topo.kind(5)


def test_topology_describe():
    assert Topology(3).describe() == [
        "rank 0 (source): forward",
        "rank 1 (intermediate): sum",
        "rank 2 (sink): sub+mul",
    ]


@pytest.mark.parametrize("size", [2, 3, 4, 5, 7])
@pytest.mark.parametrize("n", [0, 1, 10, 20])
def test_results_independent_of_placement(run_pipeline, size, n):
    _, actors = run_pipeline(size, n)
    sink = actors[size - 1]
    total = n * (n + 1) // 2
    assert sink.results == (total, -total, factorial(n))


def test_reference_run_prints_expected_values(run_pipeline, capsys):
    run_pipeline(4, 10)
    out = capsys.readouterr().out
    assert "Sum = 55" in out
    assert "Negated sum = -55" in out
    assert "Product = 3628800" in out
    assert "element[9] = 10" in out
    assert "Elapsed time (s):" in out


@pytest.mark.parametrize("size", [2, 3, 6])
def test_every_stage_sees_one_sentinel_after_all_data(run_pipeline, size):
    n = 10
    world, actors = run_pipeline(size, n)

    assert isinstance(actors[0], Source)
    assert isinstance(actors[size - 1], SinkStage)
    for rank in range(1, size):
        stage = actors[rank]
        if rank < size - 1:
            assert isinstance(stage, IntermediateStage)
        assert stage.status is StageStatus.DONE
        assert stage.data_seen == n
        assert stage.sentinels_seen == 1

        received = [e[4] for e in world.events
                    if e[0] == "recv" and e[2] == rank and e[3] == Channel.DATA]
        assert len(received) == n + 1
        assert [r[4] for r in received] == [0] * n + [1]
        # order of elements is preserved along the chain
        assert [r[0] for r in received[:n]] == list(range(1, n + 1))


def test_ack_follows_sink_report(run_pipeline, world, monkeypatch):
    w = world(3)
    original = SinkStage.report

    def traced_report(self):
        w.record("report", self.rank)
        original(self)

    monkeypatch.setattr(SinkStage, "report", traced_report)
    run_pipeline(3, 5, world=w)

    report_at = w.events.index(("report", 2))
    ack_at = next(i for i, e in enumerate(w.events)
                  if e[0] == "send" and e[3] == Channel.ACK)
    assert report_at < ack_at


def test_source_collects_results_when_requested(run_pipeline):
    _, actors = run_pipeline(4, 6, collect_results=True)
    source = actors[0]
    assert source.results == (21, -21, 720)
    assert source.elapsed >= 0.0


def test_repeated_runs_are_identical(run_pipeline):
    first = run_pipeline(5, 8)[1][4].results
    second = run_pipeline(5, 8)[1][4].results
    assert first == second


def test_verbose_trace(run_pipeline, capsys):
    run_pipeline(3, 2, verbose=True)
    out = capsys.readouterr().out
    assert "[Rank 0] rank 1 (intermediate): sum" in out
    assert "[Rank 2] SinkStage owns sub+mul" in out
    assert "[Rank 1] sentinel after 2 records -> DONE" in out
