# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : pipeline.py
from dataclasses import dataclass

from roles import roles_for_rank, describe
from source import Source
from stages import IntermediateStage, SinkStage

SOURCE_RANK = 0


class TopologyError(ValueError):
    """The process count cannot form a Source -> ... -> Sink chain."""


@dataclass(frozen=True)
class Topology:
    """
    Static linear arrangement of `size` ranks.

    Rank 0 is the source, rank size-1 the sink, everything in between is an
    intermediate stage. The sink also has a return edge to rank 0 for the ack.
    """
    size: int

    def __post_init__(self):
        if self.size < 2:
            raise TopologyError(
                f"Pipeline needs at least 2 processes (source + sink), got {self.size}"
            )

    @property
    def workers(self) -> int:
        return self.size - 1

    @property
    def sink_rank(self) -> int:
        return self.size - 1

    def kind(self, rank: int) -> str:
        if not 0 <= rank < self.size:
            raise TopologyError(f"Rank {rank} outside 0..{self.size - 1}")
        if rank == SOURCE_RANK:
            return "source"
        if rank == self.sink_rank:
            return "sink"
        return "intermediate"

    def ops_for(self, rank: int) -> frozenset:
        self.kind(rank)
        return roles_for_rank(rank, self.size)

    def describe(self) -> list:
        """One line per rank, e.g. 'rank 2 (intermediate): sub'."""
        return [f"rank {r} ({self.kind(r)}): {describe(self.ops_for(r))}"
                for r in range(self.size)]


def run_rank(manager, n: int, verbose: bool = False, collect_results: bool = False):
    """
    Build and run the actor for this process's rank.

    Returns the Source, IntermediateStage or SinkStage after it has finished,
    so the caller can read timings and results.
    """
    topology = Topology(manager.size)
    rank = manager.rank

    if rank == SOURCE_RANK:
        if verbose:
            for line in topology.describe():
                print(f"[Rank {rank}] {line}")
        actor = Source(manager, n, collect_results=collect_results)
    elif rank == topology.sink_rank:
        actor = SinkStage(manager, topology.ops_for(rank), verbose=verbose,
                          send_results=collect_results, source_rank=SOURCE_RANK)
    else:
        actor = IntermediateStage(manager, topology.ops_for(rank), verbose=verbose)

    actor.run()
    return actor
