# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : stages.py
from dataclasses import dataclass, replace
from enum import Enum

from message import (PipelineMessage, ProtocolError, SUM_DEFAULT, SUB_DEFAULT, MUL_DEFAULT)
from roles import Op, describe


class StageStatus(Enum):
    RUNNING = "running"
    DONE = "done"


@dataclass
class StageState:
    """Accumulator triple owned by exactly one stage."""
    sum_acc: int = SUM_DEFAULT
    sub_acc: int = SUB_DEFAULT
    mul_acc: int = MUL_DEFAULT

    def apply(self, value: int, ops: frozenset):
        """Fold `value` into the accumulators of the operators in `ops`."""
        if Op.SUM in ops:
            self.sum_acc += value
        if Op.SUB in ops:
            self.sub_acc -= value
        if Op.MUL in ops:
            self.mul_acc *= value

    def as_tuple(self):
        return (self.sum_acc, self.sub_acc, self.mul_acc)


class Stage:
    """
    Base class for a worker rank of the pipeline.

    A stage is a two-state machine (RUNNING -> DONE) driven by the records it
    receives from its predecessor. Subclasses decide what happens to data
    records and to the sentinel.

    Parameters:
    -----------
    manager : MPIManager
        Communicator wrapper providing rank, size and point-to-point calls.
    ops : frozenset
        Operators this stage owns (see roles.assign_roles).
    verbose : bool
        Print a trace line per state transition.

    Methods:
    --------
    handle(msg) -> PipelineMessage or None
        Advance the state machine by one received record.
    run()
        Blocking receive / handle / send loop until DONE.
    """

    def __init__(self, manager, ops: frozenset, verbose: bool = False):
        self.manager = manager
        self.rank = manager.rank
        self.size = manager.size
        self.prev_rank = self.rank - 1
        self.ops = ops
        self.verbose = verbose

        self.state = StageState()
        self.status = StageStatus.RUNNING
        self.data_seen = 0
        self.sentinels_seen = 0

    def handle(self, msg: PipelineMessage):
        if self.status is StageStatus.DONE:
            raise ProtocolError(
                f"[Rank {self.rank}] received a record after the sentinel"
            )
        if msg.is_end:
            self.sentinels_seen += 1
            self.status = StageStatus.DONE
            if self.verbose:
                print(f"[Rank {self.rank}] sentinel after {self.data_seen} records -> DONE")
            return self.on_sentinel(msg)

        self.data_seen += 1
        return self.on_data(msg)

    def on_data(self, msg: PipelineMessage):
        raise NotImplementedError

    def on_sentinel(self, msg: PipelineMessage):
        raise NotImplementedError

    def run(self):
        raise NotImplementedError

    def _announce(self):
        if self.verbose:
            print(f"[Rank {self.rank}] {type(self).__name__} owns {describe(self.ops)}")


class IntermediateStage(Stage):
    """Relay stage: updates the fields it owns and forwards every record to rank + 1."""

    def __init__(self, manager, ops: frozenset, verbose: bool = False):
        super().__init__(manager, ops, verbose)
        self.next_rank = self.rank + 1

    def on_data(self, msg: PipelineMessage) -> PipelineMessage:
        self.state.apply(msg.value, self.ops)

        # Only owned fields are overwritten, the rest pass through untouched
        updates = {}
        if Op.SUM in self.ops:
            updates["sum_acc"] = self.state.sum_acc
        if Op.SUB in self.ops:
            updates["sub_acc"] = self.state.sub_acc
        if Op.MUL in self.ops:
            updates["mul_acc"] = self.state.mul_acc
        return replace(msg, **updates)

    def on_sentinel(self, msg: PipelineMessage) -> PipelineMessage:
        return msg

    def run(self):
        self._announce()
        while self.status is StageStatus.RUNNING:
            msg = self.manager.recv_message(self.prev_rank)
            out = self.handle(msg)
            self.manager.send_message(out, self.next_rank)


class SinkStage(Stage):
    """
    Last rank of the pipeline.

    Owned operators are computed locally. For operators owned upstream the
    sink adopts the value carried by the record whenever it differs from the
    field's default. On the sentinel it prints the results and acknowledges
    rank 0.
    """

    def __init__(self, manager, ops: frozenset, verbose: bool = False,
                 send_results: bool = False, source_rank: int = 0):
        super().__init__(manager, ops, verbose)
        self.send_results = send_results
        self.source_rank = source_rank

    def on_data(self, msg: PipelineMessage):
        self.state.apply(msg.value, self.ops)

        if Op.SUM not in self.ops and msg.sum_acc != SUM_DEFAULT:
            self.state.sum_acc = msg.sum_acc
        if Op.SUB not in self.ops and msg.sub_acc != SUB_DEFAULT:
            self.state.sub_acc = msg.sub_acc
        if Op.MUL not in self.ops and msg.mul_acc != MUL_DEFAULT:
            self.state.mul_acc = msg.mul_acc
        return None

    def on_sentinel(self, msg: PipelineMessage):
        return None

    @property
    def results(self):
        """(sum, negated sum, product) as currently known to the sink."""
        return self.state.as_tuple()

    def report(self):
        total, negated, product = self.results
        print(f"Sum = {total}")
        print(f"Negated sum = {negated}")
        print(f"Product = {product}")

    def run(self):
        self._announce()
        while self.status is StageStatus.RUNNING:
            msg = self.manager.recv_message(self.prev_rank)
            self.handle(msg)

        # Results are printed before the ack so the source's timing covers them
        self.report()
        self.manager.send_ack(self.source_rank)
        if self.send_results:
            self.manager.send_result(self.results, self.source_rank)
        return self.results
