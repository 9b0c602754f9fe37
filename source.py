# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : source.py
from message import PipelineMessage


def generate_sequence(n: int) -> list:
    """Return the input sequence 1..n (empty for n == 0)."""
    if n < 0:
        raise ValueError(f"Sequence length must be non-negative, got {n}")
    return [i + 1 for i in range(n)]


class Source:
    """
    Rank 0 of the pipeline: generates the sequence, streams it downstream and
    times the run until the sink's acknowledgment arrives.

    Parameters:
    -----------
    manager : MPIManager
        Communicator wrapper (rank must be 0).
    n : int
        Sequence length.
    collect_results : bool
        Also receive the sink's (sum, negated sum, product) after the ack.

    Attributes:
    -----------
    sequence : list
        The generated elements.
    elapsed : float or None
        Seconds between the first send and the ack, set by run().
    results : tuple or None
        Sink results, only when collect_results is set.
    """

    def __init__(self, manager, n: int, collect_results: bool = False):
        self.manager = manager
        self.rank = manager.rank
        self.next_rank = self.rank + 1
        self.sink_rank = manager.size - 1
        self.sequence = generate_sequence(n)
        self.collect_results = collect_results

        self.elapsed = None
        self.results = None

    def print_sequence(self):
        for i, value in enumerate(self.sequence):
            print(f"element[{i}] = {value}")

    def run(self) -> float:
        self.print_sequence()
        print(f"Timer resolution (s): {self.manager.wtick():.9f}")

        t0 = self.manager.wtime()

        for value in self.sequence:
            self.manager.send_message(PipelineMessage.element(value), self.next_rank)
        self.manager.send_message(PipelineMessage.sentinel(), self.next_rank)

        # Wait for the sink so the window includes the full pipeline drain
        self.manager.recv_ack(self.sink_rank)
        t1 = self.manager.wtime()

        self.elapsed = t1 - t0
        print(f"Elapsed time (s): {self.elapsed:.9f}")

        if self.collect_results:
            self.results = self.manager.recv_result(self.sink_rank)
        return self.elapsed
