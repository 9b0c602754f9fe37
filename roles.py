# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : roles.py
from enum import Enum


class Op(Enum):
    """Reduction operators a stage can own."""
    SUM = "sum"
    SUB = "sub"
    MUL = "mul"


NO_OPS = frozenset()
ALL_OPS = frozenset({Op.SUM, Op.SUB, Op.MUL})


def assign_roles(stage_index: int, worker_count: int) -> frozenset:
    """
    Return the operators owned by worker `stage_index` out of `worker_count`.

    Workers are the non-source ranks, counted from 0. The split is fixed:
        - 1 worker  : it owns every operator.
        - 2 workers : worker 0 sums, worker 1 subtracts and multiplies.
        - 3 or more : worker 0 sums, worker 1 subtracts, worker 2 multiplies,
                      every later worker only forwards.

    Parameters:
    -----------
    stage_index : int
        0-based position among the workers.
    worker_count : int
        Number of workers in the pipeline (process count - 1).

    Returns:
    --------
    frozenset
        Subset of {Op.SUM, Op.SUB, Op.MUL}.
    """
    if worker_count < 1:
        raise ValueError(f"Pipeline needs at least one worker, got {worker_count}")
    if not 0 <= stage_index < worker_count:
        raise ValueError(
            f"Stage index {stage_index} outside 0..{worker_count - 1}"
        )

    if worker_count == 1:
        return ALL_OPS
    if worker_count == 2:
        return frozenset({Op.SUM}) if stage_index == 0 else frozenset({Op.SUB, Op.MUL})

    fixed = (Op.SUM, Op.SUB, Op.MUL)
    if stage_index < len(fixed):
        return frozenset({fixed[stage_index]})
    # idx >= 3 only forwards
    return NO_OPS


def roles_for_rank(rank: int, size: int) -> frozenset:
    """Operators owned by MPI `rank` in a pipeline of `size` processes. The source owns none."""
    if rank == 0:
        return NO_OPS
    return assign_roles(rank - 1, size - 1)


def describe(ops: frozenset) -> str:
    """Human readable form, e.g. 'sub+mul' or 'forward'."""
    if not ops:
        return "forward"
    return "+".join(op.value for op in Op if op in ops)
