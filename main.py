# ------------------------------------------------------------
# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : main.py
# Description : Streams the sequence 1..N through a linear chain of MPI
#               ranks. Each worker rank owns some of the sum / negated sum /
#               product operators, updates the running accumulators carried
#               by every record and forwards it. The last rank prints the
#               results and acknowledges rank 0, which reports the time the
#               whole stream took to drain.
#
# Usage       : mpiexec -n <P> python main.py [--n N] [--verbose]
#                        [--csv runs.csv [--plot timings.png]]
#               P >= 2 (rank 0 is the source, rank P-1 the sink).
#
# Dependencies:
#       - mpi4py
#       - numpy
#       - pandas, matplotlib (loaded on rank 0 only with --csv / --plot)
#
# Exit codes  : 1 topology/argument error, 2 transport failure or a
#               broken record stream, 3 allocation failure. Any of them
#               aborts every rank.
# ------------------------------------------------------------
import argparse
import sys

from message import ProtocolError
from mpiMGR import MPIManager, TransportError
from pipeline import SOURCE_RANK, Topology, TopologyError, run_rank

DEFAULT_SEQUENCE_LENGTH = 10
# 20! is the largest factorial that fits the int64 wire field
MAX_SEQUENCE_LENGTH = 20

EXIT_TOPOLOGY = 1
EXIT_TRANSPORT = 2
EXIT_ALLOCATION = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="MPI pipeline computing sum, negated sum and product of 1..N")
    parser.add_argument('--n', type=int, default=DEFAULT_SEQUENCE_LENGTH,
                        help=f"sequence length, 0..{MAX_SEQUENCE_LENGTH} (default: %(default)s)")
    parser.add_argument('--verbose', '-v', action='store_true',
                        help="print role assignment and per-stage state transitions")
    parser.add_argument('--csv', type=str, default=None,
                        help="append this run's results and timing to a CSV file")
    parser.add_argument('--plot', type=str, default=None,
                        help="plot elapsed time per process count from --csv into a PNG")
    return parser


def validate_length(n: int):
    if not 0 <= n <= MAX_SEQUENCE_LENGTH:
        raise ValueError(
            f"Sequence length must be within 0..{MAX_SEQUENCE_LENGTH}, got {n}"
        )


def fail(mpi_mgr: MPIManager, stage: str, exc: BaseException, code: int):
    """Report a fatal error for this rank and take the whole process group down."""
    print(f"[Rank {mpi_mgr.rank}] {stage} failed: {exc}", file=sys.stderr, flush=True)
    mpi_mgr.abort(code)
    sys.exit(code)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.plot and not args.csv:
        parser.error("--plot requires --csv")

    mpi_mgr = MPIManager()

    # Checked before any communication
    try:
        Topology(mpi_mgr.size)
    except TopologyError as exc:
        fail(mpi_mgr, "topology check", exc, EXIT_TOPOLOGY)
    try:
        validate_length(args.n)
    except ValueError as exc:
        fail(mpi_mgr, "setup", exc, EXIT_TOPOLOGY)

    try:
        actor = run_rank(mpi_mgr, args.n, verbose=args.verbose,
                         collect_results=args.csv is not None)
    except TransportError as exc:
        fail(mpi_mgr, "transport", exc, EXIT_TRANSPORT)
    except ProtocolError as exc:
        fail(mpi_mgr, "stream protocol", exc, EXIT_TRANSPORT)
    except RuntimeError as exc:
        fail(mpi_mgr, "stream", exc, EXIT_TRANSPORT)
    except MemoryError as exc:
        fail(mpi_mgr, "buffer allocation", exc, EXIT_ALLOCATION)

    # Only the source writes the run log
    if mpi_mgr.rank == SOURCE_RANK and args.csv:
        import report

        record = report.make_record(mpi_mgr.size, args.n, actor.results, actor.elapsed)
        report.append_run_record(args.csv, record)
        if args.plot:
            report.plot_timings(args.csv, args.plot)
            print(f"Timing plot saved to {args.plot}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
