# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : mpiMGR.py
import numpy as np
from mpi4py import MPI

from message import Channel, decode, empty_buffer, encode, WIRE_DTYPE


class TransportError(RuntimeError):
    """A point-to-point send or receive could not complete."""

    def __init__(self, rank: int, operation: str, peer: int, cause: Exception):
        super().__init__(f"{operation} with rank {peer}: {cause}")
        self.rank = rank
        self.operation = operation
        self.peer = peer


class MPIManager:
    """
    A utility class to handle the point-to-point MPI traffic of the reduction
    pipeline using `mpi4py`.

    Every record travels as a fixed-width int64 numpy buffer over the
    upper-case (buffer) API, on the tag of its logical Channel.

    Methods:
    --------
    send_message(msg, dest) / recv_message(source)
        Data records on Channel.DATA.

    send_ack(dest) / recv_ack(source)
        Single-integer acknowledgment on Channel.ACK.

    send_result(results, dest) / recv_result(source)
        (sum, negated sum, product) on Channel.RESULT.

    wtime() / wtick()
        MPI wall clock and its resolution.

    abort(code)
        Kill the whole process group.
    """

    def __init__(self, comm=None):
        # Initialize the MPI communicator
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        # Get the rank (ID) of the current process
        self.rank = self.comm.Get_rank()
        # Get the total number of processes
        self.size = self.comm.Get_size()

    def _send(self, buf: np.ndarray, dest: int, channel: Channel):
        try:
            self.comm.Send([buf, MPI.INT64_T], dest=dest, tag=int(channel))
        except MPI.Exception as exc:
            raise TransportError(self.rank, f"send on {channel.name}", dest, exc) from exc

    def _recv(self, buf: np.ndarray, source: int, channel: Channel) -> np.ndarray:
        try:
            self.comm.Recv([buf, MPI.INT64_T], source=source, tag=int(channel))
        except MPI.Exception as exc:
            raise TransportError(self.rank, f"recv on {channel.name}", source, exc) from exc
        return buf

    def send_message(self, msg, dest: int):
        self._send(encode(msg), dest, Channel.DATA)

    def recv_message(self, source: int):
        return decode(self._recv(empty_buffer(), source, Channel.DATA))

    def send_ack(self, dest: int, token: int = 1):
        self._send(np.array([token], dtype=WIRE_DTYPE), dest, Channel.ACK)

    def recv_ack(self, source: int) -> int:
        return int(self._recv(empty_buffer(1), source, Channel.ACK)[0])

    def send_result(self, results, dest: int):
        self._send(np.array(results, dtype=WIRE_DTYPE), dest, Channel.RESULT)

    def recv_result(self, source: int) -> tuple:
        buf = self._recv(empty_buffer(3), source, Channel.RESULT)
        return tuple(int(v) for v in buf)

    def wtime(self) -> float:
        return MPI.Wtime()

    def wtick(self) -> float:
        return MPI.Wtick()

    def abort(self, code: int):
        self.comm.Abort(code)
