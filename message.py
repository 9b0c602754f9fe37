# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : message.py
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

# Number of int64 fields in one wire record: [value, sum, sub, mul, is_end]
MESSAGE_FIELDS = 5
WIRE_DTYPE = np.int64

# Accumulator defaults, also used by the sink to detect upstream results
SUM_DEFAULT = 0
SUB_DEFAULT = 0
MUL_DEFAULT = 1


class ProtocolError(RuntimeError):
    """A record on the data stream breaks the wire format or the stream order."""


class Channel(IntEnum):
    """
    Logical edges of the pipeline, used as MPI tags.

    DATA   : element and sentinel records flowing Source -> Sink.
    ACK    : single token from the Sink back to the Source.
    RESULT : final (sum, negated sum, product) sent to the Source for reporting.
    """
    DATA = 0
    ACK = 99
    RESULT = 100


@dataclass(frozen=True)
class PipelineMessage:
    """
    The record exchanged between neighbouring stages.

    Parameters:
    -----------
    value : int
        Element currently in transit (ignored when `is_end` is set).
    sum_acc : int
        Running sum written by the stage owning the sum operator.
    sub_acc : int
        Running negated sum written by the owner of the subtract operator.
    mul_acc : int
        Running product written by the owner of the multiply operator.
    is_end : bool
        Sentinel flag. Exactly one such record closes the stream.
    """
    value: int = 0
    sum_acc: int = SUM_DEFAULT
    sub_acc: int = SUB_DEFAULT
    mul_acc: int = MUL_DEFAULT
    is_end: bool = False

    @classmethod
    def element(cls, value: int) -> "PipelineMessage":
        """A fresh data record carrying `value` with default accumulators."""
        return cls(value=value)

    @classmethod
    def sentinel(cls) -> "PipelineMessage":
        return cls(is_end=True)


def empty_buffer(count: int = MESSAGE_FIELDS) -> np.ndarray:
    """Allocate a receive buffer of `count` wire integers."""
    return np.zeros(count, dtype=WIRE_DTYPE)


def encode(msg: PipelineMessage) -> np.ndarray:
    """Pack a message into its 5-field int64 wire layout."""
    return np.array([msg.value, msg.sum_acc, msg.sub_acc, msg.mul_acc,
                     1 if msg.is_end else 0], dtype=WIRE_DTYPE)


def decode(buf: np.ndarray) -> PipelineMessage:
    """Unpack a 5-field wire buffer into a PipelineMessage."""
    if buf.shape != (MESSAGE_FIELDS,):
        raise ProtocolError(
            f"Wire record must hold {MESSAGE_FIELDS} integers, got shape {buf.shape}"
        )
    flag = int(buf[4])
    if flag not in (0, 1):
        raise ProtocolError(f"Invalid sentinel flag on the wire: {flag}")
    return PipelineMessage(value=int(buf[0]),
                           sum_acc=int(buf[1]),
                           sub_acc=int(buf[2]),
                           mul_acc=int(buf[3]),
                           is_end=bool(flag))
