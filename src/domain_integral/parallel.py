"""Element partitioning and the global sum of partial integrals.

The communicator is duck-typed on ``allreduce(value)`` with a sum default,
which is what an ``mpi4py`` communicator (``MPI.COMM_WORLD``) provides. The
:class:`LocalCommunicator` is the single-process case.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np


class LocalCommunicator:
    """One rank holding the whole mesh: the reduction is the identity."""

    rank = 0
    size = 1

    def allreduce(self, value, op=None):
        return value


def gather_sum(value: float, comm=None) -> float:
    """Blocking sum of ``value`` over every rank of ``comm``."""
    if comm is None:
        comm = LocalCommunicator()
    return float(comm.allreduce(float(value)))


def partition_elements(
    n_elements: int,
    n_parts: int,
    order: Optional[Sequence[int]] = None,
) -> List[np.ndarray]:
    """Split element ids into ``n_parts`` disjoint contiguous blocks.

    ``order`` optionally permutes the element ids before splitting.
    """
    if int(n_parts) < 1:
        raise ValueError(f"n_parts must be >= 1, got {n_parts}")
    ids = np.arange(int(n_elements), dtype=int) if order is None else np.asarray(order, dtype=int)
    return [np.asarray(p, dtype=int) for p in np.array_split(ids, int(n_parts))]


def rank_elements(n_elements: int, comm=None) -> np.ndarray:
    """Elements owned by this rank of ``comm`` (block partition)."""
    if comm is None:
        comm = LocalCommunicator()
    return partition_elements(n_elements, int(comm.size))[int(comm.rank)]
