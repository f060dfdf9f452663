"""
Scatter / compute / gather choreography shared by both decomposition schemes.

Every rank runs the same three phases on a role:

    Coordinator  rank 0, owns the global A, B, C plus its own local blocks
    Worker       any other rank, owns only its local blocks

Rows travel one message each, tagged by the matrix they belong to, so the
A and B transfers to a rank can never be confused.
"""
import logging
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from matmul_errors import ConfigurationError
from matrix_store import allocate_matrix, fill_matrix, zero_matrix
from partition import COORDINATOR, PartitionPlan, Topology

logger = logging.getLogger(__name__)


class Tag(IntEnum):
    A_ROW = 0
    B_ROW = 1
    C_ROW = 2


@dataclass
class LocalBlocks:
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray

    @classmethod
    def allocate(cls, block):
        return cls(
            a=allocate_matrix(*block.a_shape),
            b=allocate_matrix(*block.b_shape),
            c=allocate_matrix(*block.c_shape),
        )


@dataclass
class GlobalMatrices:
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray

    @classmethod
    def create(cls, dims, rng=None):
        """Random A and B, zeroed C."""
        return cls(
            a=fill_matrix(allocate_matrix(dims.m, dims.n), rng),
            b=fill_matrix(allocate_matrix(dims.n, dims.q), rng),
            c=zero_matrix(allocate_matrix(dims.m, dims.q)),
        )


@dataclass
class Coordinator:
    plan: PartitionPlan
    matrices: GlobalMatrices
    local: LocalBlocks
    rank: int = COORDINATOR

    @property
    def block(self):
        return self.plan.block(self.rank)


@dataclass
class Worker:
    plan: PartitionPlan
    rank: int
    local: LocalBlocks

    @property
    def block(self):
        return self.plan.block(self.rank)



def assign_role(plan, topology, matrices=None, rng=None):
    """
    Allocate this rank's local blocks and, on the coordinator, the global
    matrices. Passing `matrices` lets the coordinator multiply given inputs
    instead of random ones.
    """
    local = LocalBlocks.allocate(plan.block(topology.rank))
    if not topology.is_coordinator:
        return Worker(plan=plan, rank=topology.rank, local=local)

    if matrices is None:
        matrices = GlobalMatrices.create(plan.dims, rng)
    else:
        d = plan.dims
        if matrices.a.shape != (d.m, d.n) or matrices.b.shape != (d.n, d.q) or matrices.c.shape != (d.m, d.q):
            raise ConfigurationError(
                f"Global matrices of shapes {matrices.a.shape}, {matrices.b.shape}, {matrices.c.shape} "
                f"do not match {plan!r}")
    return Coordinator(plan=plan, matrices=matrices, local=local)


def scatter(transport, role):
    """Distribution phase: every rank ends up holding its A-block and B-block."""
    if isinstance(role, Coordinator):
        A, B = role.matrices.a, role.matrices.b
        for rank in range(COORDINATOR + 1, role.plan.size):
            block = role.plan.block(rank)
            logger.debug("Sending A rows %s and B columns %s to rank %d",
                         block.row_slice, block.col_slice, rank)
            for i in range(block.rows):
                transport.send(A[block.row_offset + i], dest=rank, tag=Tag.A_ROW)
            for i in range(block.inner):
                transport.send(B[i, block.col_slice], dest=rank, tag=Tag.B_ROW)

        # own block by local copy
        block = role.block
        role.local.a[...] = A[block.row_slice]
        role.local.b[...] = B[:, block.col_slice]
    else:
        local = role.local
        for i in range(local.a.shape[0]):
            transport.recv(local.a[i], source=COORDINATOR, tag=Tag.A_ROW)
        for i in range(local.b.shape[0]):
            transport.recv(local.b[i], source=COORDINATOR, tag=Tag.B_ROW)
        logger.debug("Rank %d received A-block %s and B-block %s",
                     role.rank, local.a.shape, local.b.shape)


def local_multiply(a, b, c):
    """
    Accumulate a x b into c with the standard triple loop.

    c must be zeroed beforehand for the result to be the plain product.
    """
    rows, inner = a.shape
    if b.shape[0] != inner or c.shape != (rows, b.shape[1]):
        raise ValueError(f"Cannot multiply {a.shape} by {b.shape} into {c.shape}")
    cols = b.shape[1]

    for i in range(rows):
        for j in range(cols):
            for k in range(inner):
                c[i, j] += a[i, k] * b[k, j]
    return c


def compute(transport, role):
    """Local multiply on this rank's blocks. Returns the elapsed time of the multiply only."""
    local = role.local
    zero_matrix(local.c)
    start = transport.wtime()
    local_multiply(local.a, local.b, local.c)
    elapsed = transport.wtime() - start
    logger.debug("Rank %d computed C-block %s in %.4f s", role.rank, local.c.shape, elapsed)
    return elapsed


def gather(transport, role):
    """Collection phase: the coordinator's global C is fully populated afterwards."""
    if isinstance(role, Coordinator):
        C = role.matrices.c
        block = role.block
        C[block.row_slice, block.col_slice] = role.local.c

        for rank in range(COORDINATOR + 1, role.plan.size):
            block = role.plan.block(rank)
            for i in range(block.rows):
                transport.recv(C[block.row_offset + i, block.col_slice], source=rank, tag=Tag.C_ROW)
            logger.debug("Placed C-block of rank %d at (%d, %d)",
                         rank, block.row_offset, block.col_offset)
    else:
        for row in role.local.c:
            transport.send(row, dest=COORDINATOR, tag=Tag.C_ROW)


@dataclass
class RunResult:
    role: "Coordinator | Worker"
    elapsed: float

    @property
    def result(self):
        if isinstance(self.role, Coordinator):
            return self.role.matrices.c
        return None


def run_distributed(transport, plan, matrices=None, rng=None):
    """Run scatter, compute and gather for this rank and return its RunResult."""
    if plan.size != transport.size:
        raise ConfigurationError(
            f"{plan!r} was made for {plan.size} processes but the run has {transport.size}")
    topology = Topology(transport.rank, transport.size)

    role = assign_role(plan, topology, matrices=matrices, rng=rng)
    scatter(transport, role)
    elapsed = compute(transport, role)
    gather(transport, role)
    return RunResult(role=role, elapsed=elapsed)
