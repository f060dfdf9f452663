import math
from dataclasses import dataclass

from matmul_errors import ConfigurationError, UsageError

ROW_STRIP = "row-strip"
GRID = "grid"

COORDINATOR = 0


@dataclass(frozen=True)
class Dimensions:
    """
    Global problem size for C = A x B.

    m: rows of A and C
    n: columns of A, rows of B (inner dimension)
    q: columns of B and C
    """
    m: int
    n: int
    q: int

    def __post_init__(self):
        if self.m <= 0 or self.n <= 0 or self.q <= 0:
            raise ConfigurationError("Invalid matrix dimensions.")


def parse_dimensions(args):
    """
    Turn the three positional command line arguments into Dimensions.

    Raises UsageError for a wrong argument count or a non-integer value and
    ConfigurationError for non-positive values.
    """
    if len(args) != 3:
        raise UsageError(f"Expected 3 arguments, got {len(args)}")
    try:
        m, n, q = (int(arg) for arg in args)
    except ValueError:
        raise UsageError(f"Error: matrix dimensions must be integers, got {' '.join(args)}")
    return Dimensions(m, n, q)


@dataclass(frozen=True)
class Topology:
    rank: int
    size: int

    def __post_init__(self):
        if self.size < 1:
            raise ConfigurationError(f"Process count must be at least 1, got {self.size}")
        if not 0 <= self.rank < self.size:
            raise ConfigurationError(f"Rank {self.rank} outside [0, {self.size})")

    @property
    def is_coordinator(self):
        return self.rank == COORDINATOR


@dataclass(frozen=True)
class Block:
    """
    The share of the product one rank computes.

    The C-block is rows x cols at (row_offset, col_offset) of the global C.
    It needs global A rows [row_offset, row_offset + rows) with every one of
    the `inner` columns, and global B columns [col_offset, col_offset + cols)
    of every row.
    """
    rank: int
    row_offset: int
    col_offset: int
    rows: int
    cols: int
    inner: int

    @property
    def a_shape(self):
        return (self.rows, self.inner)

    @property
    def b_shape(self):
        return (self.inner, self.cols)

    @property
    def c_shape(self):
        return (self.rows, self.cols)

    @property
    def row_slice(self):
        return slice(self.row_offset, self.row_offset + self.rows)

    @property
    def col_slice(self):
        return slice(self.col_offset, self.col_offset + self.cols)


class PartitionPlan:
    """Assignment of C-blocks to ranks for one decomposition scheme."""

    scheme = None

    def __init__(self, dims, size):
        if size < 1:
            raise ConfigurationError(f"Process count must be at least 1, got {size}")
        self.dims = dims
        self.size = size
        self._validate()

    def _validate(self):
        raise NotImplementedError

    def _block(self, rank):
        raise NotImplementedError

    def block(self, rank):
        if not 0 <= rank < self.size:
            raise ValueError(f"Rank {rank} outside [0, {self.size})")
        return self._block(rank)

    def blocks(self):
        return [self._block(rank) for rank in range(self.size)]

    def __repr__(self):
        d = self.dims
        return f"{type(self).__name__}(m={d.m}, n={d.n}, q={d.q}, size={self.size})"


class RowStripPlan(PartitionPlan):
    """Each rank owns m / P contiguous rows of C and needs the whole of B."""

    scheme = ROW_STRIP

    def _validate(self):
        if self.dims.m % self.size != 0:
            raise ConfigurationError(
                f"Error: Rows ({self.dims.m}) must be divisible by processes ({self.size})")
        self.rows_per_proc = self.dims.m // self.size

    def _block(self, rank):
        return Block(
            rank=rank,
            row_offset=rank * self.rows_per_proc,
            col_offset=0,
            rows=self.rows_per_proc,
            cols=self.dims.q,
            inner=self.dims.n,
        )


class GridPlan(PartitionPlan):
    """
    Ranks form a sqrt(P) x sqrt(P) grid in row-major order; rank p owns the
    (m / g) x (q / g) block of C at grid position divmod(p, g).
    """

    scheme = GRID

    def _validate(self):
        g = math.isqrt(self.size)
        if g * g != self.size or self.dims.m % g != 0 or self.dims.q % g != 0:
            raise ConfigurationError(
                "Processes must be perfect square, and M, Q divisible by sqrt(P).")
        self.grid = g
        self.block_rows = self.dims.m // g
        self.block_cols = self.dims.q // g

    def grid_position(self, rank):
        return divmod(rank, self.grid)

    def _block(self, rank):
        row_block, col_block = self.grid_position(rank)
        return Block(
            rank=rank,
            row_offset=row_block * self.block_rows,
            col_offset=col_block * self.block_cols,
            rows=self.block_rows,
            cols=self.block_cols,
            inner=self.dims.n,
        )


SCHEMES = {
    ROW_STRIP: RowStripPlan,
    GRID: GridPlan,
}


def make_plan(scheme, dims, size):
    try:
        plan_cls = SCHEMES[scheme]
    except KeyError:
        raise ConfigurationError(
            f"Unknown decomposition scheme {scheme!r}, expected one of {', '.join(SCHEMES)}")
    return plan_cls(dims, size)
