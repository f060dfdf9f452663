#!/usr/bin/env python3
import logging
import os
import sys

from mpi4py import MPI

from matmul_errors import ConfigurationError, TransportFailure, UsageError
from matrix_store import print_sample
from partition import GRID, ROW_STRIP, COORDINATOR, make_plan, parse_dimensions
from protocol import run_distributed
from transport import MpiTransport

TITLES = {
    ROW_STRIP: "MPI 1D Matrix Multiplication (Rectangular)",
    GRID: "2D MPI",
}

logger = logging.getLogger(__name__)


def main(scheme, argv=None, comm=None):
    """
    Run one distributed multiplication with the given decomposition scheme.

    argv follows sys.argv: program name, then M N Q. Returns the exit code.
    """
    # Initialize MPI environment
    if comm is None:
        comm = MPI.COMM_WORLD
    rank = comm.Get_rank()
    size = comm.Get_size()
    if argv is None:
        argv = sys.argv

    logging.basicConfig(
        level=logging.WARNING,
        format=f"[rank {rank}] %(levelname)s %(name)s: %(message)s",
    )

    # Check command line arguments
    if len(argv) != 4:
        if rank == COORDINATOR:
            prog = os.path.basename(argv[0]) if argv else "matmul"
            print(f"Usage: {prog} <M_rows> <N_inner> <Q_cols>")
        return 1

    # Every rank validates the same input and reaches the same verdict,
    # so a bad configuration stops the run before any message is sent
    try:
        dims = parse_dimensions(argv[1:])
        plan = make_plan(scheme, dims, size)
    except (UsageError, ConfigurationError) as e:
        if rank == COORDINATOR:
            print(e)
        return 1

    transport = MpiTransport(comm)
    try:
        outcome = run_distributed(transport, plan)
    except TransportFailure as e:
        logger.error("%s", e)
        transport.abort(1)
        return 1

    if rank == COORDINATOR:
        print(f"{TITLES[plan.scheme]} completed in {outcome.elapsed:.4f} seconds.")
        print("First few elements of matrix C:")
        print_sample(outcome.result)

    return 0


def cli(scheme):
    code = main(scheme)
    MPI.Finalize()
    sys.exit(code)
