#!/usr/bin/env python3
"""
Row-strip (1-D) distributed matrix multiplication.

Usage: mpiexec -n <P> python matmul_1d.py <M_rows> <N_inner> <Q_cols>
M must be divisible by P.
"""
from matmul_mpi import cli
from partition import ROW_STRIP


def main():
    cli(ROW_STRIP)


if __name__ == "__main__":
    main()
