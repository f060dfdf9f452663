#!/usr/bin/env python3
"""
Grid (2-D) distributed matrix multiplication.

Usage: mpiexec -n <P> python matmul_2d.py <M_rows> <N_inner> <Q_cols>
P must be a perfect square and both M and Q divisible by sqrt(P).
"""
from matmul_mpi import cli
from partition import GRID


def main():
    cli(GRID)


if __name__ == "__main__":
    main()
