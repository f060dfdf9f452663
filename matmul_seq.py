#!/usr/bin/env python3
import os
import sys
import time

from matmul_errors import ConfigurationError, UsageError
from matrix_store import allocate_matrix, fill_matrix, print_sample, zero_matrix
from partition import parse_dimensions


def matrix_multiply_sequential(A, B):
    """
    Reference single-process product of integer matrices.

    Args:
        A: matrix of shape (m, n)
        B: matrix of shape (n, q)

    Returns:
        C: result matrix of shape (m, q)
    """
    m, n = A.shape
    if B.shape[0] != n:
        raise ValueError(f"Cannot multiply {A.shape} by {B.shape}")
    q = B.shape[1]
    C = zero_matrix(allocate_matrix(m, q))

    # Standard matrix multiplication algorithm: C[i,j] = sum(A[i,k] * B[k,j])
    for i in range(m):
        for j in range(q):
            for k in range(n):
                C[i, j] += A[i, k] * B[k, j]

    return C


def main(argv=None):
    if argv is None:
        argv = sys.argv

    # Check command line arguments
    if len(argv) != 4:
        prog = os.path.basename(argv[0]) if argv else "matmul_seq"
        print(f"Usage: {prog} <M_rows> <N_inner> <Q_cols>")
        return 1

    try:
        dims = parse_dimensions(argv[1:])
    except (UsageError, ConfigurationError) as e:
        print(e)
        return 1

    A = fill_matrix(allocate_matrix(dims.m, dims.n))
    B = fill_matrix(allocate_matrix(dims.n, dims.q))

    # Time the multiplication
    start_time = time.perf_counter()
    C = matrix_multiply_sequential(A, B)
    execution_time = time.perf_counter() - start_time

    print(f"Serial Matrix Multiplication completed in {execution_time:.4f} seconds.")
    print("First few elements of matrix C:")
    print_sample(C)
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
