import re

import numpy as np
import pytest

from matmul_seq import main, matrix_multiply_sequential
from matrix_store import MATRIX_DTYPE, allocate_matrix, fill_matrix


def test_known_product():
    A = np.array([[1, 2], [3, 4], [5, 6]], dtype=MATRIX_DTYPE)
    B = np.array([[7, 8, 9], [0, 1, 2]], dtype=MATRIX_DTYPE)
    expected = [[7, 10, 13], [21, 28, 35], [35, 46, 57]]
    assert matrix_multiply_sequential(A, B).tolist() == expected


def test_matches_numpy(rng):
    A = fill_matrix(allocate_matrix(7, 4), rng)
    B = fill_matrix(allocate_matrix(4, 9), rng)
    np.testing.assert_array_equal(matrix_multiply_sequential(A, B), A @ B)


def test_rejects_non_conformable():
    with pytest.raises(ValueError):
        matrix_multiply_sequential(allocate_matrix(2, 3), allocate_matrix(2, 3))


def test_cli_usage(capsys):
    assert main(["matmul_seq.py", "1", "2"]) == 1
    assert capsys.readouterr().out == "Usage: matmul_seq.py <M_rows> <N_inner> <Q_cols>\n"


def test_cli_invalid_dimensions(capsys):
    assert main(["matmul_seq.py", "-1", "2", "3"]) == 1
    assert capsys.readouterr().out == "Invalid matrix dimensions.\n"


def test_cli_report(capsys):
    assert main(["matmul_seq.py", "1", "3", "4"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert re.fullmatch(r"Serial Matrix Multiplication completed in \d+\.\d{4} seconds\.", lines[0])
    assert lines[1] == "First few elements of matrix C:"
    assert len(lines) == 3
    assert len(lines[2].split(" ")) == 4
