import numpy as np

# int64 so the accumulation never overflows for the value ranges we generate
MATRIX_DTYPE = np.int64

FILL_LOW = 0
FILL_HIGH = 10  # exclusive

SAMPLE_ROWS = 2
SAMPLE_COLS = 10


def allocate_matrix(rows, cols):
    """
    Allocate an uninitialised rows x cols integer matrix.

    The buffer is C-contiguous so every row mat[i] can be sent or received
    as a single message.
    """
    if rows < 0 or cols < 0:
        raise ValueError(f"Invalid matrix shape ({rows}, {cols})")
    return np.empty((rows, cols), dtype=MATRIX_DTYPE)


def fill_matrix(mat, rng=None):
    """Fill mat in place with random single-digit values and return it."""
    if rng is None:
        rng = np.random.default_rng()
    mat[...] = rng.integers(FILL_LOW, FILL_HIGH, size=mat.shape, dtype=MATRIX_DTYPE)
    return mat


def zero_matrix(mat):
    mat.fill(0)
    return mat


def sample_matrix(mat, rows=SAMPLE_ROWS, cols=SAMPLE_COLS):
    """Top-left min(rows, R) x min(cols, C) corner of mat, as a view."""
    return mat[:min(rows, mat.shape[0]), :min(cols, mat.shape[1])]


def format_sample(mat, rows=SAMPLE_ROWS, cols=SAMPLE_COLS):
    sample = sample_matrix(mat, rows, cols)
    return "\n".join(" ".join(str(int(value)) for value in row) for row in sample)


def print_sample(mat, rows=SAMPLE_ROWS, cols=SAMPLE_COLS):
    text = format_sample(mat, rows, cols)
    if text:
        print(text)
