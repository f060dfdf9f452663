import queue
import threading
import time

import mpi4py
import numpy as np
import pytest

# The test process never joins an MPI job itself, otherwise every mpiexec
# launched from it exits immediately.
mpi4py.rc.initialize = False
mpi4py.rc.finalize = False

from matmul_errors import TransportFailure  # noqa: E402

RECV_TIMEOUT = 10


class QueueNetwork:
    """
    In-memory stand-in for an MPI communicator: one FIFO per
    (source, dest, tag), blocking receives, and a log of every send.
    """

    def __init__(self, size):
        self.size = size
        self.sent = []
        self._queues = {}
        self._lock = threading.Lock()

    def channel(self, source, dest, tag):
        with self._lock:
            key = (source, dest, int(tag))
            if key not in self._queues:
                self._queues[key] = queue.Queue()
            return self._queues[key]

    def endpoint(self, rank):
        return QueueTransport(self, rank)


class QueueTransport:
    def __init__(self, network, rank):
        self.network = network
        self.rank = rank
        self.size = network.size

    def send(self, row, dest, tag):
        if dest == self.rank:
            raise TransportFailure(f"Rank {self.rank} sent a message to itself")
        with self.network._lock:
            self.network.sent.append((self.rank, dest, int(tag), row.size))
        self.network.channel(self.rank, dest, tag).put(np.array(row, copy=True))

    def recv(self, row, source, tag):
        try:
            payload = self.network.channel(source, self.rank, tag).get(timeout=RECV_TIMEOUT)
        except queue.Empty:
            raise TransportFailure(f"Rank {self.rank}: nothing from rank {source} (tag {tag})")
        if payload.size != row.size:
            raise TransportFailure(
                f"Rank {self.rank}: expected {row.size} elements from rank {source}, got {payload.size}")
        row[...] = payload

    def wtime(self):
        return time.perf_counter()


def run_ranks(network, target):
    """Run target(transport) once per rank, each in its own thread."""
    results = [None] * network.size
    errors = [None] * network.size

    def worker(rank):
        try:
            results[rank] = target(network.endpoint(rank))
        except Exception as exc:
            errors[rank] = exc

    threads = [threading.Thread(target=worker, args=(rank,)) for rank in range(network.size)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=RECV_TIMEOUT * 3)
    return results, errors


@pytest.fixture
def spmd():
    """Returns run(size, target) -> (network, results, errors)."""
    def run(size, target):
        network = QueueNetwork(size)
        results, errors = run_ranks(network, target)
        return network, results, errors
    return run


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
