import logging

from mpi4py import MPI

from matmul_errors import TransportFailure

logger = logging.getLogger(__name__)

# matches matrix_store.MATRIX_DTYPE
ROW_DATATYPE = MPI.INT64_T


class MpiTransport:
    """
    Blocking, tagged transfer of integer matrix rows between ranks of an MPI
    communicator.

    Every send() is paired with exactly one recv() of the same length on the
    destination. Ordering is only guaranteed per (source, destination, tag).
    """

    def __init__(self, comm=None):
        self.comm = MPI.COMM_WORLD if comm is None else comm

    @property
    def rank(self):
        return self.comm.Get_rank()

    @property
    def size(self):
        return self.comm.Get_size()

    def send(self, row, dest, tag):
        try:
            self.comm.Send([row, ROW_DATATYPE], dest=dest, tag=tag)
        except MPI.Exception as err:
            raise TransportFailure(
                f"Rank {self.rank}: send of {row.size} elements to rank {dest} (tag {tag}) failed: {err}"
            ) from err

    def recv(self, row, source, tag):
        status = MPI.Status()
        try:
            self.comm.Recv([row, ROW_DATATYPE], source=source, tag=tag, status=status)
        except MPI.Exception as err:
            raise TransportFailure(
                f"Rank {self.rank}: receive of {row.size} elements from rank {source} (tag {tag}) failed: {err}"
            ) from err
        count = status.Get_count(ROW_DATATYPE)
        if count != row.size:
            raise TransportFailure(
                f"Rank {self.rank}: expected {row.size} elements from rank {source} (tag {tag}), got {count}")

    def wtime(self):
        return MPI.Wtime()

    def abort(self, code=1):
        logger.error("Rank %d aborting the run with code %d", self.rank, code)
        self.comm.Abort(code)
