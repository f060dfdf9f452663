class MatmulError(Exception):
    """Base class for every error raised by the matrix multiplication programs."""


class UsageError(MatmulError):
    """Wrong number of command line arguments, or an argument that is not an integer."""


class ConfigurationError(MatmulError):
    """Dimensions incompatible with the decomposition scheme or the process count."""


class TransportFailure(MatmulError):
    """A point-to-point transfer failed. Fatal for the whole run."""
