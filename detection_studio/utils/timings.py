import time
from contextlib import contextmanager


@contextmanager
def measure_ms():
    """Yield a callable returning wall-clock milliseconds since entry."""
    start = time.perf_counter()
    yield lambda: (time.perf_counter() - start) * 1000.0
