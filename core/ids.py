import threading
import time


_lock = threading.Lock()
_last_issued_ns = 0


def new_element_id(prefix: str = "section") -> str:
    """Time-based id that never repeats within this process.

    Two calls inside the same clock tick get consecutive nanosecond stamps,
    so ids stay unique even on coarse clocks.
    """
    global _last_issued_ns
    with _lock:
        stamp = time.time_ns()
        if stamp <= _last_issued_ns:
            stamp = _last_issued_ns + 1
        _last_issued_ns = stamp
    return f"{prefix}-{stamp}"
