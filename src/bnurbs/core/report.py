from functools import wraps
import logging
import threading
import time

# Nesting depth of reported calls, per thread.
_nesting = threading.local()


def report(fn):
    """
    Log duration of every call of the decorated function.
    Nested reported calls are indented.
    """
    @wraps(fn)
    def do_report(*args, **kwargs):
        level = getattr(_nesting, 'level', 0)
        _nesting.level = level + 1
        init_time = time.perf_counter()
        try:
            return fn(*args, **kwargs)
        finally:
            duration = time.perf_counter() - init_time
            _nesting.level = level
            indent = (level * 2) * " "
            logging.info(f"{indent}DONE {fn.__module__}.{fn.__qualname__} @ {duration:.4f} s")
    return do_report
