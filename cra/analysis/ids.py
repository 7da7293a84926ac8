"""Deterministic finding ids, scoped to one analysis run."""

import itertools
import threading


class IdSequence:
    """Monotonic per-prefix counters: ``M-001``, ``M-002``, ``H-001`` ..."""

    def __init__(self) -> None:
        self._counters: dict[str, itertools.count] = {}
        self._lock = threading.Lock()

    def next(self, prefix: str) -> str:
        with self._lock:
            counter = self._counters.setdefault(prefix, itertools.count(1))
            return f"{prefix}-{next(counter):03d}"
