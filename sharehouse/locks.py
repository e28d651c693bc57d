"""Per shared space writer serialization inside one process."""
from __future__ import annotations

import threading
from typing import Dict


class SpaceLockRegistry:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def for_space(self, shared_space_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(shared_space_id)
            if lock is None:
                lock = self._locks[shared_space_id] = threading.Lock()
            return lock


space_locks = SpaceLockRegistry()
