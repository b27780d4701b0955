import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from lazyseq import END


class CountingPull:
    """Pull function over a fixed list that records how often it was called"""

    def __init__(self, items):
        self.items = list(items)
        self.calls = 0
        self._pos = 0

    def __call__(self):
        self.calls += 1
        if self._pos >= len(self.items):
            return END
        value = self.items[self._pos]
        self._pos += 1
        return value


class Recorder:
    """Thread-safe sink for (value, index) pairs from parallel_for_each"""

    def __init__(self):
        self.calls = []
        self.threads = set()
        self._lock = threading.Lock()

    def __call__(self, value, index):
        with self._lock:
            self.calls.append((value, index))
            self.threads.add(threading.get_ident())


@pytest.fixture
def counting_pull():
    return CountingPull


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def sample_data():
    return [10, 20, 30, 40, 50]
