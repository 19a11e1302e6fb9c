from collections import deque
from typing import Deque, List, Optional

import numpy as np


class SignalWindow:
    """Most-recent-N buffer for one scalar signal, reported as a median.

    The median ignores a single-frame spike from a momentary occlusion that a
    mean would smear across the whole window.
    """

    def __init__(self, maxlen: int = 3):
        if maxlen <= 0:
            raise ValueError("maxlen must be positive")
        self._buffer: Deque[float] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._buffer)

    def push(self, value: float) -> float:
        self._buffer.append(float(value))
        return self.value()

    def value(self) -> float:
        if not self._buffer:
            return 0.0
        return float(np.median(self._buffer))

    def latest(self) -> Optional[float]:
        return self._buffer[-1] if self._buffer else None

    def values(self) -> List[float]:
        return list(self._buffer)

    def clear(self) -> None:
        self._buffer.clear()
