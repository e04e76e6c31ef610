import threading
from typing import Callable, Optional

ProgressCallback = Callable[[int], None]


class MonotonicProgress:
    """
    forwards integer percentages to a callback without ever going backwards.

    strict mode drops repeats and regressions (upload progress must strictly
    increase); otherwise a regression is reported again as the last value.
    once closed nothing else is emitted.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None, strict: bool = False):
        self.callback = callback
        self.strict = strict
        self.value: Optional[int] = None
        self.closed = False
        self._lock = threading.Lock()

    def __call__(self, percent) -> Optional[int]:
        with self._lock:
            if self.closed:
                return self.value
            percent = max(0, min(100, int(percent)))
            if self.value is not None and percent <= self.value:
                if self.strict:
                    return self.value
                percent = self.value
            self.value = percent
        if self.callback:
            self.callback(percent)
        return percent

    def close(self):
        with self._lock:
            self.closed = True
