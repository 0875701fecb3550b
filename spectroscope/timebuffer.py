"""Circular buffer of raw ADC words for the time-domain plot."""

from __future__ import annotations

import threading
from typing import Iterable

import numpy as np


class TimeBuffer:
    """Thread-safe ring of the most recent ADC samples.

    Storage is allocated lazily by :meth:`start` or explicitly by :meth:`resize`.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"buffer size must be positive, got {size}")
        self._size = size
        self._buffer: np.ndarray | None = None
        self._write_index = 0
        self._collected = 0
        self._lock = threading.Lock()
        self._resizing = threading.Event()
        self._started = False

    @property
    def size(self) -> int:
        """Capacity of the ring in samples."""
        return self._size

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> bool:
        """Allocate storage if none exists yet; return False if already started."""
        if self._started:
            return False
        with self._lock:
            needs_buffer = self._buffer is None
        if needs_buffer:
            self.resize(self._size)
        self._started = True
        return True

    def resize(self, size: int) -> None:
        """Replace the storage with a zeroed ring of ``size`` samples."""
        if size < 1:
            raise ValueError(f"buffer size must be positive, got {size}")
        self._resizing.set()
        try:
            with self._lock:
                self._buffer = np.zeros(size, dtype=np.uint16)
                self._size = size
                self._collected = 0
                self._write_index = 0
        finally:
            self._resizing.clear()

    def sample_count(self) -> int:
        """Number of valid samples held, at most the ring size."""
        with self._lock:
            return self._collected

    def snapshot(self, count: int) -> np.ndarray:
        """Copy up to ``count`` samples out of the ring.

        Without storage, ``count`` zeros are returned.
        """
        if count <= 0:
            return np.zeros(0, dtype=np.uint16)
        with self._lock:
            if self._buffer is None:
                return np.zeros(count, dtype=np.uint16)
            n = min(count, self._size)
            start = (self._collected - n + self._size) % self._size
            positions = (start + np.arange(n)) % self._size
            return self._buffer[positions].copy()

    def feed(self, data: Iterable[int]) -> bool:
        """Append samples; return False if they were dropped."""
        if self._resizing.is_set():
            return False
        samples = np.asarray(data).astype(np.uint16, copy=False).ravel()
        with self._lock:
            if self._buffer is None:
                return False
            n = len(samples)
            if n == 0:
                return True
            tail = samples[-self._size:]
            first = (self._write_index + n - len(tail)) % self._size
            positions = (first + np.arange(len(tail))) % self._size
            self._buffer[positions] = tail
            self._write_index = (self._write_index + n) % self._size
            self._collected = min(self._collected + n, self._size)
        return True