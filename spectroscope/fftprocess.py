"""Overlapping-frame spectrum analysis of a stream of ADC samples."""

from __future__ import annotations

import queue
import threading
from typing import Callable, Iterable

import numpy as np

from spectroscope.config import AppConfig
from spectroscope.features import FFTMode
from spectroscope.timebuffer import TimeBuffer

ADC_RATE = 80_000_000
LOW_BANDWIDTH_RATE = 200_000
NUM_BUFFERS = 8
NUM_FFT_THREADS = 3

PeakCallback = Callable[[float], None]


def peak_frequency(index: int, mode: FFTMode, fft_size: int) -> float:
    """Frequency of bin ``index``: kHz in low-bandwidth mode, MHz otherwise."""
    if mode is FFTMode.LOW_BANDWIDTH:
        return index * float(LOW_BANDWIDTH_RATE) / fft_size / 1000.0
    return index * float(ADC_RATE) / fft_size / 1e6


def compute_spectrum(frame, fft_bins: int) -> tuple[np.ndarray, int]:
    """Return bin magnitudes and the index of the strongest bin.

    The lowest tenth and the top percent of bins are ignored when searching
    for the peak; the index is 0 if nothing in range rises above zero.
    """
    spectrum = np.fft.rfft(np.asarray(frame, dtype=float))
    magnitudes = np.abs(spectrum[:fft_bins])
    ignore_low = fft_bins // 10
    ignore_top = int(fft_bins * 0.99)
    window = magnitudes[ignore_low:ignore_top + 1]
    peak = 0
    if window.size:
        k = int(np.argmax(window))
        if window[k] > 0.0:
            peak = ignore_low + k
    return magnitudes, peak


class FFTProcessor:
    """Cuts incoming samples into overlapping frames and analyses them on worker threads."""

    def __init__(
        self,
        config: AppConfig,
        time_buffer: TimeBuffer | None = None,
        on_peak: PeakCallback | None = None,
    ) -> None:
        self._config = config
        self._fft_size = config.fft_size
        self._fft_bins = config.fft_bins
        self._hop = config.fft_hop_size
        self._time_buffer = time_buffer
        self._on_peak = on_peak
        self._mode = FFTMode.FULL_BANDWIDTH

        self._frame = np.zeros(self._fft_size)
        self._filled = 0
        self._skip = 0
        self._feed_lock = threading.Lock()
        self._queue: queue.Queue[np.ndarray] = queue.Queue(maxsize=NUM_BUFFERS - 1)

        self._result_lock = threading.Lock()
        self._latest = np.zeros(self._fft_bins)
        self._ready = False

        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def mode(self) -> FFTMode:
        return self._mode

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def set_mode(self, mode: FFTMode) -> None:
        self._mode = mode

    def feed(self, data: Iterable[int]) -> bool:
        """Accept a chunk of ADC words.

        Samples go to the time buffer unchanged and, decimated for the current
        mode, into the frame being built. Returns False if a full frame had to
        be dropped because the analysis queue was full; the rest of the chunk
        is then discarded.
        """
        samples = np.asarray(data).ravel()
        if self._time_buffer is not None:
            self._time_buffer.feed(samples)

        target = LOW_BANDWIDTH_RATE if self._mode is FFTMode.LOW_BANDWIDTH else ADC_RATE
        downsample = ADC_RATE // target

        with self._feed_lock:
            first_skip = self._skip
            positions = np.flatnonzero((first_skip + np.arange(len(samples))) % downsample == 0)
            kept = samples[positions].astype(float)
            consumed = 0
            while consumed < len(kept):
                take = min(self._fft_size - self._filled, len(kept) - consumed)
                self._frame[self._filled:self._filled + take] = kept[consumed:consumed + take]
                self._filled += take
                consumed += take
                if self._filled < self._fft_size:
                    continue
                try:
                    self._queue.put_nowait(self._frame.copy())
                except queue.Full:
                    self._filled = self._fft_size - self._hop
                    self._skip = first_skip + int(positions[consumed - 1]) + 1
                    return False
                overlap = self._frame[self._hop:].copy()
                self._frame[:len(overlap)] = overlap
                self._filled = self._fft_size - self._hop
            self._skip = first_skip + len(samples)
        return True

    def process_frame(self, frame) -> float:
        """Analyse one frame, publish its magnitudes and report its peak frequency."""
        magnitudes, peak = compute_spectrum(frame, self._fft_bins)
        frequency = peak_frequency(peak, self._mode, self._fft_size)
        with self._result_lock:
            self._latest = magnitudes
            self._ready = True
        if self._on_peak is not None:
            self._on_peak(frequency)
        return frequency

    def magnitudes(self) -> np.ndarray | None:
        """Latest magnitudes if new ones arrived since the last call, else None."""
        with self._result_lock:
            if not self._ready:
                return None
            self._ready = False
            return self._latest.copy()

    def start(self, source: Iterable[Iterable[int]] | None = None) -> bool:
        """Start the analysis threads and, if given, a reader feeding from ``source``.

        Returns False if already running.
        """
        if self.running:
            return False
        self._stop.clear()
        self._threads = [
            threading.Thread(target=self._work, name=f"fft-{i}", daemon=True)
            for i in range(NUM_FFT_THREADS)
        ]
        if source is not None:
            self._threads.append(
                threading.Thread(target=self._read, args=(source,), name="fft-reader", daemon=True)
            )
        for thread in self._threads:
            thread.start()
        return True

    def stop(self) -> None:
        """Stop all threads and wait for them."""
        self._stop.set()
        for thread in self._threads:
            thread.join()
        self._threads = []

    def __enter__(self) -> "FFTProcessor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def _work(self) -> None:
        while not self._stop.is_set():
            try:
                frame = self._queue.get(timeout=0.05)
            except queue.Empty:
                continue
            self.process_frame(frame)

    def _read(self, source: Iterable[Iterable[int]]) -> None:
        for chunk in source:
            if self._stop.is_set():
                break
            self.feed(chunk)