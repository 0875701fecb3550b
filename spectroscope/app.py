"""Main window: live spectrum and time plots of a stream of ADC samples."""

from __future__ import annotations

import argparse
import os
import threading
import time
from pathlib import Path
from typing import Iterable, Iterator

import matplotlib.pyplot as plt
import numpy as np

from spectroscope.config import AppConfig
from spectroscope.features import (
    FFTMode,
    PlotKind,
    format_peak_frequency,
    save_plot,
    switch_mode,
    toggle_pause,
)
from spectroscope.fftprocess import FFTProcessor
from spectroscope.plotmanager import PlotManager
from spectroscope.timebuffer import TimeBuffer

DEFAULT_CHUNK_SIZE = 65536
NO_PEAK_TEXT = "Peak: --"


class RawFileSource:
    """Reads little-endian 16-bit ADC words from a file in chunks."""

    def __init__(self, path: str | os.PathLike, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.path = Path(path)
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[np.ndarray]:
        with open(self.path, "rb") as fh:
            while True:
                raw = fh.read(self.chunk_size * 2)
                usable = len(raw) - len(raw) % 2
                if usable == 0:
                    return
                yield np.frombuffer(raw[:usable], dtype="<u2").copy()


class MainWindow:
    """Ties the sample processors to the plots and the user's actions."""

    def __init__(
        self,
        source: Iterable[Iterable[int]] | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.config = config if config is not None else AppConfig()
        self.source = source
        self.save_dir = Path.cwd()
        self.is_paused = False
        self.mode = FFTMode.FULL_BANDWIDTH

        self.time_buffer = TimeBuffer(
            int(self.config.sample_rate * self.config.time_window_seconds)
        )
        self.fft = FFTProcessor(self.config, self.time_buffer, self.on_peak)

        self.figure = plt.figure(figsize=(8, 6))
        self.plots = PlotManager(self.figure, self.config)
        self.peak_label = self.figure.text(
            0.99, 0.995, NO_PEAK_TEXT, ha="right", va="top", color="gray", fontsize=13
        )
        self._peak_lock = threading.Lock()
        self._peak_text = NO_PEAK_TEXT

        self.fft.set_mode(self.mode)

    @property
    def peak_text(self) -> str:
        with self._peak_lock:
            return self._peak_text

    def toggle_pause(self) -> bool:
        self.is_paused = toggle_pause(self.is_paused)
        return self.is_paused

    def change_mode(self) -> FFTMode:
        """Switch bandwidth, reset the time buffer and make sure streaming runs."""
        self.mode = switch_mode(self.mode, self.config)
        self.time_buffer.resize(
            int(self.config.sample_rate * self.config.time_window_seconds + 1)
        )
        self.fft.set_mode(self.mode)
        self._start_streams()
        return self.mode

    def save(self, path: str | os.PathLike, kind: PlotKind) -> None:
        """Export the current spectrum or time samples to ``path``."""
        magnitudes = self.fft.magnitudes()
        if magnitudes is None:
            magnitudes = np.zeros(self.config.fft_bins)
        count = self.time_buffer.sample_count()
        samples = self.time_buffer.snapshot(count)
        save_plot(path, kind, magnitudes, samples, self.config)

    def on_peak(self, frequency: float) -> None:
        """Record a new peak frequency; shown at the next refresh unless paused."""
        if self.is_paused:
            return
        text = format_peak_frequency(self.mode, frequency)
        with self._peak_lock:
            self._peak_text = text

    def refresh(self) -> None:
        """Push the latest label text and data to the plots."""
        text = self.peak_text
        if self.peak_label.get_text() != text:
            self.peak_label.set_text(text)
        self.plots.update_plot(self.fft, self.time_buffer, self.is_paused)

    def show(self) -> None:
        """Start streaming and run the window until it is closed."""
        self._start_streams()
        timer = self.figure.canvas.new_timer(interval=self.config.plot_refresh_rate_ms)
        timer.add_callback(self.refresh)
        timer.start()
        self.figure.canvas.mpl_connect("key_press_event", self._on_key)
        try:
            plt.show()
        finally:
            timer.stop()
            self.close()

    def close(self) -> None:
        self.fft.stop()
        plt.close(self.figure)

    def __enter__(self) -> "MainWindow":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _start_streams(self) -> None:
        self.fft.start(self.source)
        self.time_buffer.start()

    def _on_key(self, event) -> None:
        key = event.key
        if key == " ":
            self.toggle_pause()
        elif key == "m":
            self.change_mode()
        elif key in ("t", "f"):
            kind = PlotKind.TIME if key == "t" else PlotKind.FFT
            stem = "time_plot" if kind is PlotKind.TIME else "fft_plot"
            stamp = time.strftime("%Y%m%d-%H%M%S")
            self.save(self.save_dir / f"{stem}_{stamp}.csv", kind)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="spectroscope",
        description="Live spectrum and time plots of 16-bit ADC samples. "
        "Keys: space pauses, m switches bandwidth, t/f save time/FFT data.",
    )
    parser.add_argument("source", help="file of little-endian 16-bit ADC words")
    parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE)
    parser.add_argument("--save-dir", default=".", help="directory for saved plot data")
    args = parser.parse_args(argv)

    path = Path(args.source)
    if not path.is_file():
        parser.error(f"no such file: {path}")
    if args.chunk_size < 1:
        parser.error("--chunk-size must be positive")

    window = MainWindow(RawFileSource(path, args.chunk_size))
    window.save_dir = Path(args.save_dir)
    window.show()
    return 0