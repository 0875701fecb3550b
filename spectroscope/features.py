"""User-facing actions: pause, mode switching, exporting plots, peak labels."""

from __future__ import annotations

import enum
import math
import os
from typing import Sequence

from spectroscope.config import AppConfig

FULL_BANDWIDTH_RATE = 80e6
LOW_BANDWIDTH_RATE = 200000.0


class FFTMode(enum.Enum):
    FULL_BANDWIDTH = 0
    LOW_BANDWIDTH = 1


class PlotKind(enum.Enum):
    TIME = "Save Time-Domain Plot"
    FFT = "Save Frequency (FFT) Plot"


def _fmt(value: float) -> str:
    return f"{value:g}"


def toggle_pause(is_paused: bool) -> bool:
    """Return the flipped pause state."""
    return not is_paused


def switch_mode(mode: FFTMode, config: AppConfig) -> FFTMode:
    """Return the other bandwidth mode and set the matching sample rate."""
    new_mode = (
        FFTMode.LOW_BANDWIDTH if mode is FFTMode.FULL_BANDWIDTH else FFTMode.FULL_BANDWIDTH
    )
    config.sample_rate = (
        FULL_BANDWIDTH_RATE if new_mode is FFTMode.FULL_BANDWIDTH else LOW_BANDWIDTH_RATE
    )
    return new_mode


def save_fft_plot(
    path: str | os.PathLike,
    magnitudes: Sequence[float],
    sample_rate: float,
    config: AppConfig,
) -> None:
    """Write frequency and log10 magnitude of every bin as CSV."""
    bins = config.fft_bins
    if len(magnitudes) < bins:
        raise ValueError(f"expected {bins} magnitudes, got {len(magnitudes)}")
    in_mhz = sample_rate > 1e6
    unit_scale = 1e6 if in_mhz else 1e3
    bin_width = sample_rate / config.fft_size
    with open(path, "w", encoding="utf-8", newline="\n") as out:
        out.write("Frequency (MHz),Log Magnitude\n" if in_mhz else "Frequency (KHz),Log Magnitude\n")
        for i, magnitude in enumerate(magnitudes[:bins]):
            freq = i * bin_width / unit_scale
            log_mag = math.log10(max(float(magnitude), config.epsilon))
            out.write(f"{_fmt(freq)},{_fmt(log_mag)}\n")


def save_time_plot(
    path: str | os.PathLike,
    samples: Sequence[int],
    sample_rate: float,
    time_window_seconds: float,
    config: AppConfig,
) -> None:
    """Write time in microseconds and power in microwatts of every sample as CSV."""
    dt_us = 1e6 / sample_rate
    with open(path, "w", encoding="utf-8", newline="\n") as out:
        out.write("Time (us),Power (uW)\n")
        for i, sample in enumerate(samples):
            power = (float(sample) - config.adc_offset) * config.adc_to_micro_watts
            out.write(f"{_fmt(i * dt_us)},{_fmt(power)}\n")


def save_plot(
    path: str | os.PathLike,
    kind: PlotKind,
    magnitudes: Sequence[float],
    samples: Sequence[int],
    config: AppConfig,
) -> None:
    """Export the chosen plot using the current configuration."""
    if kind is PlotKind.TIME:
        save_time_plot(path, samples, config.sample_rate, config.time_window_seconds, config)
    else:
        save_fft_plot(path, magnitudes, config.sample_rate, config)


def format_peak_frequency(mode: FFTMode, frequency: float) -> str:
    """Label text for the strongest frequency."""
    unit = "kHz" if mode is FFTMode.LOW_BANDWIDTH else "MHz"
    return f"Peak: {frequency:.2f} {unit}"