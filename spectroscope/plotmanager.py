"""Frequency- and time-domain plots with clamped panning and zooming."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

from spectroscope.config import AppConfig
from spectroscope.fftprocess import FFTProcessor
from spectroscope.timebuffer import TimeBuffer

BACKGROUND = "#0d0d0d"
LIGHT_GRAY = "#b7b6bf"
NEON_PINK = "#ff70c6"
GRID_COLOR = (183 / 255, 182 / 255, 191 / 255, 80 / 255)

ZOOM_IN_DIVISOR = 2.5
ZOOM_OUT_FACTOR = 0.625

Limits = tuple[float, float]


def clamp_pan(lower: float, upper: float, min_x: float, max_x: float) -> Limits:
    """Shift a range back inside ``[min_x, max_x]`` keeping its width."""
    width = upper - lower
    if lower < min_x:
        lower = min_x
        upper = lower + width
    if upper > max_x:
        upper = max_x
        lower = upper - width
    return lower, upper


def clamp_zoom(lower: float, upper: float, min_x: float, max_x: float) -> Limits:
    """Like :func:`clamp_pan`, but a range wider than the bounds becomes the bounds."""
    if upper - lower > max_x - min_x:
        return min_x, max_x
    return clamp_pan(lower, upper, min_x, max_x)


def zoom_in(lower: float, upper: float) -> Limits:
    """Narrow a range about its centre by a factor of 1.25."""
    center = (lower + upper) / 2.0
    half = (upper - lower) / ZOOM_IN_DIVISOR
    return center - half, center + half


def zoom_out(lower: float, upper: float) -> Limits:
    """Widen a range about its centre by a factor of 1.25."""
    center = (lower + upper) / 2.0
    half = (upper - lower) * ZOOM_OUT_FACTOR
    return center - half, center + half


def fft_curve(
    magnitudes: Sequence[float], sample_rate: float, config: AppConfig
) -> tuple[np.ndarray, np.ndarray]:
    """Frequencies (MHz above 1 MHz sample rate, else kHz) and log10 magnitudes."""
    mags = np.asarray(magnitudes, dtype=float).ravel()
    bins = config.fft_bins
    if mags.size < bins:
        raise ValueError(f"expected {bins} magnitudes, got {mags.size}")
    bin_width = sample_rate / config.fft_size
    unit_scale = 1e6 if sample_rate > 1e6 else 1e3
    freqs = np.arange(bins) * bin_width / unit_scale
    log_mags = np.log10(np.maximum(mags[:bins], config.epsilon))
    return freqs, log_mags


def time_curve(
    samples: Sequence[int],
    time_window_seconds: float,
    max_points: int,
    config: AppConfig,
) -> tuple[np.ndarray, np.ndarray]:
    """Times in microseconds and powers in microwatts, decimated to about ``max_points``."""
    if max_points < 1:
        raise ValueError(f"max_points must be positive, got {max_points}")
    data = np.asarray(samples, dtype=float).ravel()
    n = data.size
    if n == 0:
        return np.zeros(0), np.zeros(0)
    step = max(1, n // max_points)
    dt_us = time_window_seconds * 1e6 / (n - 1) if n > 1 else 0.0
    positions = np.arange(0, n, step)
    times = positions * dt_us
    powers = (data[positions] - config.adc_offset) * config.adc_to_micro_watts
    return times, powers


class PlotManager:
    """Owns the two plots of a figure and their interactive limits."""

    def __init__(self, figure: Figure, config: AppConfig) -> None:
        self._figure = figure
        self._config = config
        figure.set_facecolor(BACKGROUND)
        self._fft_axes, self._time_axes = figure.subplots(2, 1)

        unit_scale = 1e6 if config.sample_rate > 1e6 else 1e3
        fft_max = (config.sample_rate / 2.0) / unit_scale
        self._style(self._fft_axes, "Frequency Domain", "Frequency", "Log Magnitude", 6)
        self._fft_axes.set_ylim(0.0, 8.0)
        self._fft_axes.set_xlim(0.0, fft_max)

        time_max = config.time_window_seconds * 1e6
        self._style(self._time_axes, "Time Domain", "Time (\u00b5s)", "Signal Value", 4)
        self._time_axes.set_ylim(0.0, 150.0)
        self._time_axes.set_xlim(0.0, time_max)

        self._x_bounds: dict[Axes, Limits] = {
            self._fft_axes: tuple(self._fft_axes.get_xlim()),
            self._time_axes: tuple(self._time_axes.get_xlim()),
        }

        (self._fft_line,) = self._fft_axes.plot(
            [], [], color=NEON_PINK, linewidth=0.45, antialiased=True, label="FFT"
        )
        (self._time_line,) = self._time_axes.plot(
            [], [], color=NEON_PINK, linewidth=0.45, label="Time Domain"
        )

    @staticmethod
    def _style(axes: Axes, title: str, xlabel: str, ylabel: str, y_ticks: int) -> None:
        axes.set_facecolor(BACKGROUND)
        axes.set_title(title, color=LIGHT_GRAY)
        axes.set_xlabel(xlabel, color=LIGHT_GRAY)
        axes.set_ylabel(ylabel, color=LIGHT_GRAY)
        axes.grid(True, color=GRID_COLOR, linewidth=0.5)
        axes.tick_params(colors=LIGHT_GRAY)
        axes.yaxis.set_major_locator(MaxNLocator(y_ticks))
        for spine in axes.spines.values():
            spine.set_color(LIGHT_GRAY)

    @property
    def fft_axes(self) -> Axes:
        return self._fft_axes

    @property
    def time_axes(self) -> Axes:
        return self._time_axes

    @property
    def fft_line(self):
        return self._fft_line

    @property
    def time_line(self):
        return self._time_line

    def _bounds(self, axes: Axes) -> Limits:
        try:
            return self._x_bounds[axes]
        except KeyError:
            raise ValueError("axes are not managed by this PlotManager") from None

    def _redraw(self) -> None:
        self._figure.canvas.draw_idle()

    def update_fft(self, magnitudes: Sequence[float], sample_rate: float) -> None:
        """Show a new spectrum."""
        freqs, log_mags = fft_curve(magnitudes, sample_rate, self._config)
        self._fft_line.set_data(freqs, log_mags)
        self._fft_axes.set_xlabel(
            "Frequency (MHz)" if sample_rate > 1e6 else "Frequency (KHz)", color=LIGHT_GRAY
        )
        self._redraw()

    def update_time(
        self,
        samples: Sequence[int],
        sample_rate: float,
        time_window_seconds: float,
        max_points: int,
    ) -> None:
        """Show a new block of time-domain samples."""
        times, powers = time_curve(samples, time_window_seconds, max_points, self._config)
        self._time_line.set_data(times, powers)
        self._time_axes.set_ylabel("Power (\u00b5W)", color=LIGHT_GRAY)
        self._redraw()

    def update_plot(self, fft: FFTProcessor, time_buffer: TimeBuffer, is_paused: bool) -> None:
        """Pull the latest data from the processors unless paused."""
        if is_paused:
            return
        config = self._config
        magnitudes = fft.magnitudes()
        if magnitudes is not None and len(magnitudes) > 10 and magnitudes[10] > 0.0:
            self.update_fft(magnitudes, config.sample_rate)

        count = time_buffer.sample_count()
        if count > 0:
            samples = time_buffer.snapshot(count)
            self.update_time(
                samples, config.sample_rate, config.time_window_seconds, config.max_points_to_plot
            )

    def pan_x(self, axes: Axes, delta: float) -> Limits:
        """Shift the x range by ``delta`` data units, kept inside the full range."""
        min_x, max_x = self._bounds(axes)
        lower, upper = axes.get_xlim()
        limits = clamp_pan(lower + delta, upper + delta, min_x, max_x)
        axes.set_xlim(*limits)
        self._redraw()
        return limits

    def magnify_x(self, axes: Axes, factor: float) -> Limits:
        """Scale both ranges about their centres by ``factor``; x stays inside the full range."""
        if factor <= 0.0:
            raise ValueError(f"factor must be positive, got {factor}")
        min_x, max_x = self._bounds(axes)

        def scaled(lower: float, upper: float) -> Limits:
            center = (lower + upper) / 2.0
            half = (upper - lower) * factor / 2.0
            return center - half, center + half

        axes.set_ylim(*scaled(*axes.get_ylim()))
        limits = clamp_zoom(*scaled(*axes.get_xlim()), min_x, max_x)
        axes.set_xlim(*limits)
        self._redraw()
        return limits

    def _apply(self, axes: Axes, x: bool, zoom) -> Limits:
        self._bounds(axes)
        if x:
            limits = zoom(*axes.get_xlim())
            axes.set_xlim(*limits)
        else:
            limits = zoom(*axes.get_ylim())
            axes.set_ylim(*limits)
        self._redraw()
        return limits

    def zoom_in_x(self, axes: Axes) -> Limits:
        return self._apply(axes, True, zoom_in)

    def zoom_out_x(self, axes: Axes) -> Limits:
        return self._apply(axes, True, zoom_out)

    def zoom_in_y(self, axes: Axes) -> Limits:
        return self._apply(axes, False, zoom_in)

    def zoom_out_y(self, axes: Axes) -> Limits:
        return self._apply(axes, False, zoom_out)