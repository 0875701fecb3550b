import math

import pytest

from spectroscope.config import AppConfig
from spectroscope.features import (
    FFTMode,
    PlotKind,
    format_peak_frequency,
    save_fft_plot,
    save_plot,
    save_time_plot,
    switch_mode,
    toggle_pause,
)


def _read(path):
    return path.read_text(encoding="utf-8").splitlines()


def test_toggle_pause_flips():
    assert toggle_pause(False) is True
    assert toggle_pause(True) is False


def test_switch_mode_round_trip_sets_rates():
    config = AppConfig()
    mode = switch_mode(FFTMode.FULL_BANDWIDTH, config)
    assert mode is FFTMode.LOW_BANDWIDTH
    assert config.sample_rate == 200000
    mode = switch_mode(mode, config)
    assert mode is FFTMode.FULL_BANDWIDTH
    assert config.sample_rate == 80e6


def test_fft_plot_header_and_rows(tmp_path):
    config = AppConfig(fft_size=8)
    path = tmp_path / "fft.csv"
    save_fft_plot(path, [0.0] * config.fft_bins, 80e6, config)
    lines = _read(path)
    assert lines[0] == "Frequency (MHz),Log Magnitude"
    assert len(lines) == config.fft_bins + 1
    assert lines[1] == "0,-12"


def test_fft_plot_log_magnitude(tmp_path):
    config = AppConfig(fft_size=8)
    path = tmp_path / "fft.csv"
    mags = [10.0 ** k for k in range(config.fft_bins)]
    save_fft_plot(path, mags, 80e6, config)
    values = [float(line.split(",")[1]) for line in _read(path)[1:]]
    assert values == pytest.approx([math.log10(m) for m in mags])


def test_fft_plot_frequencies_increase(tmp_path):
    config = AppConfig(fft_size=16)
    path = tmp_path / "fft.csv"
    save_fft_plot(path, [1.0] * config.fft_bins, 200000, config)
    lines = _read(path)
    assert lines[0] == "Frequency (KHz),Log Magnitude"
    freqs = [float(line.split(",")[0]) for line in lines[1:]]
    assert freqs == sorted(freqs)
    assert freqs[0] == 0.0


def test_fft_plot_rejects_short_input(tmp_path):
    config = AppConfig(fft_size=8)
    with pytest.raises(ValueError):
        save_fft_plot(tmp_path / "x.csv", [1.0], 80e6, config)


def test_time_plot_rows(tmp_path):
    config = AppConfig()
    path = tmp_path / "time.csv"
    offset = int(config.adc_offset)
    save_time_plot(path, [offset, offset + 100, offset], 80e6, 100e-6, config)
    lines = _read(path)
    assert lines[0] == "Time (us),Power (uW)"
    assert lines[1] == "0,0"
    assert len(lines) == 4
    power = float(lines[2].split(",")[1])
    assert power == pytest.approx(100 * config.adc_to_micro_watts)


def test_time_plot_times_increase(tmp_path):
    config = AppConfig()
    path = tmp_path / "time.csv"
    save_time_plot(path, [1, 2, 3, 4], 80e6, 100e-6, config)
    times = [float(line.split(",")[0]) for line in _read(path)[1:]]
    assert times == sorted(times)


def test_save_plot_dispatches_time(tmp_path):
    config = AppConfig(fft_size=8)
    path = tmp_path / "out.txt"
    save_plot(path, PlotKind.TIME, [0.0] * config.fft_bins, [1, 2], config)
    assert _read(path)[0] == "Time (us),Power (uW)"


def test_save_plot_dispatches_fft(tmp_path):
    config = AppConfig(fft_size=8, sample_rate=200000)
    path = tmp_path / "out.txt"
    save_plot(path, PlotKind.FFT, [0.0] * config.fft_bins, [1, 2], config)
    assert _read(path)[0] == "Frequency (KHz),Log Magnitude"


def test_format_peak_frequency():
    assert format_peak_frequency(FFTMode.LOW_BANDWIDTH, 3.14159) == "Peak: 3.14 kHz"
    assert format_peak_frequency(FFTMode.FULL_BANDWIDTH, 25.0) == "Peak: 25.00 MHz"