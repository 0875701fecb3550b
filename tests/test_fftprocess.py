import threading
import time

import numpy as np
import pytest

from spectroscope import fftprocess
from spectroscope.config import AppConfig
from spectroscope.features import FFTMode
from spectroscope.fftprocess import FFTProcessor, compute_spectrum, peak_frequency
from spectroscope.timebuffer import TimeBuffer


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _sine(size, cycles):
    t = np.arange(size)
    return 1000.0 + 100.0 * np.sin(2 * np.pi * cycles * t / size)


def test_peak_frequency_of_dc_is_zero():
    assert peak_frequency(0, FFTMode.FULL_BANDWIDTH, 1024) == 0.0


def test_peak_frequency_full_span():
    assert peak_frequency(512, FFTMode.FULL_BANDWIDTH, 512) == pytest.approx(80.0)


def test_peak_frequency_low_span():
    assert peak_frequency(512, FFTMode.LOW_BANDWIDTH, 512) == pytest.approx(200.0)


def test_spectrum_finds_sine_bin():
    mags, peak = compute_spectrum(_sine(64, 20), 33)
    assert len(mags) == 33
    assert peak == 20
    assert int(np.argmax(mags[1:])) + 1 == 20


def test_spectrum_ignores_dc():
    mags, peak = compute_spectrum(np.full(64, 5.0), 33)
    assert peak == 0
    assert mags[0] == pytest.approx(5.0 * 64)


def test_spectrum_ignores_lowest_tenth():
    _, peak = compute_spectrum(_sine(200, 3), 101)
    assert peak == 0


def test_process_frame_publishes_once():
    received = []
    config = AppConfig(fft_size=64)
    proc = FFTProcessor(config, None, received.append)
    freq = proc.process_frame(_sine(64, 20))
    assert freq == peak_frequency(20, FFTMode.FULL_BANDWIDTH, 64)
    assert received == [freq]
    mags = proc.magnitudes()
    assert len(mags) == config.fft_bins
    assert proc.magnitudes() is None


def test_magnitudes_none_before_any_frame():
    proc = FFTProcessor(AppConfig(fft_size=8), None, None)
    assert proc.magnitudes() is None


def test_feed_forwards_to_time_buffer():
    tb = TimeBuffer(32)
    tb.start()
    proc = FFTProcessor(AppConfig(fft_size=8), tb, None)
    proc.feed(list(range(10)))
    assert tb.sample_count() == 10
    assert tb.snapshot(10).tolist() == list(range(10))


def test_overlapping_frames_are_processed():
    received = []
    proc = FFTProcessor(AppConfig(fft_size=8), None, received.append)
    proc.start(None)
    try:
        assert proc.feed(list(range(16))) is True
        assert _wait_for(lambda: len(received) == 3)
        time.sleep(0.1)
        assert len(received) == 3
    finally:
        proc.stop()


def test_frames_dropped_when_queue_full():
    received = []
    proc = FFTProcessor(AppConfig(fft_size=8), None, received.append)
    assert proc.feed(list(range(8 + 4 * 10))) is False
    proc.start(None)
    try:
        capacity = fftprocess.NUM_BUFFERS - 1
        assert _wait_for(lambda: len(received) == capacity)
        time.sleep(0.1)
        assert len(received) == capacity
    finally:
        proc.stop()


def test_low_bandwidth_decimates():
    received = []
    proc = FFTProcessor(AppConfig(fft_size=8), None, received.append)
    proc.set_mode(FFTMode.LOW_BANDWIDTH)
    assert proc.mode is FFTMode.LOW_BANDWIDTH
    decimation = fftprocess.ADC_RATE // fftprocess.LOW_BANDWIDTH_RATE
    proc.feed(np.zeros(decimation * 7, dtype=np.uint16))
    proc.start(None)
    try:
        time.sleep(0.1)
        assert received == []
        proc.feed(np.zeros(decimation, dtype=np.uint16))
        assert _wait_for(lambda: len(received) == 1)
    finally:
        proc.stop()


def test_reader_consumes_source():
    done = threading.Event()
    received = []

    def on_peak(freq):
        received.append(freq)
        done.set()

    proc = FFTProcessor(AppConfig(fft_size=64), None, on_peak)
    with proc:
        assert proc.start([_sine(64, 20).astype(np.uint16)]) is True
        assert done.wait(5.0)
    assert received[0] == peak_frequency(20, FFTMode.FULL_BANDWIDTH, 64)
    assert proc.running is False


def test_start_twice_reports_running():
    proc = FFTProcessor(AppConfig(fft_size=8), None, None)
    assert proc.start(None) is True
    try:
        assert proc.start(None) is False
    finally:
        proc.stop()
    assert proc.running is False