# spectroscope

A live viewer for streams of unsigned 16-bit ADC samples. One window shows two
plots:

- **Time Domain**: the most recent window of samples, converted to power in
  microwatts as `(sample - adc_offset) * adc_to_micro_watts`.
- **Frequency Domain**: the log10 magnitude of a real FFT over overlapping
  frames. A label in the corner shows the frequency of the strongest bin,
  ignoring the lowest tenth and the top percent of bins.

There are two bandwidth modes:

- **Full bandwidth**: 80 MHz sample rate, frequencies in MHz.
- **Low bandwidth**: the stream is decimated to 200 kHz, frequencies in kHz.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
```

## Running

Give the viewer a file of raw little-endian unsigned 16-bit samples:

```
spectroscope capture.raw
```

Options:

- `--chunk-size N`: number of samples read from the file at a time
  (default 65536).
- `--save-dir DIR`: directory where saved plot data goes (default `.`).

Keys while the window has focus:

- `space`: pause or resume the plots and the peak label.
- `m`: switch between full and low bandwidth. The time buffer is cleared and
  resized for the new sample rate.
- `t`: save the time-domain samples as `time_plot_<timestamp>.csv`.
- `f`: save the current spectrum as `fft_plot_<timestamp>.csv`.

The window's standard matplotlib toolbar can also be used to pan and zoom.

## Using it as a library

```python
from spectroscope.config import AppConfig
from spectroscope.timebuffer import TimeBuffer
from spectroscope.fftprocess import FFTProcessor
from spectroscope.features import PlotKind, save_plot

config = AppConfig()
time_buffer = TimeBuffer(int(config.sample_rate * config.time_window_seconds))
time_buffer.start()
fft = FFTProcessor(config, time_buffer, on_peak=print)

fft.start()                  # analysis threads
fft.feed(samples)            # a sequence of uint16 ADC values
spectrum = fft.magnitudes()  # latest magnitudes, or None if nothing new
recent = time_buffer.snapshot(time_buffer.sample_count())
fft.stop()

save_plot("spectrum.csv", PlotKind.FFT, spectrum, recent, config)
```

Modules:

- `spectroscope.config`: `AppConfig`, a dataclass holding the sample rate,
  time window, FFT size and overlap, refresh rate and ADC-to-microwatt
  conversion. `fft_bins` and `fft_hop_size` are properties derived from these.
- `spectroscope.timebuffer`: `TimeBuffer`, a thread-safe ring of the most
  recent samples (`start`, `resize`, `feed`, `sample_count`, `snapshot`).
- `spectroscope.fftprocess`: `FFTProcessor`, which cuts samples into
  overlapping frames and analyses them on worker threads; `compute_spectrum`
  and `peak_frequency` do the per-frame work. `feed` returns `False` when the
  analysis queue was full and a frame was dropped.
- `spectroscope.features`: `FFTMode`, `PlotKind`, `toggle_pause`,
  `switch_mode`, `save_fft_plot`, `save_time_plot`, `save_plot` and
  `format_peak_frequency`.
- `spectroscope.plotmanager`: `PlotManager`, which draws both plots on a
  matplotlib figure and offers `pan_x`, `magnify_x`, `zoom_in_x`,
  `zoom_out_x`, `zoom_in_y` and `zoom_out_y`, with x limits clamped to the
  full range; plus the helpers `fft_curve`, `time_curve`, `clamp_pan`,
  `clamp_zoom`, `zoom_in` and `zoom_out`.
- `spectroscope.app`: `RawFileSource`, `MainWindow` and the `main` command.

Saved files are CSV text: `Frequency (MHz),Log Magnitude` (or `KHz` at sample
rates of 1 MHz and below) for spectra, and `Time (us),Power (uW)` for time
data.

## What it does not do

- It does not talk to an acquisition device. Samples come only from a file
  (through `RawFileSource`) or from any iterable of sample chunks passed to
  `MainWindow` or `FFTProcessor.start`.
- The clamped panning and zooming in `PlotManager` is available to code but
  not bound to mouse or buttons in the window; there are no on-screen zoom
  buttons and no save dialog.

## Tests

```
pytest
```