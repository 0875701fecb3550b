"""Live time-domain and FFT spectrum viewer for 16-bit ADC sample streams."""

__version__ = "0.1.0"