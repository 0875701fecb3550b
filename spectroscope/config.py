"""Acquisition, spectrum and display settings."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AppConfig:
    """Settings shared by the acquisition, spectrum and plotting code."""

    sample_rate: float = 80e6
    time_window_seconds: float = 100e-6
    max_points_to_plot: int = 10000
    plot_refresh_rate_ms: int = 5
    fft_size: int = 19683
    fft_overlap_fraction: float = 0.5
    epsilon: float = 1e-12
    adc_offset: float = 49555.0
    adc_to_micro_watts: float = 0.0147

    def __post_init__(self) -> None:
        if self.fft_size < 1:
            raise ValueError(f"fft_size must be positive, got {self.fft_size}")
        if not 0.0 <= self.fft_overlap_fraction < 1.0:
            raise ValueError(
                f"fft_overlap_fraction must be in [0, 1), got {self.fft_overlap_fraction}"
            )
        if self.fft_hop_size < 1:
            raise ValueError("fft_size and fft_overlap_fraction leave no hop between frames")

    @property
    def fft_bins(self) -> int:
        """Number of bins in a real-to-complex transform of ``fft_size`` samples."""
        return self.fft_size // 2 + 1

    @property
    def fft_hop_size(self) -> int:
        """Number of new samples between the starts of successive frames."""
        return int(self.fft_size * (1.0 - self.fft_overlap_fraction))