"""
Gaussian-kernel detrending (Nadaraya-Watson smoother)

Separates a slowly varying trend from the fluctuations whose memory is
measured by the CSD indicators. Every point is averaged over the whole
series, so the edges still get a (one-sided) local mean.
"""

import logging
import math
from typing import Tuple

import numpy as np

from ..config.analysis_settings import check_positive_bandwidth

logger = logging.getLogger(__name__)


def gaussian_kernel(x, bandwidth: float):
    """Gaussian density with standard deviation `bandwidth`, evaluated at x."""
    bandwidth = check_positive_bandwidth(bandwidth, 'bandwidth')
    x = np.asarray(x, dtype=float)
    return np.exp(-0.5 * (x / bandwidth) ** 2) / (bandwidth * math.sqrt(2 * math.pi))


def detrend(prices, bandwidth: float = 50.0) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split a series into kernel-smoothed trend and residuals

    trend[i] = Σ_j K(i-j) price[j] / Σ_j K(i-j), with K the Gaussian kernel.
    The weight only depends on the lag i-j, so both sums are convolutions of
    the series with one kernel vector covering lags -(n-1)..(n-1).

    Args:
        prices: price sequence
        bandwidth: kernel standard deviation in time steps (> 0)

    Returns:
        (trend, residuals): float arrays with the same length as prices
    """
    values = np.array(prices, dtype=float).ravel()
    n = len(values)
    kernel_lags = np.arange(-(n - 1), n) if n > 0 else np.array([])
    weights = gaussian_kernel(kernel_lags, bandwidth)

    if n == 0:
        return np.array([]), np.array([])

    # full convolution index i + n - 1 holds Σ_j values[j] * K(i - j)
    weighted_sum = np.convolve(values, weights, mode='full')[n - 1:2 * n - 1]
    weight_total = np.convolve(np.ones(n), weights, mode='full')[n - 1:2 * n - 1]

    trend = weighted_sum / weight_total
    residuals = values - trend

    logger.debug("Detrended %d points (bandwidth=%.1f, residual std=%.4g)",
                 n, bandwidth, float(np.std(residuals)))
    return trend, residuals
