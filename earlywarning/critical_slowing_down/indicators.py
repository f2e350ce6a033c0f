"""
Critical Slowing Down indicators

Early-warning statistics computed from detrended residuals (Scheffer et al.
2009; Dakos et al. 2012):

- lag-1 autocorrelation, AR(1): rises towards 1 as the system recovers more
  slowly from perturbations
- variance: grows near the transition
- Kendall's tau of the AR(1) series against time: sign and strength of the
  monotonic trend in AR(1)

Undefined entries (not enough history yet) are NaN, never 0.
"""

import logging
from enum import Enum

import numpy as np

from ..config.analysis_settings import check_positive_int

logger = logging.getLogger(__name__)

MIN_TAU_POINTS = 10


class CSDStatus(Enum):
    """Resilience status derived from the current AR(1) value"""
    NORMAL = "NORMAL"
    RISING = "RISING"        # AR(1) > 0.6
    ELEVATED = "ELEVATED"    # AR(1) > 0.7
    CRITICAL = "CRITICAL"    # AR(1) > 0.8


# (threshold, status) checked from the top; thresholds are exclusive
STATUS_THRESHOLDS = (
    (0.8, CSDStatus.CRITICAL),
    (0.7, CSDStatus.ELEVATED),
    (0.6, CSDStatus.RISING),
)


def _pearson(x: np.ndarray, y: np.ndarray) -> float:
    dx = x - x.mean()
    dy = y - y.mean()
    var_x = np.dot(dx, dx)
    var_y = np.dot(dy, dy)
    if var_x > 0 and var_y > 0:
        return float(np.dot(dx, dy) / np.sqrt(var_x * var_y))
    return 0.0


def rolling_ar1(residuals, window_size: int = 250) -> np.ndarray:
    """
    Rolling lag-1 autocorrelation

    For i >= window_size + 1 the value at i is the Pearson correlation of
    residuals[i-W .. i-1] with the same window shifted one step back,
    residuals[i-W-1 .. i-2]. The extra lag point makes the first defined
    index window_size + 1, one later than rolling_variance.

    Args:
        residuals: detrended residuals
        window_size: window length W

    Returns:
        np.ndarray: AR(1) values clamped to [-1, 1], NaN where undefined
    """
    window_size = check_positive_int(window_size, 'window_size')
    values = np.asarray(residuals, dtype=float).ravel()
    n = len(values)
    ar1 = np.full(n, np.nan)

    for i in range(window_size + 1, n):
        current_window = values[i - window_size:i]
        lag_window = values[i - window_size - 1:i - 1]
        ar1[i] = min(1.0, max(-1.0, _pearson(current_window, lag_window)))

    return ar1


def rolling_variance(residuals, window_size: int = 250) -> np.ndarray:
    """
    Rolling sample variance of the trailing window [i - W, i)

    Args:
        residuals: detrended residuals
        window_size: window length W

    Returns:
        np.ndarray: variances (ddof=1), NaN for i < window_size
    """
    window_size = check_positive_int(window_size, 'window_size')
    values = np.asarray(residuals, dtype=float).ravel()
    n = len(values)
    variance = np.full(n, np.nan)
    if window_size == 1:
        # a single point has no spread; avoid the 0/0 sample variance
        variance[1:] = 0.0
        return variance

    for i in range(window_size, n):
        variance[i] = float(np.var(values[i - window_size:i], ddof=1))

    return variance


def kendall_tau(ar1_series, lookback: int = 100) -> float:
    """
    Kendall's tau between time and the most recent defined AR(1) values

    Undefined (NaN/None) entries are dropped first, then the trailing
    `lookback` values are kept. With k values, every pair i < j is
    concordant if ar1[j] > ar1[i], discordant if ar1[j] < ar1[i]; ties count
    for neither and tau = (concordant - discordant) / (k(k-1)/2).

    Returns:
        float: tau in [-1, 1]; 0.0 when fewer than 10 defined values remain
    """
    lookback = check_positive_int(lookback, 'lookback')
    values = np.array([np.nan if v is None else v for v in ar1_series], dtype=float).ravel()
    recent = values[~np.isnan(values)][-lookback:]

    k = len(recent)
    if k < MIN_TAU_POINTS:
        return 0.0

    # sign matrix over the upper triangle i < j
    signs = np.sign(recent[np.newaxis, :] - recent[:, np.newaxis])
    upper = np.triu(signs, k=1)
    concordant = int(np.count_nonzero(upper > 0))
    discordant = int(np.count_nonzero(upper < 0))
    total_pairs = k * (k - 1) / 2
    return (concordant - discordant) / total_pairs


def latest_defined(series) -> float:
    """Last non-NaN entry of an indicator series, or 0.0 when there is none."""
    values = np.asarray(series, dtype=float).ravel()
    defined = values[~np.isnan(values)]
    if defined.size == 0:
        return 0.0
    return float(defined[-1])


def classify_status(current_ar1: float) -> CSDStatus:
    """Map the current AR(1) value onto a CSDStatus."""
    for threshold, status in STATUS_THRESHOLDS:
        if current_ar1 > threshold:
            return status
    return CSDStatus.NORMAL
