"""
Critical Slowing Down - detrending and rolling resilience indicators.
"""

from .detrending import gaussian_kernel, detrend
from .indicators import (
    CSDStatus,
    rolling_ar1,
    rolling_variance,
    kendall_tau,
    latest_defined,
    classify_status
)

__all__ = [
    'gaussian_kernel',
    'detrend',
    'CSDStatus',
    'rolling_ar1',
    'rolling_variance',
    'kendall_tau',
    'latest_defined',
    'classify_status'
]
