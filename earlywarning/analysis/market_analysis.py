#!/usr/bin/env python3
"""
Market analysis entry points

`run_csd` and `run_lppl` are the two pure functions offered to callers. They
take a chronologically ordered, gap-free price sequence (aligning and
forward-filling sources is the caller's job) and return result objects; they
neither fetch nor store anything.
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ..config.analysis_settings import AnalysisConfig
from ..critical_slowing_down.detrending import detrend
from ..critical_slowing_down.indicators import (
    CSDStatus,
    rolling_ar1,
    rolling_variance,
    kendall_tau,
    latest_defined,
    classify_status
)
from ..fitting.grid_search import LPPLResult, optimize
from ..sornette_theory.lppl_model import LPPLGridSettings, DEFAULT_LPPL_GRID

logger = logging.getLogger(__name__)


def _nan_to_none(values: np.ndarray) -> List[Optional[float]]:
    return [None if np.isnan(v) else float(v) for v in values]


@dataclass
class CSDResult:
    """Critical slowing down indicators of one price series"""
    trend: np.ndarray
    residuals: np.ndarray
    ar1_series: np.ndarray        # NaN where undefined
    variance_series: np.ndarray   # NaN where undefined
    current_ar1: float
    kendall_tau: float
    status: CSDStatus
    current_variance: float

    def to_dict(self) -> Dict:
        return {
            'trend': [float(v) for v in self.trend],
            'residuals': [float(v) for v in self.residuals],
            'ar1_series': _nan_to_none(self.ar1_series),
            'variance_series': _nan_to_none(self.variance_series),
            'current_ar1': self.current_ar1,
            'kendall_tau': self.kendall_tau,
            'status': self.status.value,
            'current_variance': self.current_variance
        }


def run_csd(prices, config: Optional[AnalysisConfig] = None) -> CSDResult:
    """
    Critical slowing down analysis

    Args:
        prices: price sequence
        config: AnalysisConfig (defaults: bandwidth 50, window 250, lookback 100)

    Returns:
        CSDResult: series have the input length; with too little history the
        indicator series stay undefined and current values fall back to 0
    """
    config = config or AnalysisConfig()
    values = np.array(prices, dtype=float).ravel()

    if len(values) < config.minimum_meaningful_length:
        logger.info("CSD on %d points: fewer than csd_window + tau_lookback = %d, indicators are partial",
                    len(values), config.minimum_meaningful_length)

    trend, residuals = detrend(values, config.detrend_bandwidth)
    ar1_series = rolling_ar1(residuals, config.csd_window)
    variance_series = rolling_variance(residuals, config.csd_window)
    tau = kendall_tau(ar1_series, config.tau_lookback)

    current_ar1 = latest_defined(ar1_series)
    status = classify_status(current_ar1)

    logger.debug("CSD: AR(1)=%.3f tau=%.3f status=%s", current_ar1, tau, status.value)

    return CSDResult(
        trend=trend,
        residuals=residuals,
        ar1_series=ar1_series,
        variance_series=variance_series,
        current_ar1=current_ar1,
        kendall_tau=tau,
        status=status,
        current_variance=latest_defined(variance_series)
    )


def run_lppl(prices, grid: Optional[LPPLGridSettings] = None,
             deadline: Optional[float] = None, timeout: Optional[float] = None,
             workers: int = 1) -> LPPLResult:
    """
    LPPL bubble analysis

    Args:
        prices: price sequence (the last grid.max_observations points are used)
        grid: grid-search constants, DEFAULT_LPPL_GRID when omitted
        deadline: absolute time.monotonic() value for the grid search
        timeout: seconds from now; converted to a deadline (the earlier of the
            two wins when both are given)
        workers: processes used for the grid search

    Returns:
        LPPLResult
    """
    if timeout is not None:
        timeout_deadline = time.monotonic() + timeout
        deadline = timeout_deadline if deadline is None else min(deadline, timeout_deadline)
    return optimize(prices, grid=grid or DEFAULT_LPPL_GRID, deadline=deadline, workers=workers)
