#!/usr/bin/env python3
"""
Analysis report builder

Merges the CSD and LPPL results of one price series into a display-ready
dictionary: rounded headline numbers, plain-language interpretations and a
per-step time series. This is the merge step of an orchestrator; fetching,
aligning and caching data stay with the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from ..config.analysis_settings import AnalysisConfig
from ..error_handling.errors import DataLoadError
from ..sornette_theory.lppl_model import LPPLGridSettings
from .market_analysis import CSDResult, run_csd, run_lppl
from ..fitting.grid_search import LPPLResult

logger = logging.getLogger(__name__)


def interpret_ar1(current_ar1: float) -> str:
    if current_ar1 > 0.7:
        return 'System showing signs of critical slowing down'
    if current_ar1 > 0.5:
        return 'Elevated autocorrelation, monitor closely'
    return 'Normal resilience'


def interpret_tau(tau: float) -> str:
    if tau > 0.3:
        return 'AR(1) trending upward - warning signal'
    if tau < -0.3:
        return 'AR(1) trending downward - recovering'
    return 'No significant trend in AR(1)'


def interpret_lppl(result: LPPLResult) -> str:
    if result.is_bubble:
        return f'LPPL bubble signature detected. Estimated {result.tc_days} days to critical time.'
    return 'No significant LPPL bubble signature detected.'


def _round_or_none(value: Optional[float], digits: int) -> Optional[float]:
    if value is None or not np.isfinite(value):
        return None
    return round(float(value), digits)


def build_time_series_frame(prices: Sequence[float], csd: CSDResult,
                            dates: Optional[Sequence] = None) -> pd.DataFrame:
    """
    Per-step table of the analysis

    Columns: date (when given), price, trend, residual, ar1, variance.
    trend/residual/variance are rounded to 2 decimals and ar1 to 3; undefined
    indicator entries stay NaN.
    """
    frame = pd.DataFrame({
        'price': np.asarray(prices, dtype=float),
        'trend': np.round(csd.trend, 2),
        'residual': np.round(csd.residuals, 2),
        'ar1': np.round(csd.ar1_series, 3),
        'variance': np.round(csd.variance_series, 2),
    })
    if dates is not None:
        frame.insert(0, 'date', [str(d) for d in dates])
    return frame


def _frame_records(frame: pd.DataFrame):
    # NaN -> None so that the records serialize as JSON null
    return frame.astype(object).where(frame.notna(), None).to_dict(orient='records')


def build_csd_summary(csd: CSDResult) -> Dict:
    return {
        'current_ar1': round(csd.current_ar1, 3),
        'kendall_tau': round(csd.kendall_tau, 3),
        'status': csd.status.value,
        'current_variance': round(csd.current_variance, 2),
        'interpretation': {
            'ar1': interpret_ar1(csd.current_ar1),
            'tau': interpret_tau(csd.kendall_tau)
        }
    }


def build_lppl_summary(lppl: LPPLResult) -> Dict:
    fit = lppl.fit
    return {
        'is_bubble': lppl.is_bubble,
        'confidence': int(round((lppl.confidence or 0.0) * 100)),
        'tc_days': lppl.tc_days,
        'r2': _round_or_none(lppl.r2, 3) if lppl.r2 else None,
        'omega': _round_or_none(fit.omega, 2) if fit is not None else None,
        'm': _round_or_none(fit.m, 2) if fit is not None else None,
        'search_completed': lppl.search_completed,
        'interpretation': interpret_lppl(lppl)
    }


def build_analysis_report(prices: Sequence[float],
                          dates: Optional[Sequence] = None,
                          config: Optional[AnalysisConfig] = None,
                          grid: Optional[LPPLGridSettings] = None,
                          timeout: Optional[float] = None,
                          workers: int = 1,
                          include_time_series: bool = True,
                          sources: Optional[Dict] = None) -> Dict:
    """
    Run both analyses and merge them into one report

    Args:
        prices: chronologically ordered positive prices
        dates: optional labels, same length as prices
        config: CSD configuration
        grid: LPPL grid settings
        timeout: seconds allowed for the LPPL grid search
        workers: processes for the LPPL grid search
        include_time_series: add the per-step records
        sources: provenance metadata to echo back

    Returns:
        dict: report with 'config', 'csd', 'lppl', 'latest', 'time_series',
        'record_count' and 'date_range'
    """
    config = config or AnalysisConfig()
    values = np.array(prices, dtype=float).ravel()

    if dates is not None and len(dates) != len(values):
        raise DataLoadError(f"dates ({len(dates)}) and prices ({len(values)}) differ in length",
                            parameter='dates', value=len(dates))

    csd = run_csd(values, config)
    lppl = run_lppl(values, grid=grid, timeout=timeout, workers=workers)

    frame = build_time_series_frame(values, csd, dates)
    records = _frame_records(frame)

    report = {
        'success': True,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'config': config.to_dict(),
        'csd': build_csd_summary(csd),
        'lppl': build_lppl_summary(lppl),
        'latest': records[-1] if records else None,
        'record_count': len(records),
        'date_range': {
            'start': records[0].get('date') if records else None,
            'end': records[-1].get('date') if records else None
        }
    }
    if sources is not None:
        report['sources'] = sources
    if include_time_series:
        report['time_series'] = records

    logger.info("Report: %d records, CSD status %s, LPPL bubble=%s",
                len(records), csd.status.value, lppl.is_bubble)
    return report
