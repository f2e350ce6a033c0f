"""
Analysis - public entry points and report assembly.
"""

from .market_analysis import CSDResult, run_csd, run_lppl
from .report import (
    build_analysis_report,
    build_time_series_frame,
    interpret_ar1,
    interpret_tau,
    interpret_lppl
)

__all__ = [
    'CSDResult',
    'run_csd',
    'run_lppl',
    'build_analysis_report',
    'build_time_series_frame',
    'interpret_ar1',
    'interpret_tau',
    'interpret_lppl'
]
