"""
Early-Warning Signals Engine

Detects two early-warning signatures in a price series:

    critical_slowing_down: rising lag-1 autocorrelation and variance of
        detrended residuals (loss of resilience before a transition)
    sornette_theory / fitting: Log-Periodic Power Law bubble fits found by
        grid search

Both analyses are pure functions of their inputs: the same prices and
configuration always give the same result.

Usage:
    from earlywarning import run_csd, run_lppl, AnalysisConfig

    csd = run_csd(prices, AnalysisConfig(csd_window=120))
    lppl = run_lppl(prices)
"""

from .config.analysis_settings import AnalysisConfig, get_analysis_config, load_config_from_env
from .critical_slowing_down import CSDStatus
from .error_handling.errors import EarlyWarningError, ConfigurationError
from .analysis.market_analysis import CSDResult, run_csd, run_lppl
from .analysis.report import build_analysis_report
from .fitting.grid_search import LPPLFit, LPPLResult
from .sornette_theory.lppl_model import LPPLGridSettings, DEFAULT_LPPL_GRID

__version__ = "1.0.0"

__all__ = [
    'AnalysisConfig',
    'get_analysis_config',
    'load_config_from_env',
    'CSDStatus',
    'EarlyWarningError',
    'ConfigurationError',
    'CSDResult',
    'run_csd',
    'run_lppl',
    'build_analysis_report',
    'LPPLFit',
    'LPPLResult',
    'LPPLGridSettings',
    'DEFAULT_LPPL_GRID'
]
