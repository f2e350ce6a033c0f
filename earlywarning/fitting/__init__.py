"""
LPPL Fitting - grid search with closed-form linear parameters

Main Components:
    - optimize: grid search over (tc, m, omega, phi), exact 3x3 least squares for (A, B, C)
    - LPPLFit / LPPLResult: fitted parameters and bubble classification
    - linear_algebra: closed-form batched 3x3 solver used by the search
"""

from .grid_search import LPPLFit, LPPLResult, optimize, insufficient_data_result
from .linear_algebra import batch_solve_3x3
from .utils import calculate_fit_metrics, calculate_r_squared, assess_statistical_significance

__all__ = [
    'LPPLFit',
    'LPPLResult',
    'optimize',
    'insufficient_data_result',
    'batch_solve_3x3',
    'calculate_fit_metrics',
    'calculate_r_squared',
    'assess_statistical_significance'
]
