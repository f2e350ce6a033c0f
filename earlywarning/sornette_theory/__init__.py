"""
Sornette Theory - LPPL model, grid constants and validity constraints.
"""

from .lppl_model import (
    lppl_function,
    generate_fitted_curve,
    LPPLGridSettings,
    DEFAULT_LPPL_GRID
)
from .theory_validation import satisfies_lppl_constraints, validate_lppl_fit

__all__ = [
    'lppl_function',
    'generate_fitted_curve',
    'LPPLGridSettings',
    'DEFAULT_LPPL_GRID',
    'satisfies_lppl_constraints',
    'validate_lppl_fit'
]
