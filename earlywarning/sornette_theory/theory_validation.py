"""
LPPL Theory Validation

Model-validity constraints of a fitted LPPL curve. The vectorized
`satisfies_lppl_constraints` is what the grid search uses to reject
candidates; `validate_lppl_fit` produces a readable report for a single fit.
"""

from typing import Dict, Optional

import numpy as np

# Ranges that the canonical grid spans
M_RANGE = (0.0, 1.0)          # open interval
OMEGA_RANGE = (5.0, 13.0)     # closed interval


def satisfies_lppl_constraints(B, C):
    """
    B < 0 (finite-time singularity) and |C| <= |B| (subordinate oscillation)

    Works element-wise on arrays of candidate coefficients.
    """
    B = np.asarray(B)
    C = np.asarray(C)
    return np.logical_and(B < 0, np.abs(C) <= np.abs(B))


def validate_lppl_fit(fit, n_observations: Optional[int] = None) -> Dict[str, object]:
    """
    Constraint report for one fitted parameter set

    Args:
        fit: LPPLFit or None
        n_observations: length of the fitted window; enables the
            tc-after-data check

    Returns:
        dict: individual checks plus 'all_valid'
    """
    if fit is None:
        return {
            'valid': False,
            'error': 'No fit available',
            'all_valid': False
        }

    validation = {
        'b_negative': bool(fit.B < 0),
        'oscillation_subordinate': bool(abs(fit.C) <= abs(fit.B)),
        'm_in_range': bool(M_RANGE[0] < fit.m < M_RANGE[1]),
        'omega_in_range': bool(OMEGA_RANGE[0] <= fit.omega <= OMEGA_RANGE[1]),
    }
    if n_observations is not None:
        validation['tc_after_observations'] = bool(fit.tc > n_observations - 1)

    validation['all_valid'] = all(validation.values())
    validation['oscillation_ratio'] = float(abs(fit.C) / abs(fit.B)) if fit.B != 0 else float('inf')
    return validation
