"""
Closed-form 3x3 least squares

The LPPL linear parameters (A, B, C) come from the normal equations
(X'X) beta = X'y with a three-column design matrix, so the solver is
written out for exactly three unknowns via the adjugate and solved for all
(omega, phi) candidates of a grid block at once.
"""

from typing import Tuple

import numpy as np

SINGULAR_TOLERANCE = 1e-10


def _determinant(a):
    return (a[..., 0, 0] * (a[..., 1, 1] * a[..., 2, 2] - a[..., 1, 2] * a[..., 2, 1])
            - a[..., 0, 1] * (a[..., 1, 0] * a[..., 2, 2] - a[..., 1, 2] * a[..., 2, 0])
            + a[..., 0, 2] * (a[..., 1, 0] * a[..., 2, 1] - a[..., 1, 1] * a[..., 2, 0]))


def _adjugate(a):
    adj = np.empty_like(a)
    adj[..., 0, 0] = a[..., 1, 1] * a[..., 2, 2] - a[..., 1, 2] * a[..., 2, 1]
    adj[..., 0, 1] = a[..., 0, 2] * a[..., 2, 1] - a[..., 0, 1] * a[..., 2, 2]
    adj[..., 0, 2] = a[..., 0, 1] * a[..., 1, 2] - a[..., 0, 2] * a[..., 1, 1]
    adj[..., 1, 0] = a[..., 1, 2] * a[..., 2, 0] - a[..., 1, 0] * a[..., 2, 2]
    adj[..., 1, 1] = a[..., 0, 0] * a[..., 2, 2] - a[..., 0, 2] * a[..., 2, 0]
    adj[..., 1, 2] = a[..., 0, 2] * a[..., 1, 0] - a[..., 0, 0] * a[..., 1, 2]
    adj[..., 2, 0] = a[..., 1, 0] * a[..., 2, 1] - a[..., 1, 1] * a[..., 2, 0]
    adj[..., 2, 1] = a[..., 0, 1] * a[..., 2, 0] - a[..., 0, 0] * a[..., 2, 1]
    adj[..., 2, 2] = a[..., 0, 0] * a[..., 1, 1] - a[..., 0, 1] * a[..., 1, 0]
    return adj


def batch_solve_3x3(a, b, tolerance: float = SINGULAR_TOLERANCE) -> Tuple[np.ndarray, np.ndarray]:
    """
    Solve many 3x3 systems at once

    Args:
        a: array of shape (..., 3, 3)
        b: array of shape (..., 3)
        tolerance: systems with |det| below this are reported as singular

    Returns:
        (solutions, solvable): solutions of shape (..., 3) with NaN rows for
        singular systems, and the boolean mask of solvable systems
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    det = _determinant(a)
    solvable = np.isfinite(det) & (np.abs(det) >= tolerance)

    safe_det = np.where(solvable, det, 1.0)
    solutions = np.einsum('...ij,...j->...i', _adjugate(a), b) / safe_det[..., np.newaxis]
    solutions[~solvable] = np.nan
    return solutions, solvable
