"""
LPPL grid-search fitter

The nonlinear parameters (tc, m, ω, φ) are searched on the fixed grid of
LPPLGridSettings; for every grid point the linear parameters (A, B, C) follow
exactly from a 3x3 least-squares solve. For a fixed (tc, m) all (ω, φ)
combinations are evaluated at once with numpy.

Every grid point is independent, so tc blocks can be farmed out to a process
pool. Results are reduced in grid order (tc, m, ω, φ) with a strict
"greater than" comparison: the first maximum wins, which makes the parallel
and the sequential search return the same fit.
"""

import logging
import time
from dataclasses import dataclass, field, asdict
from multiprocessing import Pool
from typing import Dict, Optional, Tuple

import numpy as np

from ..sornette_theory.lppl_model import LPPLGridSettings, DEFAULT_LPPL_GRID, lppl_function
from ..sornette_theory.theory_validation import satisfies_lppl_constraints, validate_lppl_fit
from ..config.analysis_settings import check_positive_int
from .linear_algebra import batch_solve_3x3
from .utils import assess_statistical_significance, calculate_fit_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LPPLFit:
    """Best-fitting LPPL parameter set found by the grid search"""
    tc: float
    A: float
    B: float
    C: float
    m: float
    omega: float
    phi: float
    r2: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class LPPLResult:
    """Outcome of one LPPL bubble analysis"""
    is_bubble: bool
    confidence: float
    tc_days: Optional[int]
    r2: Optional[float]
    fit: Optional[LPPLFit] = None
    n_observations: int = 0
    search_completed: bool = True
    evaluated_candidates: int = 0
    diagnostics: Dict = field(default_factory=dict)

    @property
    def has_fit(self) -> bool:
        return self.fit is not None

    def to_dict(self) -> Dict:
        """Flat dictionary; fit parameters are merged in when a fit exists."""
        result = {}
        if self.fit is not None:
            result.update(self.fit.to_dict())
        result.update({
            'is_bubble': self.is_bubble,
            'confidence': self.confidence,
            'tc_days': self.tc_days,
            'r2': self.r2,
            'n_observations': self.n_observations,
            'search_completed': self.search_completed,
            'evaluated_candidates': self.evaluated_candidates,
        })
        if self.diagnostics:
            result['diagnostics'] = self.diagnostics
        return result


@dataclass
class _BlockOutcome:
    """Best candidate of one tc block (or the whole search after reduction)"""
    best: Optional[Tuple[float, ...]] = None   # (r2, tc, A, B, C, m, omega, phi)
    evaluated: int = 0
    completed: bool = True

    def absorb(self, other: '_BlockOutcome'):
        if other.best is not None and (self.best is None or other.best[0] > self.best[0]):
            self.best = other.best
        self.evaluated += other.evaluated
        self.completed = self.completed and other.completed


def insufficient_data_result(n_observations: int = 0) -> LPPLResult:
    """Sentinel for series that cannot be fitted (too short, non-positive prices)."""
    return LPPLResult(is_bubble=False, confidence=0.0, tc_days=None, r2=0.0,
                      n_observations=n_observations)


def _fit_tc_block(tc: float, t: np.ndarray, y: np.ndarray,
                  grid: LPPLGridSettings, deadline: Optional[float]) -> _BlockOutcome:
    outcome = _BlockOutcome()

    dt = tc - t
    if np.any(dt <= 0):
        return outcome

    n = len(y)
    omegas = np.asarray(grid.omega_values)
    phis = np.asarray(grid.phi_values)
    log_dt = np.log(dt)
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    sum_y = float(np.sum(y))

    # (ω, φ) combinations flattened in loop order: ω outer, φ inner
    angles = (omegas[:, np.newaxis, np.newaxis] * log_dt[np.newaxis, np.newaxis, :]
              + phis[np.newaxis, :, np.newaxis]).reshape(-1, n)
    cos_terms = np.cos(angles)
    omega_grid = np.repeat(omegas, len(phis))
    phi_grid = np.tile(phis, len(omegas))
    k = len(omega_grid)

    for m in grid.m_values:
        if deadline is not None and time.monotonic() >= deadline:
            outcome.completed = False
            break

        power = np.power(dt, m)
        oscillation = power[np.newaxis, :] * cos_terms

        sum_p = np.sum(power)
        sum_pp = np.dot(power, power)
        sum_py = np.dot(power, y)
        sum_o = oscillation.sum(axis=1)
        sum_po = oscillation.dot(power)
        sum_oo = np.einsum('ij,ij->i', oscillation, oscillation)
        sum_oy = oscillation.dot(y)

        xtx = np.empty((k, 3, 3))
        xtx[:, 0, 0] = n
        xtx[:, 0, 1] = xtx[:, 1, 0] = sum_p
        xtx[:, 0, 2] = xtx[:, 2, 0] = sum_o
        xtx[:, 1, 1] = sum_pp
        xtx[:, 1, 2] = xtx[:, 2, 1] = sum_po
        xtx[:, 2, 2] = sum_oo
        xty = np.column_stack([np.full(k, sum_y), np.full(k, sum_py), sum_oy])

        coefficients, solvable = batch_solve_3x3(xtx, xty, grid.singular_tolerance)
        outcome.evaluated += k

        A, B, C = coefficients[:, 0], coefficients[:, 1], coefficients[:, 2]
        with np.errstate(invalid='ignore'):
            accepted = solvable & satisfies_lppl_constraints(B, C)
        if not np.any(accepted):
            continue

        predicted = (A[:, np.newaxis] + B[:, np.newaxis] * power[np.newaxis, :]
                     + C[:, np.newaxis] * oscillation)
        ss_res = np.sum((y[np.newaxis, :] - predicted) ** 2, axis=1)
        r2 = 1 - ss_res / ss_tot if ss_tot > 0 else np.zeros(k)

        r2 = np.where(accepted & np.isfinite(r2), r2, -np.inf)
        idx = int(np.argmax(r2))
        if not np.isfinite(r2[idx]):
            continue
        if outcome.best is None or r2[idx] > outcome.best[0]:
            outcome.best = (float(r2[idx]), float(tc), float(A[idx]), float(B[idx]),
                            float(C[idx]), float(m), float(omega_grid[idx]), float(phi_grid[idx]))

    return outcome


def _fit_tc_block_star(args) -> _BlockOutcome:
    return _fit_tc_block(*args)


def optimize(prices, grid: LPPLGridSettings = DEFAULT_LPPL_GRID,
             deadline: Optional[float] = None, workers: int = 1) -> LPPLResult:
    """
    Fit the LPPL model to a price series and classify the bubble signature

    Args:
        prices: chronologically ordered positive prices
        grid: grid-search constants
        deadline: absolute time.monotonic() value; when reached the search
            stops and the best candidate found so far is used
        workers: number of processes for the tc blocks (1 = in-process)

    Returns:
        LPPLResult: zero-confidence sentinel for fewer than
        grid.min_observations points or non-positive prices
    """
    workers = check_positive_int(workers, 'workers')
    values = np.array(prices, dtype=float).ravel()

    if len(values) < grid.min_observations:
        logger.info("LPPL skipped: %d observations (< %d required)",
                    len(values), grid.min_observations)
        return insufficient_data_result(len(values))

    values = values[-grid.max_observations:]
    n = len(values)

    if not np.all(np.isfinite(values)) or np.any(values <= 0):
        logger.warning("LPPL skipped: price series contains non-positive or non-finite values")
        return insufficient_data_result(n)

    y = np.log(values)
    t = np.arange(n, dtype=float)
    tc_values = grid.tc_candidates(n)

    logger.debug("LPPL grid search: n=%d, %d tc x %d (m, omega, phi) candidates, workers=%d",
                 n, len(tc_values), grid.grid_size_per_tc, workers)

    search = _BlockOutcome()
    block_args = [(tc, t, y, grid, deadline) for tc in tc_values]

    if workers > 1 and len(block_args) > 1:
        with Pool(processes=min(workers, len(block_args))) as pool:
            outcomes = pool.map(_fit_tc_block_star, block_args)
        for outcome in outcomes:
            search.absorb(outcome)
    else:
        for args in block_args:
            search.absorb(_fit_tc_block(*args))
            if not search.completed:
                break

    if not search.completed:
        logger.warning("LPPL grid search stopped at deadline after %d of %d candidates",
                       search.evaluated, grid.grid_size(n))

    return _build_result(search, t, y, grid)


def _build_result(search: _BlockOutcome, t: np.ndarray, y: np.ndarray,
                  grid: LPPLGridSettings) -> LPPLResult:
    n = len(y)
    best = search.best

    if best is None or best[0] <= grid.min_r_squared:
        best_r2 = max(best[0], 0.0) if best is not None else 0.0
        logger.info("No usable LPPL fit (best R²=%.3f)", best_r2)
        return LPPLResult(is_bubble=False, confidence=0.0, tc_days=None, r2=best_r2,
                          n_observations=n, search_completed=search.completed,
                          evaluated_candidates=search.evaluated)

    r2, tc, A, B, C, m, omega, phi = best
    fit = LPPLFit(tc=tc, A=A, B=B, C=C, m=m, omega=omega, phi=phi, r2=r2)

    confidence = grid.confidence_from_r_squared(r2)
    tc_days = int(round(tc - n + 1))
    is_bubble = confidence > grid.min_confidence and grid.min_tc_days < tc_days < grid.max_tc_days

    fitted = lppl_function(t, tc, A, B, C, m, omega, phi)
    diagnostics = assess_statistical_significance(y, fitted, num_params=7)
    diagnostics['mse'], diagnostics['r_squared'] = calculate_fit_metrics(y, fitted)
    diagnostics['constraints'] = validate_lppl_fit(fit, n_observations=n)

    logger.info("LPPL fit: R²=%.3f tc_days=%d m=%.2f omega=%.1f confidence=%.2f bubble=%s",
                r2, tc_days, m, omega, confidence, is_bubble)

    return LPPLResult(is_bubble=bool(is_bubble), confidence=confidence, tc_days=tc_days,
                      r2=r2, fit=fit, n_observations=n,
                      search_completed=search.completed,
                      evaluated_candidates=search.evaluated,
                      diagnostics=diagnostics)
