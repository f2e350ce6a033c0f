"""
Log-Periodic Power Law (LPPL) Mathematical Model

Model (Sornette, Johansen & Bouchaud 1996; Sornette 2003):

    ln p(t) = A + B(tc - t)^m + C(tc - t)^m cos(ω ln(tc - t) + φ)

valid for t < tc. The finite-time singularity at tc is the predicted regime
change; B < 0 makes the price accelerate towards it and |C| <= |B| keeps the
log-periodic oscillation subordinate to the power law.

This module also holds the canonical grid-search constants. Both the grid
ranges and the acceptance thresholds live in LPPLGridSettings so that every
consumer fits against the same grid.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..config.analysis_settings import check_positive_int
from ..error_handling.errors import ConfigurationError


def lppl_function(t, tc: float, A: float, B: float, C: float,
                  m: float, omega: float, phi: float):
    """
    LPPL model value(s) in log-price space

    Args:
        t: time index (scalar or array)
        tc: critical time
        A, B, C: linear parameters
        m: power-law exponent, 0 < m < 1
        omega: log-periodic angular frequency
        phi: phase

    Returns:
        float or np.ndarray: model values; points with tc - t <= 0 evaluate
        to A (the model is undefined there)
    """
    scalar_input = np.ndim(t) == 0
    t = np.asarray(t, dtype=float)
    dt = tc - t
    mask = dt > 0
    result = np.full(t.shape, float(A))

    valid_dt = dt[mask]
    if valid_dt.size > 0:
        power_term = np.power(valid_dt, m)
        cos_term = np.cos(omega * np.log(valid_dt) + phi)
        result[mask] = A + B * power_term + C * power_term * cos_term

    if scalar_input:
        return float(result)
    return result


def generate_fitted_curve(fit, start_t: int, end_t: int) -> List[Tuple[int, float]]:
    """
    Price-space points of a fitted LPPL curve, for plotting by the caller

    Args:
        fit: LPPLFit (or anything with tc, A, B, C, m, omega, phi), or None
        start_t: first time index
        end_t: last time index; clipped to tc - 1

    Returns:
        list of (t, price) tuples; empty when there is no fit
    """
    if fit is None:
        return []

    last_t = min(end_t, int(math.ceil(fit.tc)) - 1)
    if last_t < start_t:
        return []

    t = np.arange(start_t, last_t + 1)
    log_values = lppl_function(t, fit.tc, fit.A, fit.B, fit.C, fit.m, fit.omega, fit.phi)
    return [(int(ti), float(value)) for ti, value in zip(t, np.exp(log_values))]


@dataclass(frozen=True)
class LPPLGridSettings:
    """
    Grid-search constants for LPPL fitting

    tc candidates are offsets beyond the last observed index: with n points
    (indices 0..n-1) they are n + tc_offset_min, n + tc_offset_min + tc_step,
    ... up to n + tc_offset_max inclusive.
    """
    tc_offset_min: int = 5
    tc_offset_max: int = 200
    tc_step: int = 10
    m_values: Tuple[float, ...] = (0.15, 0.2, 0.25, 0.33, 0.4, 0.5, 0.6, 0.7, 0.8)
    omega_values: Tuple[float, ...] = (5.0, 6.0, 7.0, 8.0, 9.0, 10.0, 11.0, 12.0, 13.0)
    phi_values: Tuple[float, ...] = tuple(k * math.pi / 4 for k in range(8))

    max_observations: int = 500       # older history dilutes the fit
    min_observations: int = 100
    min_r_squared: float = 0.75       # fits at or below this are unusable
    r_squared_span: float = 0.20      # R² in [0.75, 0.95] maps onto confidence [0, 1]
    min_confidence: float = 0.3       # bubble call needs confidence above this
    min_tc_days: int = 5              # exclusive bounds on days to tc for a bubble call
    max_tc_days: int = 200
    singular_tolerance: float = 1e-10

    def __post_init__(self):
        for name in ('tc_offset_min', 'tc_offset_max', 'tc_step',
                     'max_observations', 'min_observations'):
            check_positive_int(getattr(self, name), name)

        if self.tc_offset_max < self.tc_offset_min:
            raise ConfigurationError("tc_offset_max must be >= tc_offset_min",
                                     parameter='tc_offset_max', value=self.tc_offset_max)
        if self.max_observations < self.min_observations:
            raise ConfigurationError("max_observations must be >= min_observations",
                                     parameter='max_observations', value=self.max_observations)

        for name in ('m_values', 'omega_values', 'phi_values'):
            values = tuple(float(v) for v in getattr(self, name))
            if not values:
                raise ConfigurationError(f"{name} must not be empty", parameter=name)
            object.__setattr__(self, name, values)

        if any(not 0.0 < m < 1.0 for m in self.m_values):
            raise ConfigurationError("m_values must lie in (0, 1)",
                                     parameter='m_values', value=self.m_values)
        if any(omega <= 0 for omega in self.omega_values):
            raise ConfigurationError("omega_values must be positive",
                                     parameter='omega_values', value=self.omega_values)
        if self.r_squared_span <= 0:
            raise ConfigurationError("r_squared_span must be positive",
                                     parameter='r_squared_span', value=self.r_squared_span)
        if self.singular_tolerance <= 0:
            raise ConfigurationError("singular_tolerance must be positive",
                                     parameter='singular_tolerance', value=self.singular_tolerance)

    def tc_candidates(self, n: int) -> np.ndarray:
        """Critical-time candidates for a series of n observations."""
        offsets = np.arange(self.tc_offset_min, self.tc_offset_max + 1, self.tc_step)
        return (n + offsets).astype(float)

    @property
    def grid_size_per_tc(self) -> int:
        return len(self.m_values) * len(self.omega_values) * len(self.phi_values)

    def grid_size(self, n: int) -> int:
        return len(self.tc_candidates(n)) * self.grid_size_per_tc

    def confidence_from_r_squared(self, r_squared: float) -> float:
        """Linear rescaling of R² from [min_r_squared, min_r_squared + span] to [0, 1]."""
        confidence = (r_squared - self.min_r_squared) / self.r_squared_span
        return float(min(1.0, max(0.0, confidence)))


DEFAULT_LPPL_GRID = LPPLGridSettings()
