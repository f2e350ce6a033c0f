#!/usr/bin/env python3
"""
LPPL model tests
Model evaluation, fitted curves, grid constants and validity checks
"""

import math
import unittest
import numpy as np

from earlywarning.error_handling.errors import ConfigurationError
from earlywarning.fitting.grid_search import LPPLFit
from earlywarning.sornette_theory.lppl_model import (
    lppl_function,
    generate_fitted_curve,
    LPPLGridSettings,
    DEFAULT_LPPL_GRID
)
from earlywarning.sornette_theory.theory_validation import satisfies_lppl_constraints, validate_lppl_fit


class TestLPPLFunction(unittest.TestCase):
    """Mathematical form of the model"""

    def setUp(self):
        self.params = dict(tc=120.0, A=5.0, B=-0.1, C=0.02, m=0.33, omega=7.0, phi=0.0)

    def test_formula(self):
        t = 40.0
        dt = self.params['tc'] - t
        expected = (5.0 - 0.1 * dt ** 0.33 + 0.02 * dt ** 0.33 * math.cos(7.0 * math.log(dt)))
        self.assertAlmostEqual(lppl_function(t, **self.params), expected, places=12)

    def test_scalar_and_array(self):
        self.assertIsInstance(lppl_function(3.0, **self.params), float)
        values = lppl_function(np.arange(100), **self.params)
        self.assertEqual(values.shape, (100,))
        self.assertTrue(np.all(np.isfinite(values)))

    def test_accelerates_towards_tc(self):
        """B < 0: log-price rises as t approaches tc"""
        values = lppl_function(np.array([0.0, 119.0]), **dict(self.params, C=0.0))
        self.assertLess(values[0], values[1])

    def test_at_and_after_tc(self):
        values = lppl_function(np.array([120.0, 130.0]), **self.params)
        np.testing.assert_array_equal(values, [5.0, 5.0])


class TestFittedCurve(unittest.TestCase):
    """Price-space curve of a fit"""

    def setUp(self):
        self.fit = LPPLFit(tc=105.5, A=4.6, B=-0.05, C=0.01, m=0.5, omega=8.0, phi=0.0, r2=0.9)

    def test_curve_stops_before_tc(self):
        curve = generate_fitted_curve(self.fit, 0, 200)
        self.assertEqual(curve[0][0], 0)
        self.assertEqual(curve[-1][0], 105)
        self.assertTrue(all(price > 0 for _, price in curve))

    def test_values_are_exponentiated(self):
        t, price = generate_fitted_curve(self.fit, 10, 10)[0]
        expected = math.exp(lppl_function(10.0, 105.5, 4.6, -0.05, 0.01, 0.5, 8.0, 0.0))
        self.assertEqual(t, 10)
        self.assertAlmostEqual(price, expected)

    def test_no_fit(self):
        self.assertEqual(generate_fitted_curve(None, 0, 10), [])
        self.assertEqual(generate_fitted_curve(self.fit, 150, 200), [])


class TestGridSettings(unittest.TestCase):
    """Canonical grid and its validation"""

    def test_default_grid(self):
        grid = DEFAULT_LPPL_GRID
        np.testing.assert_array_equal(grid.tc_candidates(300), 300 + np.arange(5, 200, 10))
        self.assertEqual(len(grid.m_values), 9)
        self.assertEqual(grid.omega_values, tuple(float(w) for w in range(5, 14)))
        self.assertEqual(len(grid.phi_values), 8)
        self.assertAlmostEqual(grid.phi_values[-1], 7 * math.pi / 4)
        self.assertEqual(grid.grid_size_per_tc, 9 * 9 * 8)
        self.assertEqual(grid.grid_size(300), 20 * 648)

    def test_confidence_mapping(self):
        grid = DEFAULT_LPPL_GRID
        self.assertEqual(grid.confidence_from_r_squared(0.70), 0.0)
        self.assertAlmostEqual(grid.confidence_from_r_squared(0.85), 0.5)
        self.assertEqual(grid.confidence_from_r_squared(0.99), 1.0)

    def test_invalid_settings(self):
        invalid = [
            dict(tc_step=0),
            dict(tc_offset_min=50, tc_offset_max=10),
            dict(m_values=()),
            dict(m_values=(0.5, 1.2)),
            dict(omega_values=(-1.0,)),
            dict(min_observations=600),
            dict(r_squared_span=0.0),
        ]
        for kwargs in invalid:
            with self.assertRaises(ConfigurationError, msg=str(kwargs)):
                LPPLGridSettings(**kwargs)


class TestTheoryValidation(unittest.TestCase):
    """Model-validity constraints"""

    def test_vectorized_constraints(self):
        B = np.array([-1.0, -1.0, 1.0, -0.5])
        C = np.array([0.5, -1.0, 0.1, 0.6])
        np.testing.assert_array_equal(satisfies_lppl_constraints(B, C), [True, True, False, False])

    def test_validate_fit(self):
        fit = LPPLFit(tc=310.0, A=5.0, B=-0.1, C=0.05, m=0.5, omega=8.0, phi=0.0, r2=0.9)
        report = validate_lppl_fit(fit, n_observations=300)
        self.assertTrue(report['all_valid'])
        self.assertAlmostEqual(report['oscillation_ratio'], 0.5)

        report = validate_lppl_fit(fit, n_observations=400)
        self.assertFalse(report['tc_after_observations'])
        self.assertFalse(report['all_valid'])

    def test_validate_no_fit(self):
        self.assertFalse(validate_lppl_fit(None)['all_valid'])


if __name__ == '__main__':
    unittest.main()
