import unittest
import numpy as np

from earlywarning.critical_slowing_down.detrending import detrend, gaussian_kernel
from earlywarning.error_handling.errors import ConfigurationError


class TestDetrend(unittest.TestCase):
    """Gaussian-kernel detrending"""

    def test_constant_series(self):
        """A constant series is its own trend"""
        prices = np.full(120, 42.5)
        trend, residuals = detrend(prices, 50.0)
        np.testing.assert_allclose(trend, prices)
        np.testing.assert_allclose(residuals, 0.0, atol=1e-10)

    def test_matches_direct_weighted_mean(self):
        rng = np.random.default_rng(1)
        prices = 100 + np.cumsum(rng.normal(0, 1, 80))
        trend, residuals = detrend(prices, 7.5)

        idx = np.arange(len(prices))
        for i in (0, 17, 40, 79):
            weights = np.exp(-0.5 * ((i - idx) / 7.5) ** 2)
            self.assertAlmostEqual(trend[i], np.sum(weights * prices) / np.sum(weights), places=8)
        np.testing.assert_allclose(trend + residuals, prices)

    def test_linear_trend_interior(self):
        """Symmetric weights reproduce a straight line away from the edges"""
        prices = 10 + 0.5 * np.arange(400)
        trend, _ = detrend(prices, 20.0)
        np.testing.assert_allclose(trend[150:250], prices[150:250], atol=1e-6)

    def test_empty_and_single(self):
        trend, residuals = detrend([], 50.0)
        self.assertEqual(len(trend), 0)
        self.assertEqual(len(residuals), 0)

        trend, residuals = detrend([3.0], 50.0)
        np.testing.assert_allclose(trend, [3.0])
        np.testing.assert_allclose(residuals, [0.0])

    def test_invalid_bandwidth(self):
        for bandwidth in (0, -1.0, float('nan'), float('inf')):
            with self.assertRaises(ConfigurationError):
                detrend([1.0, 2.0, 3.0], bandwidth)
        with self.assertRaises(ConfigurationError):
            detrend([], 0)

    def test_input_not_mutated(self):
        prices = [1.0, 4.0, 2.0, 8.0, 5.0]
        detrend(prices, 2.0)
        self.assertEqual(prices, [1.0, 4.0, 2.0, 8.0, 5.0])

    def test_gaussian_kernel_peak(self):
        self.assertAlmostEqual(float(gaussian_kernel(0.0, 1.0)), 1 / np.sqrt(2 * np.pi))
        self.assertGreater(float(gaussian_kernel(0.0, 5.0)), float(gaussian_kernel(5.0, 5.0)))


if __name__ == '__main__':
    unittest.main()
