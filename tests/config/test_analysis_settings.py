import os
import tempfile
import unittest
from unittest import mock

from earlywarning.config.analysis_settings import (
    AnalysisConfig,
    get_analysis_settings,
    get_analysis_config,
    load_config_from_env
)
from earlywarning.error_handling.errors import ConfigurationError

ENV_KEYS = ('EARLYWARNING_DETREND_BANDWIDTH', 'EARLYWARNING_CSD_WINDOW', 'EARLYWARNING_TAU_LOOKBACK')


class TestAnalysisSettings(unittest.TestCase):
    def test_default_settings(self):
        """Unknown presets fall back to the defaults"""
        settings = get_analysis_settings('non_existent_preset')
        self.assertEqual(settings['detrend_bandwidth'], 50.0)
        self.assertEqual(settings['csd_window'], 250)
        self.assertEqual(settings['tau_lookback'], 100)

    def test_specific_preset(self):
        config = get_analysis_config('short_history')
        self.assertEqual(config.csd_window, 60)
        self.assertEqual(config.tau_lookback, 50)

    def test_strict_unknown_preset(self):
        with self.assertRaises(ConfigurationError):
            get_analysis_config('nope', strict=True)

    def test_overrides(self):
        config = get_analysis_config(csd_window=120, tau_lookback=None)
        self.assertEqual(config.csd_window, 120)
        self.assertEqual(config.tau_lookback, 100)
        with self.assertRaises(ConfigurationError):
            get_analysis_config(window=10)

    def test_settings_copy(self):
        """Returned dictionaries can be changed without touching the presets"""
        settings = get_analysis_settings('default')
        settings['csd_window'] = 1
        self.assertEqual(get_analysis_settings('default')['csd_window'], 250)


class TestAnalysisConfig(unittest.TestCase):
    def test_defaults(self):
        config = AnalysisConfig()
        self.assertEqual(config.to_dict(),
                         {'detrend_bandwidth': 50.0, 'csd_window': 250, 'tau_lookback': 100})
        self.assertEqual(config.minimum_meaningful_length, 350)

    def test_invalid_values(self):
        for kwargs in (dict(detrend_bandwidth=0), dict(detrend_bandwidth=-5.0),
                       dict(csd_window=0), dict(csd_window=-1), dict(tau_lookback=0),
                       dict(csd_window=True), dict(detrend_bandwidth='50')):
            with self.assertRaises(ConfigurationError, msg=str(kwargs)):
                AnalysisConfig(**kwargs)

    def test_configuration_error_is_value_error(self):
        with self.assertRaises(ValueError):
            AnalysisConfig(csd_window=0)

    def test_frozen(self):
        with self.assertRaises(Exception):
            AnalysisConfig().csd_window = 10


class TestEnvironmentConfig(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.env_file = os.path.join(self.tmpdir.name, '.env')
        with open(self.env_file, 'w') as f:
            f.write('EARLYWARNING_CSD_WINDOW=80\n')

    def tearDown(self):
        self.tmpdir.cleanup()

    def clean_environ(self, **values):
        environ = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
        environ.update(values)
        return mock.patch.dict(os.environ, environ, clear=True)

    def test_env_file(self):
        with self.clean_environ():
            config = load_config_from_env(self.env_file)
        self.assertEqual(config.csd_window, 80)
        self.assertEqual(config.detrend_bandwidth, 50.0)

    def test_process_env_wins(self):
        with self.clean_environ(EARLYWARNING_CSD_WINDOW='90', EARLYWARNING_DETREND_BANDWIDTH='12.5'):
            config = load_config_from_env(self.env_file)
        self.assertEqual(config.csd_window, 90)
        self.assertEqual(config.detrend_bandwidth, 12.5)

    def test_bad_env_value(self):
        with self.clean_environ(EARLYWARNING_TAU_LOOKBACK='many'):
            with self.assertRaises(ConfigurationError):
                load_config_from_env(self.env_file)

    def test_invalid_env_value(self):
        with self.clean_environ(EARLYWARNING_DETREND_BANDWIDTH='-1'):
            with self.assertRaises(ConfigurationError):
                load_config_from_env(self.env_file)
