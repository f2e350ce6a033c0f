# earlywarning/config/analysis_settings.py

import math
import numbers
import os
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from dotenv import load_dotenv

from ..error_handling.errors import ConfigurationError

ANALYSIS_SETTINGS = {
    'default': {
        'detrend_bandwidth': 50.0,  # Gaussian kernel standard deviation (steps)
        'csd_window': 250,          # rolling AR(1) / variance window
        'tau_lookback': 100         # trailing AR(1) points for Kendall's tau
    },
    'short_history': {
        'detrend_bandwidth': 20.0,
        'csd_window': 60,
        'tau_lookback': 50
    }
}

ENV_PREFIX = 'EARLYWARNING_'


def check_positive_bandwidth(bandwidth, name: str = 'detrend_bandwidth') -> float:
    """Return bandwidth as float or raise ConfigurationError."""
    if isinstance(bandwidth, bool) or not isinstance(bandwidth, numbers.Real):
        raise ConfigurationError(f"{name} must be a real number, got {bandwidth!r}",
                                 parameter=name, value=bandwidth)
    if not math.isfinite(bandwidth) or bandwidth <= 0:
        raise ConfigurationError(f"{name} must be a positive finite number, got {bandwidth!r}",
                                 parameter=name, value=bandwidth)
    return float(bandwidth)


def check_positive_int(value, name: str) -> int:
    """Return value as int or raise ConfigurationError."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}",
                                 parameter=name, value=value)
    if value < 1:
        raise ConfigurationError(f"{name} must be >= 1, got {value!r}",
                                 parameter=name, value=value)
    return int(value)


@dataclass(frozen=True)
class AnalysisConfig:
    """CSD tunables. Immutable; validated on construction."""
    detrend_bandwidth: float = 50.0
    csd_window: int = 250
    tau_lookback: int = 100

    def __post_init__(self):
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, 'detrend_bandwidth',
                           check_positive_bandwidth(self.detrend_bandwidth))
        object.__setattr__(self, 'csd_window',
                           check_positive_int(self.csd_window, 'csd_window'))
        object.__setattr__(self, 'tau_lookback',
                           check_positive_int(self.tau_lookback, 'tau_lookback'))

    @property
    def minimum_meaningful_length(self) -> int:
        """Series length from which Kendall's tau sees a full lookback."""
        return self.csd_window + self.tau_lookback

    def to_dict(self) -> Dict:
        return asdict(self)


def get_analysis_settings(preset: str) -> Dict:
    """
    Return the raw settings of a named preset

    Parameters:
    -----------
    preset : str
        preset name (e.g. 'short_history')

    Returns:
    --------
    Dict
        settings dictionary; unknown names fall back to 'default'
    """
    return dict(ANALYSIS_SETTINGS.get(preset, ANALYSIS_SETTINGS['default']))


def get_analysis_config(preset: str = 'default', strict: bool = False, **overrides) -> AnalysisConfig:
    """
    Build an AnalysisConfig from a preset plus explicit overrides

    Args:
        preset: preset name in ANALYSIS_SETTINGS
        strict: raise ConfigurationError for unknown presets instead of
            falling back to 'default'
        **overrides: detrend_bandwidth / csd_window / tau_lookback; None values
            are ignored

    Returns:
        AnalysisConfig
    """
    if strict and preset not in ANALYSIS_SETTINGS:
        raise ConfigurationError(
            f"Unknown analysis preset: {preset} (available: {', '.join(sorted(ANALYSIS_SETTINGS))})",
            parameter='preset', value=preset)

    settings = get_analysis_settings(preset)
    for key, value in overrides.items():
        if key not in settings:
            raise ConfigurationError(f"Unknown configuration field: {key}", parameter=key, value=value)
        if value is not None:
            settings[key] = value
    return AnalysisConfig(**settings)


def _parse_env_value(name: str, raw: str, kind):
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} is not a valid {kind.__name__}: {raw!r}",
                                 parameter=name, value=raw) from None


def load_config_from_env(env_file: Optional[str] = None, preset: str = 'default') -> AnalysisConfig:
    """
    Load configuration from environment variables (and a .env file)

    Recognized variables:
        EARLYWARNING_DETREND_BANDWIDTH, EARLYWARNING_CSD_WINDOW,
        EARLYWARNING_TAU_LOOKBACK

    Variables already set in the process environment win over the .env file.
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    overrides = {}
    for field_name, kind in (('detrend_bandwidth', float),
                             ('csd_window', int),
                             ('tau_lookback', int)):
        env_name = f"{ENV_PREFIX}{field_name.upper()}"
        raw = os.getenv(env_name)
        if raw is not None and raw.strip() != '':
            overrides[field_name] = _parse_env_value(env_name, raw.strip(), kind)

    return get_analysis_config(preset, **overrides)
