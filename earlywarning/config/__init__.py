"""
Configuration - CSD tunables, named presets and environment overrides.
"""

from .analysis_settings import (
    ANALYSIS_SETTINGS,
    AnalysisConfig,
    get_analysis_settings,
    get_analysis_config,
    load_config_from_env,
    check_positive_bandwidth,
    check_positive_int
)

__all__ = [
    'ANALYSIS_SETTINGS',
    'AnalysisConfig',
    'get_analysis_settings',
    'get_analysis_config',
    'load_config_from_env',
    'check_positive_bandwidth',
    'check_positive_int'
]
