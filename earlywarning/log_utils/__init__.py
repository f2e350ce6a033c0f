from .formatters import AnalysisFormatter, DetailedAnalysisFormatter
from .custom_handlers import (
    AnalysisFileHandler,
    RotatingAnalysisFileHandler,
    setup_analysis_logging
)

__all__ = [
    'AnalysisFormatter',
    'DetailedAnalysisFormatter',
    'AnalysisFileHandler',
    'RotatingAnalysisFileHandler',
    'setup_analysis_logging'
]
