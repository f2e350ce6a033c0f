"""
Entry Points - command-line interface of the early-warning engine.
"""

from .main import main, build_parser, load_price_series

__all__ = ['main', 'build_parser', 'load_price_series']
