"""
Market scan module.

Provides the scan configuration (dataclass + YAML persistence), the
single-use ScanSession that drives a full scan, and plain-text reporting.
"""
from .config import ScanConfig
from .config_loader import load_config_from_yaml, save_config_to_yaml
from .session import ScanSession, ScanReport, ScanSessionError, SORT_KEYS
from .report import (
    results_to_frame,
    trades_to_frame,
    format_results_table,
    format_summary,
    format_sentiment,
)

__all__ = [
    'ScanConfig',
    'load_config_from_yaml',
    'save_config_to_yaml',
    'ScanSession',
    'ScanReport',
    'ScanSessionError',
    'SORT_KEYS',
    'results_to_frame',
    'trades_to_frame',
    'format_results_table',
    'format_summary',
    'format_sentiment',
]
