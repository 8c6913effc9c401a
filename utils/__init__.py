"""Logging and performance helpers for the vote prover."""

from .utils import (
    setup_logging,
    PerformanceMonitor,
    create_performance_report,
    get_system_info,
    format_bytes,
    format_duration
)

__all__ = [
    'setup_logging',
    'PerformanceMonitor',
    'create_performance_report',
    'get_system_info',
    'format_bytes',
    'format_duration'
]
