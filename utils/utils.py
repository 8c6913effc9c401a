"""
Logging setup and timing helpers for the vote prover demo
"""

import logging
import platform
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import psutil

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

_MB = 1024 * 1024


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None,
                  log_dir: Path = Path("logs")) -> logging.Logger:
    """Send all records to a timestamped log file and to stderr"""
    if log_file is None:
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = Path(log_dir) / f"vote_prover_{stamp}.log"
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    # Re-running setup must not stack handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (logging.FileHandler(log_file), logging.StreamHandler()):
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))

    logger = logging.getLogger(__name__)
    logger.info(f"Logging to {log_file} at {log_level.upper()}")
    return logger


@dataclass
class OperationSample:
    """One timed run of a prover operation"""
    operation: str
    started_at: float
    wall_seconds: float
    cpu_percent: float
    rss_mb: float
    failed: bool = False


def _describe(values: List[float]) -> Dict[str, float]:
    arr = np.asarray(values, dtype=float)
    return {
        'mean': float(arr.mean()),
        'min': float(arr.min()),
        'max': float(arr.max()),
        'std': float(arr.std()) if arr.size > 1 else 0.0,
        'total': float(arr.sum()),
    }


class PerformanceMonitor:
    """Collects samples for setup / prove / verify and summarises them"""

    def __init__(self):
        self.samples: List[OperationSample] = []
        self.process = psutil.Process()

    def start_operation(self, operation_name: str) -> 'OperationContext':
        return OperationContext(self, operation_name)

    def record(self, sample: OperationSample):
        self.samples.append(sample)

    def operations(self) -> List[str]:
        """Operation names in first-seen order"""
        seen = []
        for sample in self.samples:
            if sample.operation not in seen:
                seen.append(sample.operation)
        return seen

    def get_summary(self) -> Dict:
        summary = {
            'total_operations': len(self.samples),
            'total_duration': float(sum(s.wall_seconds for s in self.samples)),
            'operations': {},
        }
        for name in self.operations():
            runs = [s for s in self.samples if s.operation == name]
            wall = _describe([s.wall_seconds for s in runs])
            summary['operations'][name] = {
                'count': len(runs),
                'failures': sum(1 for s in runs if s.failed),
                'wall': wall,
                'peak_rss_mb': max(s.rss_mb for s in runs),
                'avg_cpu_percent': float(np.mean([s.cpu_percent for s in runs])),
                'ops_per_sec': len(runs) / wall['total'] if wall['total'] > 0 else 0.0,
            }
        return summary

    def reset(self):
        self.samples.clear()


class OperationContext:
    """Times the enclosed block and records it on exit, even if it raised"""

    def __init__(self, monitor: PerformanceMonitor, operation_name: str):
        self.monitor = monitor
        self.operation_name = operation_name
        self._start = 0.0
        self._rss_before = 0.0

    def __enter__(self):
        process = self.monitor.process
        process.cpu_percent()  # resets psutil's interval counter
        self._rss_before = process.memory_info().rss / _MB
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self._start
        process = self.monitor.process
        self.monitor.record(OperationSample(
            operation=self.operation_name,
            started_at=time.time() - elapsed,
            wall_seconds=elapsed,
            cpu_percent=process.cpu_percent(),
            rss_mb=max(self._rss_before, process.memory_info().rss / _MB),
            failed=exc_type is not None,
        ))
        return False


def get_system_info() -> Dict:
    return {
        'platform': platform.platform(),
        'python_version': platform.python_version(),
        'cpu_count_logical': psutil.cpu_count(logical=True),
        'total_memory': format_bytes(psutil.virtual_memory().total),
    }


def create_performance_report(monitor: PerformanceMonitor) -> str:
    summary = monitor.get_summary()
    width = 72
    lines = [
        "=" * width,
        "VOTE PROVER TIMINGS".center(width),
        "=" * width,
    ]
    info = get_system_info()
    lines.append(f"{info['platform']} | Python {info['python_version']} | "
                 f"{info['cpu_count_logical']} CPUs | {info['total_memory']}")

    if not summary['operations']:
        lines.append("No performance data available.")
        lines.append("=" * width)
        return "\n".join(lines)

    lines.append("")
    lines.append(f"{'operation':<14}{'runs':>6}{'mean':>12}{'min':>12}"
                 f"{'max':>12}{'peak rss':>14}")
    lines.append("-" * width)
    for name, stats in summary['operations'].items():
        wall = stats['wall']
        lines.append(
            f"{name:<14}{stats['count']:>6}"
            f"{format_duration(wall['mean']):>12}"
            f"{format_duration(wall['min']):>12}"
            f"{format_duration(wall['max']):>12}"
            f"{stats['peak_rss_mb']:>11.1f} MB")
        if stats['failures']:
            lines.append(f"{'':<14}{stats['failures']} run(s) raised")
    lines.append("-" * width)
    lines.append(f"{summary['total_operations']} operations in "
                 f"{format_duration(summary['total_duration'])}")
    lines.append("=" * width)
    return "\n".join(lines)


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, rest = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m {rest:.1f}s"
    hours, minutes = divmod(int(minutes), 60)
    return f"{hours}h {minutes}m {rest:.1f}s"


def format_bytes(size: int) -> str:
    value = float(size)
    for unit in ('B', 'KB', 'MB', 'GB'):
        if value < 1024:
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}TB"


__all__ = [
    'LOG_FORMAT',
    'OperationSample',
    'PerformanceMonitor',
    'OperationContext',
    'setup_logging',
    'get_system_info',
    'create_performance_report',
    'format_duration',
    'format_bytes',
]
