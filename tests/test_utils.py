import logging

import pytest

from utils import (PerformanceMonitor, create_performance_report, format_bytes,
                   format_duration, get_system_info, setup_logging)


class TestPerformanceMonitor:

    def test_summary_groups_operations(self):
        monitor = PerformanceMonitor()
        for _ in range(3):
            with monitor.start_operation("prove_vote"):
                pass
        with monitor.start_operation("setup"):
            pass

        summary = monitor.get_summary()
        assert summary['total_operations'] == 4
        assert list(summary['operations']) == ["prove_vote", "setup"]
        assert summary['operations']['prove_vote']['count'] == 3
        assert summary['operations']['prove_vote']['wall']['min'] >= 0

    def test_failed_runs_are_recorded(self):
        monitor = PerformanceMonitor()
        with pytest.raises(RuntimeError):
            with monitor.start_operation("verify_vote"):
                raise RuntimeError("boom")
        assert monitor.get_summary()['operations']['verify_vote']['failures'] == 1

    def test_empty_summary(self):
        summary = PerformanceMonitor().get_summary()
        assert summary['total_operations'] == 0
        assert summary['operations'] == {}

    def test_report(self):
        monitor = PerformanceMonitor()
        with monitor.start_operation("verify_vote"):
            pass
        report = create_performance_report(monitor)
        assert "verify_vote" in report
        assert "1 operations in" in report

        monitor.reset()
        assert "No performance data available." in create_performance_report(monitor)


def test_formatting():
    assert format_duration(0.25) == "250.0ms"
    assert format_duration(90) == "1m 30.0s"
    assert format_duration(3725) == "1h 2m 5.0s"
    assert format_bytes(512) == "512.0B"
    assert format_bytes(2048) == "2.0KB"


def test_system_info():
    info = get_system_info()
    assert info['cpu_count_logical'] >= 1
    assert 'python_version' in info


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "run.log"
    setup_logging("DEBUG", log_file=log_file)
    try:
        logging.getLogger("zk_prover.test").debug("hello")
        assert log_file.exists()
    finally:
        root = logging.getLogger()
        for handler in root.handlers[:]:
            handler.close()
            root.removeHandler(handler)
