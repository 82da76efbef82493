"""Tests for processing strategy helpers."""

import pytest

from src.domain import utils
from src.domain.utils import resolve_worker_count, should_use_parallel


@pytest.fixture
def many_cpus(monkeypatch):
    monkeypatch.setattr(utils.os, "cpu_count", lambda: 8)


class TestShouldUseParallel:
    """Test suite for should_use_parallel."""

    def test_empty_batch_is_sequential(self, many_cpus):
        assert should_use_parallel(0, max_workers=4, threshold=0) is False

    def test_below_threshold_is_sequential(self, many_cpus):
        assert should_use_parallel(100, max_workers=4, threshold=1000) is False
        assert should_use_parallel(1000, max_workers=4, threshold=1000) is False

    def test_above_threshold_is_parallel(self, many_cpus):
        assert should_use_parallel(1001, max_workers=4, threshold=1000) is True

    def test_single_worker_is_sequential(self, many_cpus):
        assert should_use_parallel(10**6, max_workers=1, threshold=0) is False

    def test_single_cpu_is_sequential(self, monkeypatch):
        """Test that single-core machines never use the pool."""
        monkeypatch.setattr(utils.os, "cpu_count", lambda: 1)
        assert should_use_parallel(10**6, max_workers=4, threshold=0) is False

    def test_unknown_cpu_count(self, monkeypatch):
        """Test that an unknown CPU count is treated as one core."""
        monkeypatch.setattr(utils.os, "cpu_count", lambda: None)
        assert should_use_parallel(10**6, threshold=0) is False


class TestResolveWorkerCount:
    """Test suite for resolve_worker_count."""

    def test_default_is_cpu_count(self, many_cpus):
        assert resolve_worker_count() == 8

    def test_explicit_count(self):
        assert resolve_worker_count(3) == 3

    def test_minimum_one(self):
        assert resolve_worker_count(0) == 1
