# tests/conftest.py
"""
Pytest configuration and fixtures for clspread tests.
"""

import threading
import time

import numpy as np
import pytest

from clspread import AcceleratorDevice, DeviceClass, ExecutionError


class FakeContext:
    """In-memory stand-in for ComputeContext with a configurable speed."""

    def __init__(self, device, delay=0.0, fail_at=None):
        self.device = device
        self.delay = delay
        self.fail_at = fail_at
        self.source = None
        self.entry_point = None
        self.parameters = ()
        self.executed = []
        self.returned = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def bind_kernel(self, source, entry_point):
        self.source = source
        self.entry_point = entry_point

    def bind_parameters(self, *values):
        self.parameters = tuple(values)

    def _enter(self):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)

    def _leave(self):
        with self._lock:
            self.active -= 1

    def execute(self, offset, length, local_size=None):
        self._enter()
        try:
            time.sleep(self.delay)
            if self.fail_at is not None and offset == self.fail_at:
                raise ExecutionError("device lost", device_name=self.device.name,
                                     work_range=(offset, offset + length))
            self.executed.append((offset, offset + length))
        finally:
            self._leave()

    def execute_return(self, work_size, local_size, output_offset, output_length, dtype=np.uint32):
        self._enter()
        try:
            time.sleep(self.delay)
            self.returned.append((work_size, local_size, output_offset, output_length))
            return np.arange(output_offset, output_offset + output_length, dtype=dtype)
        finally:
            self._leave()


def make_device(index=0, name=None, vendor="NVIDIA Corporation", device_class=DeviceClass.GPU,
                max_work_group_size=1024):
    return AcceleratorDevice(
        index=index,
        name=name or f"device-{index}",
        vendor=vendor,
        device_class=device_class,
        max_work_group_size=max_work_group_size,
        max_work_item_size=max_work_group_size,
        global_memory=4 * 1024**3,
        compute_units=16,
    )


@pytest.fixture
def device_factory():
    return make_device


@pytest.fixture
def fake_contexts():
    """Build ``count`` fake contexts, optionally with per-context delays."""
    def _build(count, delays=None, **kwargs):
        delays = delays or [0.0] * count
        return [FakeContext(make_device(i), delay=delays[i], **kwargs) for i in range(count)]
    return _build


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "gpu: Tests that require a real OpenCL device"
    )
    config.addinivalue_line(
        "markers", "slow: Slow tests that take significant time"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
