# src/clspread/profiler.py
"""
Throughput profiling for the clspread framework.
"""

import threading
from typing import Dict

import psutil


class ThroughputProfiler:
    """Per-device chunk statistics, fed from scheduler worker threads."""

    def __init__(self):
        self.device_stats = {}
        self.total_items = 0
        self.chunk_count = 0
        self._lock = threading.Lock()

    def record_chunk(self, device_name: str, items: int, seconds: float):
        """Record one finished chunk."""
        with self._lock:
            if device_name not in self.device_stats:
                self.device_stats[device_name] = {
                    'chunks': 0,
                    'items': 0,
                    'busy_seconds': 0.0,
                    'peak_seconds': 0.0
                }

            stats = self.device_stats[device_name]
            stats['chunks'] += 1
            stats['items'] += items
            stats['busy_seconds'] += seconds
            stats['peak_seconds'] = max(stats['peak_seconds'], seconds)

            self.total_items += items
            self.chunk_count += 1

    def rate(self, device_name: str) -> float:
        """Items per busy second for one device (0.0 if unknown)."""
        with self._lock:
            stats = self.device_stats.get(device_name)
            if not stats or stats['busy_seconds'] <= 0:
                return 0.0
            return stats['items'] / stats['busy_seconds']

    def total_rate(self) -> float:
        """Sum of the per-device rates."""
        return sum(self.rate(name) for name in list(self.device_stats))

    def reset(self):
        with self._lock:
            self.device_stats = {}
            self.total_items = 0
            self.chunk_count = 0

    @staticmethod
    def host_snapshot() -> Dict[str, float]:
        """Host CPU and memory figures (memory in MB)."""
        vm = psutil.virtual_memory()
        return {
            'cpu_count': psutil.cpu_count(logical=True) or 0,
            'total': vm.total / 1024**2,
            'available': vm.available / 1024**2,
            'percent': vm.percent
        }
