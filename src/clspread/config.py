# src/clspread/config.py
"""
Configuration and data structures for the clspread framework.
"""

from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional, Tuple

import numpy as np

from .enums import DeviceClass, IncrementMode

UINT64_MASK = (1 << 64) - 1


@dataclass(frozen=True)
class AcceleratorDevice:
    """Compute device information, fixed at discovery time."""
    index: int
    name: str
    vendor: str
    device_class: DeviceClass
    max_work_group_size: int
    max_work_item_size: int
    global_memory: int = 0
    compute_units: int = 0
    handle: Any = field(default=None, compare=False, repr=False)  # pyopencl.Device

    def vendor_matches(self, needle: str) -> bool:
        return needle.lower() in self.vendor.lower()


class WorkRange(NamedTuple):
    """Half-open interval [start, stop) of work items."""
    start: int
    stop: int

    @property
    def length(self) -> int:
        return self.stop - self.start


@dataclass
class SchedulerConfig:
    """Scheduler and device selection configuration."""
    device_filter: DeviceClass = DeviceClass.ALL
    integrated_vendors: Tuple[str, ...] = ("intel",)  # Dropped when a discrete GPU exists
    local_size: Optional[int] = None  # None = let the runtime pick
    enable_profiling: bool = True

    # Debug/Verbose mode
    verbose: bool = False


@dataclass
class SearchParameters:
    """Per-job scalar arguments handed to every chunk of a keyspace search."""
    lower: int
    upper: int
    increment_mode: IncrementMode = IncrementMode.NONE
    completed: int = 0

    def current_offsets(self) -> Tuple[int, int]:
        """Offsets reached so far, with unsigned 64-bit wrap-around."""
        lower, upper = self.lower, self.upper
        if self.increment_mode & IncrementMode.LOWER:
            lower = (lower + self.completed) & UINT64_MASK
        if self.increment_mode & IncrementMode.UPPER:
            upper = (upper + self.completed) & UINT64_MASK
        return lower, upper

    def as_kernel_args(self):
        """Kernel argument order: lower, upper, mode, completed."""
        return (
            np.uint64(self.lower & UINT64_MASK),
            np.uint64(self.upper & UINT64_MASK),
            np.uint8(int(self.increment_mode)),
            np.uint64(self.completed & UINT64_MASK),
        )
