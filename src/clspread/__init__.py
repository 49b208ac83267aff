# src/clspread/__init__.py
"""
clspread: spread one OpenCL kernel across every available device
A multi-device scheduler that keeps heterogeneous accelerators busy
"""

__version__ = "0.1.0"

from .enums import DeviceClass, IncrementMode, ScheduleStatus
from .config import AcceleratorDevice, WorkRange, SchedulerConfig, SearchParameters
from .errors import ClSpreadError, ConfigurationError, CompileError, ExecutionError, PartitionError
from .partitioner import compute_global_size, compute_local_size, split_range, static_shares
from .kernel import KernelTemplate
from .device_manager import DeviceCatalog
from .context import ComputeContext
from .profiler import ThroughputProfiler
from .scheduler import Scheduler, ScheduleState
from .search import KeyspaceSearch

__all__ = [
    "Scheduler",
    "ScheduleState",
    "DeviceCatalog",
    "ComputeContext",
    "KernelTemplate",
    "KeyspaceSearch",
    "ThroughputProfiler",
    "AcceleratorDevice",
    "WorkRange",
    "SchedulerConfig",
    "SearchParameters",
    "DeviceClass",
    "IncrementMode",
    "ScheduleStatus",
    "ClSpreadError",
    "ConfigurationError",
    "CompileError",
    "ExecutionError",
    "PartitionError",
    "compute_global_size",
    "compute_local_size",
    "split_range",
    "static_shares",
]
