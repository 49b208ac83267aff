# src/clspread/enums.py
"""
Enumeration types for the clspread framework.
"""

from enum import Enum, IntFlag


class DeviceClass(IntFlag):
    """Device classes, usable as a filter bitmask.

    Bit values mirror the OpenCL ``CL_DEVICE_TYPE_*`` constants so a raw
    ``pyopencl.device_type`` value can be converted directly.
    """
    DEFAULT = 1
    CPU = 2
    GPU = 4
    ACCELERATOR = 8
    CUSTOM = 16
    ALL = CPU | GPU | ACCELERATOR | CUSTOM


class IncrementMode(IntFlag):
    """Which search offsets advance with the completed count."""
    NONE = 0
    LOWER = 1
    UPPER = 2
    BOTH = LOWER | UPPER


class ScheduleStatus(Enum):
    """Lifecycle of a single scheduler job."""
    IDLE = "idle"
    PLANNING = "planning"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    COMPLETE = "complete"
