# src/clspread/errors.py
"""
Error hierarchy for the clspread framework.

- ClSpreadError: base class for every error raised by the package
- ConfigurationError: bad filter, no devices, or an unprepared context
- CompileError: kernel source failed to build on a device
- ExecutionError: a device submission failed mid-job
- PartitionError: sizing arithmetic received input it cannot satisfy
"""

from typing import Optional


class ClSpreadError(Exception):
    """
    Base class for all clspread errors.

    Attributes:
        message: Human-readable error message
        context: Optional context dictionary for debugging
    """

    def __init__(self, message: str, context: Optional[dict] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [self.message]
        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")
        return "\n".join(lines)


class ConfigurationError(ClSpreadError):
    """Invalid device filter, empty device list, or missing kernel binding."""


class CompileError(ClSpreadError):
    """Kernel build failure on a specific device."""

    def __init__(self, message: str, device_name: Optional[str] = None, build_log: Optional[str] = None):
        self.device_name = device_name
        self.build_log = build_log
        context = {}
        if device_name:
            context["device"] = device_name
        if build_log:
            context["build_log"] = build_log.strip()
        super().__init__(f"Kernel build failed: {message}", context=context)


class ExecutionError(ClSpreadError):
    """A submission failed on a device. The chunk is not retried."""

    def __init__(self, message: str, device_name: Optional[str] = None, work_range=None):
        self.device_name = device_name
        self.work_range = work_range
        context = {}
        if device_name:
            context["device"] = device_name
        if work_range is not None:
            context["range"] = f"[{work_range[0]}, {work_range[1]})"
        super().__init__(f"Kernel execution failed: {message}", context=context)


class PartitionError(ClSpreadError):
    """Work sizing invariant violated."""
