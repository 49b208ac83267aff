# src/clspread/context.py
"""
Binding of one accelerator to one compiled kernel.
"""

import logging
from typing import Optional, Tuple

import numpy as np
import pyopencl as cl

from .config import AcceleratorDevice
from .errors import CompileError, ConfigurationError, ExecutionError


logger = logging.getLogger(__name__)


def _local_shape(local_size: Optional[int]) -> Optional[Tuple[int]]:
    # None or negative means the runtime picks the work-group size
    if local_size is None or local_size <= 0:
        return None
    return (int(local_size),)


class ComputeContext:
    """One device, one kernel, one bound parameter list.

    Callers must not issue concurrent invocations on the same context;
    the scheduler guarantees at most one outstanding submission each.
    """

    def __init__(self, device: AcceleratorDevice):
        self.device = device
        self.entry_point = None
        self.parameters: Tuple = ()
        self._cl_context = None
        self._queue = None
        self._program = None
        self._kernel = None

    def __repr__(self):
        return f"ComputeContext({self.device.name!r}, kernel={self.entry_point!r})"

    def _ensure_queue(self):
        if self._queue is None:
            try:
                cl_context = cl.Context(devices=[self.device.handle])
                queue = cl.CommandQueue(cl_context)
            except cl.Error as exc:
                raise CompileError(f"cannot create context: {exc}", device_name=self.device.name) from exc
            self._cl_context = cl_context
            self._queue = queue
        return self._queue

    def bind_kernel(self, source: str, entry_point: str) -> None:
        """Compile ``source`` and select ``entry_point``, replacing any previous kernel."""
        self._ensure_queue()
        try:
            program = cl.Program(self._cl_context, source)
        except cl.Error as exc:
            raise CompileError(f"cannot create program: {exc}", device_name=self.device.name) from exc
        try:
            program.build()
        except cl.Error as exc:
            try:
                build_log = program.get_build_info(self.device.handle, cl.program_build_info.LOG)
            except cl.Error:
                build_log = None
            raise CompileError(str(exc), device_name=self.device.name, build_log=build_log) from exc

        try:
            kernel = cl.Kernel(program, entry_point)
        except cl.Error as exc:
            raise CompileError(f"entry point '{entry_point}' unavailable: {exc}",
                               device_name=self.device.name) from exc

        self._program = program
        self._kernel = kernel
        self.entry_point = entry_point
        logger.debug(f"Bound kernel {entry_point} on {self.device.name}")

    def bind_parameters(self, *values) -> None:
        """Arguments passed, in order, to every following invocation."""
        self.parameters = tuple(values)

    def _require_kernel(self):
        if self._kernel is None:
            raise ConfigurationError("No kernel bound to context", context={"device": self.device.name})
        return self._kernel

    def execute(self, offset: int, length: int, local_size: Optional[int] = None) -> None:
        """Run items [offset, offset + length) and block until the device finishes."""
        kernel = self._require_kernel()
        if length <= 0:
            return
        try:
            kernel.set_args(*self.parameters)
            event = cl.enqueue_nd_range_kernel(
                self._queue, kernel, (int(length),), _local_shape(local_size),
                global_work_offset=(int(offset),),
            )
            event.wait()
        except cl.Error as exc:
            raise ExecutionError(str(exc), device_name=self.device.name,
                                 work_range=(offset, offset + length)) from exc

    def execute_return(self, work_size: int, local_size: Optional[int], output_offset: int,
                       output_length: int, dtype=np.uint32) -> np.ndarray:
        """Run ``work_size`` items at ``output_offset`` and read back the output buffer.

        The output buffer is appended as the last kernel argument, after the
        bound parameters.
        """
        kernel = self._require_kernel()
        output = np.zeros(output_length, dtype=dtype)
        if work_size <= 0 or output_length <= 0:
            return output
        try:
            buffer = cl.Buffer(self._cl_context, cl.mem_flags.WRITE_ONLY, size=output.nbytes)
            kernel.set_args(*self.parameters, buffer)
            cl.enqueue_nd_range_kernel(
                self._queue, kernel, (int(work_size),), _local_shape(local_size),
                global_work_offset=(int(output_offset),),
            )
            cl.enqueue_copy(self._queue, output, buffer).wait()
        except cl.Error as exc:
            raise ExecutionError(str(exc), device_name=self.device.name,
                                 work_range=(output_offset, output_offset + work_size)) from exc
        return output
