# src/clspread/scheduler.py
"""
Multi-device scheduler: concurrent dispatch with demand-driven rebalancing.
"""

import logging
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import SchedulerConfig, WorkRange
from .context import ComputeContext
from .device_manager import DeviceCatalog, max_local_size, warp_size
from .enums import ScheduleStatus
from .errors import ConfigurationError, PartitionError
from .partitioner import compute_global_size, compute_local_size, split_range, static_shares
from .profiler import ThroughputProfiler


# Set up logging
logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


@dataclass
class ScheduleState:
    """Bookkeeping for one ``invoke`` call, touched only by the dispatching thread."""
    pending: Deque[WorkRange]
    total: int
    started: int = 0
    in_flight: Dict[int, Tuple[WorkRange, Future]] = field(default_factory=dict)


class Scheduler:
    """Runs one kernel across every context, keeping all devices busy.

    Submissions cannot be cancelled: once a chunk is handed to a device it
    runs to completion, even when another chunk of the same job has failed.
    """

    def __init__(self, contexts: Sequence[ComputeContext], config: Optional[SchedulerConfig] = None,
                 profiler: Optional[ThroughputProfiler] = None):
        self.contexts = list(contexts)
        self.config = config or SchedulerConfig()

        # Set up logging based on config
        package_logger = logging.getLogger("clspread")
        package_logger.setLevel(logging.INFO if self.config.verbose else logging.WARNING)

        if profiler is None and self.config.enable_profiling:
            profiler = ThroughputProfiler()
        self.profiler = profiler
        self.status = ScheduleStatus.IDLE
        self._subscribers: List[ProgressCallback] = []

    @classmethod
    def from_catalog(cls, catalog: Optional[DeviceCatalog] = None,
                     config: Optional[SchedulerConfig] = None) -> "Scheduler":
        """Discover devices and bind one context to each."""
        config = config or SchedulerConfig()
        catalog = catalog or DeviceCatalog(config.integrated_vendors)
        devices = catalog.discover(config.device_filter)
        if not devices:
            raise ConfigurationError("No compatible OpenCL device found",
                                     context={"filter": repr(config.device_filter)})
        logger.info(f"Using {len(devices)} device(s): {', '.join(d.name for d in devices)}")
        return cls([ComputeContext(d) for d in devices], config)

    @property
    def devices(self):
        return [c.device for c in self.contexts]

    @property
    def warp_size(self) -> int:
        return warp_size(self.devices)

    @property
    def max_local_size(self) -> int:
        return max_local_size(self.devices)

    def compute_global_size(self, requested: int, group_size: Optional[int] = None) -> int:
        return compute_global_size(requested, group_size or self.warp_size)

    def compute_local_size(self, global_size: int) -> int:
        return compute_local_size(global_size, self.max_local_size)

    # Progress sink

    def subscribe(self, callback: ProgressCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ProgressCallback) -> None:
        self._subscribers.remove(callback)

    def _emit(self, value: float) -> None:
        for callback in list(self._subscribers):
            callback(value)

    # Kernel setup

    def set_kernel(self, source: str, entry_point: str) -> None:
        """Compile the kernel on every context."""
        for context in self.contexts:
            context.bind_kernel(source, entry_point)

    def set_parameters(self, *values) -> None:
        for context in self.contexts:
            context.bind_parameters(*values)

    def _require_contexts(self):
        if not self.contexts:
            raise ConfigurationError("No compatible context found")

    # Chunk execution (worker threads)

    def _run_chunk(self, index: int, work_range: WorkRange) -> int:
        context = self.contexts[index]
        began = time.perf_counter()
        context.execute(work_range.start, work_range.length, self.config.local_size)
        if self.profiler is not None:
            self.profiler.record_chunk(context.device.name, work_range.length, time.perf_counter() - began)
        return index

    def _run_share(self, index: int, share: WorkRange, local_size: Optional[int], dtype) -> np.ndarray:
        context = self.contexts[index]
        began = time.perf_counter()
        result = context.execute_return(share.length, local_size, share.start, share.length, dtype)
        if self.profiler is not None and share.length:
            self.profiler.record_chunk(context.device.name, share.length, time.perf_counter() - began)
        return result

    # Work-stealing path

    def _assign(self, pool: ThreadPoolExecutor, state: ScheduleState, index: int) -> None:
        work_range = state.pending.popleft()
        state.in_flight[index] = (work_range, pool.submit(self._run_chunk, index, work_range))
        state.started += 1
        logger.debug(f"Chunk [{work_range.start}, {work_range.stop}) -> context {index}")

        # The final assignment reports 1.0 only once every chunk has finished
        if state.started < state.total:
            self._emit(state.started / state.total)

    def _collect_finished(self, state: ScheduleState, done) -> List[int]:
        freed = []
        for index, (_, future) in sorted(state.in_flight.items()):
            if future in done:
                future.result()
                freed.append(index)
        for index in freed:
            del state.in_flight[index]
        return freed

    def invoke(self, start: int, stop: int, parts: Optional[int] = None) -> None:
        """Run work items [start, stop) across all contexts.

        The range is split into ``parts`` chunks (default: one per context,
        plus a remainder chunk when needed). Each context that finishes is
        immediately handed the next unassigned chunk.
        """
        self._require_contexts()
        if stop <= start:
            raise PartitionError("Work range is empty", context={"start": start, "stop": stop})
        if parts is None:
            parts = len(self.contexts)

        try:
            if parts <= 1 or len(self.contexts) == 1:
                self.status = ScheduleStatus.DISPATCHING
                self._run_chunk(0, WorkRange(start, stop))
            else:
                self._invoke_chunked(start, stop, parts)
        except Exception:
            self.status = ScheduleStatus.IDLE
            raise

        self.status = ScheduleStatus.COMPLETE
        self._emit(1.0)

    def _invoke_chunked(self, start: int, stop: int, parts: int) -> None:
        self.status = ScheduleStatus.PLANNING
        ranges = split_range(stop - start, parts, start)
        state = ScheduleState(pending=deque(ranges), total=len(ranges))
        logger.info(f"Split [{start}, {stop}) into {state.total} chunk(s) over {len(self.contexts)} context(s)")

        # Leaving the pool waits for in-flight submissions, even on error
        with ThreadPoolExecutor(max_workers=len(self.contexts), thread_name_prefix="clspread") as pool:
            self.status = ScheduleStatus.DISPATCHING
            for index in range(min(len(self.contexts), state.total)):
                self._assign(pool, state, index)

            self.status = ScheduleStatus.DRAINING
            while state.pending:
                futures = [future for _, future in state.in_flight.values()]
                done, _ = wait(futures, return_when=FIRST_COMPLETED)
                for index in self._collect_finished(state, done):
                    if not state.pending:
                        break
                    self._assign(pool, state, index)

            wait([future for _, future in state.in_flight.values()])
            for _, future in state.in_flight.values():
                future.result()

    # Static buffer-returning path

    def invoke_return(self, work_size: int, local_size: Optional[int] = None, dtype=np.uint32) -> np.ndarray:
        """Run ``work_size`` items and return the concatenated output buffers.

        Shares are fixed up front so every context's output lands at a known
        offset; results are joined in context order, not completion order.
        """
        self._require_contexts()
        if work_size <= 0:
            raise PartitionError("Work size must be positive", context={"work_size": work_size})

        try:
            self.status = ScheduleStatus.PLANNING
            if len(self.contexts) == 1:
                self.status = ScheduleStatus.DISPATCHING
                result = self._run_share(0, WorkRange(0, work_size), local_size, dtype)
            else:
                shares = static_shares(work_size, len(self.contexts))
                with ThreadPoolExecutor(max_workers=len(self.contexts), thread_name_prefix="clspread") as pool:
                    self.status = ScheduleStatus.DISPATCHING
                    futures = [pool.submit(self._run_share, i, share, local_size, dtype)
                               for i, share in enumerate(shares)]
                    self.status = ScheduleStatus.DRAINING
                    wait(futures)
                    result = np.concatenate([future.result() for future in futures])
        except Exception:
            self.status = ScheduleStatus.IDLE
            raise

        self.status = ScheduleStatus.COMPLETE
        self._emit(1.0)
        return result
