# src/clspread/search.py
"""
Keyspace search driver: walks a very large search space in batches.
"""

import logging
import time
from typing import Iterator, Optional

from .config import SearchParameters
from .kernel import KernelTemplate
from .scheduler import Scheduler


logger = logging.getLogger(__name__)

UINT32_MAX = (1 << 32) - 1
UINT64_MAX = (1 << 64) - 1


class KeyspaceSearch:
    """Runs a search kernel over ``total`` keys, ``batch_size`` keys per invocation.

    Each batch gets the current :class:`SearchParameters` as kernel
    arguments, with ``completed`` telling the kernel where the batch starts
    in the overall keyspace.
    """

    def __init__(self, scheduler: Scheduler, params: SearchParameters, total: int = UINT64_MAX,
                 batch_size: int = UINT32_MAX, report_every: int = 50):
        if total <= 0 or batch_size <= 0:
            raise ValueError("total and batch_size must be positive")
        self.scheduler = scheduler
        self.params = params
        self.total = total
        self.batch_size = batch_size
        self.report_every = max(1, report_every)

    @property
    def batch_count(self) -> int:
        """Batches in the whole keyspace, including ones already completed."""
        return -(-self.total // self.batch_size)

    @property
    def completed_batches(self) -> int:
        return -(-self.params.completed // self.batch_size)

    @property
    def remaining_batches(self) -> int:
        return -(-(self.total - self.params.completed) // self.batch_size)

    def load_kernel(self, template: KernelTemplate, entry_point: str) -> None:
        logger.info("Loading kernel. This may take a while...")
        self.scheduler.set_kernel(template.render(), entry_point)

    def batches(self) -> Iterator[int]:
        """Sizes of the remaining batches; the last one may be short."""
        remaining = self.total - self.params.completed
        while remaining > 0:
            size = min(remaining, self.batch_size)
            yield size
            remaining -= size

    def run(self, max_batches: Optional[int] = None) -> int:
        """Run the remaining batches and return the number of keys covered."""
        covered = 0
        started = time.perf_counter()
        batch_started = started
        count = self.batch_count
        first = self.completed_batches
        logger.info(f"Starting search: {self.total} combinations over {count} part(s), "
                    f"{self.remaining_batches} remaining")

        for i, size in enumerate(self.batches()):
            if max_batches is not None and i >= max_batches:
                break
            self.scheduler.set_parameters(*self.params.as_kernel_args())
            self.scheduler.invoke(0, size, len(self.scheduler.contexts))
            self.params.completed += size
            covered += size

            if i % self.report_every == 0:
                now = time.perf_counter()
                elapsed = now - started
                lower, upper = self.params.current_offsets()
                speed = int(covered / elapsed) if elapsed > 0 else 0
                logger.info(f"Part {first + i}/{count}, {self.params.completed} completed in "
                            f"{now - batch_started:.2f} secs ({elapsed:.2f} secs total)")
                logger.info(f"Current offsets Lower: {lower}  Upper: {upper} Speed: {speed} h/sec")
                batch_started = now

        logger.info(f"Completed in {time.perf_counter() - started:.2f} secs")
        return covered
