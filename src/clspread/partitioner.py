# src/clspread/partitioner.py
"""
Work-size arithmetic and range partitioning for multi-device execution.
"""

from typing import List

from .config import WorkRange
from .errors import PartitionError


def _require_positive(**values):
    for name, value in values.items():
        if value <= 0:
            raise PartitionError(f"{name} must be positive", context={name: value})


def compute_global_size(requested: int, group_size: int) -> int:
    """Round ``requested`` up to the next multiple of ``group_size``."""
    _require_positive(requested=requested, group_size=group_size)
    remainder = requested % group_size
    if remainder == 0:
        return requested
    return requested + group_size - remainder


def compute_local_size(global_size: int, max_group_size: int) -> int:
    """Highest factor of ``global_size`` that is <= ``max_group_size``.

    Depends only on the total job size, so call it once per job rather
    than once per chunk.
    """
    _require_positive(global_size=global_size, max_group_size=max_group_size)
    for candidate in range(max_group_size, 0, -1):
        if global_size % candidate == 0:
            return candidate
    raise PartitionError("no local size divides the global size",
                         context={"global_size": global_size, "max_group_size": max_group_size})


def split_range(total_length: int, part_count: int, start: int = 0) -> List[WorkRange]:
    """Split ``total_length`` items into ``part_count`` equal ranges plus a remainder.

    Ranges are returned in increasing offset order. When the equal parts do
    not cover everything, one extra range holding the remainder is appended
    last.
    """
    _require_positive(total_length=total_length, part_count=part_count)
    delta = total_length // part_count
    ranges = []
    if delta > 0:
        ranges = [WorkRange(start + i * delta, start + (i + 1) * delta) for i in range(part_count)]
    covered = part_count * delta
    if covered != total_length:
        ranges.append(WorkRange(start + covered, start + total_length))
    return ranges


def static_shares(work_size: int, part_count: int) -> List[WorkRange]:
    """Fixed per-part shares; the last part also absorbs the remainder.

    Used when results must land at offsets known before dispatch, so the
    parts cannot be rebalanced while running.
    """
    _require_positive(work_size=work_size, part_count=part_count)
    base, remainder = divmod(work_size, part_count)
    shares = []
    for i in range(part_count):
        size = base + remainder if i == part_count - 1 else base
        shares.append(WorkRange(base * i, base * i + size))
    return shares
