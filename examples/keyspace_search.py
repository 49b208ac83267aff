# examples/keyspace_search.py
"""
Search a 64-bit keyspace on every GPU in the machine.

The kernel body is a stand-in: it flags keys whose low bits match MAGIC.
Replace it with a real search kernel that takes the same four arguments.
"""

import logging
import sys

from clspread import (
    DeviceClass,
    IncrementMode,
    KernelTemplate,
    KeyspaceSearch,
    Scheduler,
    SchedulerConfig,
    SearchParameters,
)


KERNEL = """
__constant uchar magic[4] = MAGIC;

__kernel void Bruteforce(ulong lower, ulong upper, uchar mode, ulong completed)
{
    ulong id = get_global_id(0);
    ulong x = lower + ((mode & 1) ? completed + id : id);
    ulong y = upper + ((mode & 2) ? completed + id : 0);
    if ((uchar)(x ^ y) == magic[0] && (uchar)((x ^ y) >> 8) == magic[1])
        printf("candidate %lu %lu\\n", x, y);
}
"""


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")

    template = KernelTemplate(KERNEL).replace_array("MAGIC", bytes.fromhex("deadbeef"))

    config = SchedulerConfig(device_filter=DeviceClass.GPU, verbose=True)
    scheduler = Scheduler.from_catalog(config=config)
    scheduler.subscribe(lambda p: print(f"\r  batch {p:6.1%}", end="", file=sys.stderr))

    params = SearchParameters(lower=0, upper=0, increment_mode=IncrementMode.LOWER)
    search = KeyspaceSearch(scheduler, params, total=1 << 40, batch_size=1 << 32)
    search.load_kernel(template, "Bruteforce")
    search.run(max_batches=4)

    for name in scheduler.profiler.device_stats:
        print(f"{name}: {scheduler.profiler.rate(name):,.0f} keys/sec")


if __name__ == "__main__":
    main()
