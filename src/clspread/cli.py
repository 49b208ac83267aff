# src/clspread/cli.py
"""
Command-line interface for clspread package
"""

import argparse
import psutil
import pyopencl as cl
from .device_manager import DeviceCatalog
from .enums import DeviceClass
from .errors import ConfigurationError
from .partitioner import compute_global_size, compute_local_size
from . import __version__


FILTERS = {
    'cpu': DeviceClass.CPU,
    'gpu': DeviceClass.GPU,
    'accelerator': DeviceClass.ACCELERATOR,
    'all': DeviceClass.ALL,
}


def format_bytes(bytes_value):
    """Format bytes to human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_value < 1024.0:
            return f"{bytes_value:.2f} {unit}"
        bytes_value /= 1024.0
    return f"{bytes_value:.2f} PB"


def print_system_info(catalog, device_filter):
    """Print host and OpenCL device information."""
    print(f"clspread v{__version__} - System Information")
    print("=" * 50)

    print("\nCPU Information:")
    print(f"  Physical cores: {psutil.cpu_count(logical=False)}")
    print(f"  Logical cores: {psutil.cpu_count(logical=True)}")

    vm = psutil.virtual_memory()
    print(f"\nSystem Memory:")
    print(f"  Total: {format_bytes(vm.total)}")
    print(f"  Available: {format_bytes(vm.available)} ({vm.percent:.1f}% used)")

    print(f"\nOpenCL Information:")
    print(f"  pyopencl version: {cl.VERSION_TEXT}")

    devices = catalog.discover(device_filter)
    if not devices:
        print(f"\n  No OpenCL devices match filter {device_filter.name or int(device_filter)}")
        return devices

    for d in devices:
        print(f"\n  Device {d.index}: {d.name}")
        print(f"    Vendor: {d.vendor}")
        print(f"    Class: {d.device_class.name}")
        print(f"    Compute units: {d.compute_units}")
        print(f"    Global memory: {format_bytes(d.global_memory)}")
        print(f"    Max work-group size: {d.max_work_group_size}")
        print(f"    Max work-item size: {d.max_work_item_size}")

    print("\n" + "=" * 50)
    print(f"Warp size: {catalog.warp_size}")
    print(f"Shared max local size: {catalog.max_local_size}")
    return devices


def print_sizing(catalog, requested):
    """Print the aligned global size and chosen local size for a job."""
    global_size = compute_global_size(requested, catalog.warp_size)
    local_size = compute_local_size(global_size, catalog.max_local_size)
    print(f"\nSizing for {requested} work items:")
    print(f"  Global size: {global_size}")
    print(f"  Local size: {local_size}")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="clspread: spread OpenCL work across every device",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  clspread-info                       # Show host and device information
  clspread-info --filter gpu          # Only GPUs
  clspread-info --global-size 100000  # Show work sizing for a job
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'clspread v{__version__}'
    )

    parser.add_argument(
        '--filter',
        choices=sorted(FILTERS),
        default='all',
        help='Device classes to list'
    )

    parser.add_argument(
        '--global-size',
        type=int,
        metavar='N',
        help='Show global/local sizing for N work items'
    )

    args = parser.parse_args(argv)

    catalog = DeviceCatalog()
    devices = print_system_info(catalog, FILTERS[args.filter])

    if args.global_size:
        if not devices:
            raise ConfigurationError("Cannot size a job without devices")
        print_sizing(catalog, args.global_size)

    return 0


if __name__ == "__main__":
    main()
