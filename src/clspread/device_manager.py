# src/clspread/device_manager.py
"""
Device discovery and filtering for the clspread framework.
"""

import logging
from typing import List, Optional, Sequence

import pyopencl as cl

from .config import AcceleratorDevice
from .enums import DeviceClass
from .errors import ConfigurationError


logger = logging.getLogger(__name__)


def _validate_filter(device_filter) -> DeviceClass:
    if isinstance(device_filter, bool) or not isinstance(device_filter, int):
        raise ConfigurationError("Device filter must be a DeviceClass bitmask",
                                 context={"filter": repr(device_filter)})
    if int(device_filter) & DeviceClass.ALL == 0:
        raise ConfigurationError("Device filter selects no device class",
                                 context={"filter": int(device_filter)})
    return DeviceClass(int(device_filter) & DeviceClass.ALL)


class DeviceCatalog:
    """Enumerates OpenCL accelerators and selects the ones a job should use."""

    def __init__(self, integrated_vendors: Sequence[str] = ("intel",)):
        self.integrated_vendors = tuple(integrated_vendors)
        self.devices: List[AcceleratorDevice] = []

    def _enumerate_devices(self) -> List[AcceleratorDevice]:
        """Enumerate every device on every platform."""
        devices = []
        try:
            platforms = cl.get_platforms()
        except cl.Error as exc:
            # No ICD loader or no platform installed: PLATFORM_NOT_FOUND_KHR
            logger.warning(f"No OpenCL platform available: {exc}")
            return devices

        for platform in platforms:
            try:
                platform_devices = platform.get_devices()
            except cl.Error as exc:
                # Platforms without devices raise DEVICE_NOT_FOUND
                logger.warning(f"Skipping OpenCL platform {platform.name!r}: {exc}")
                continue

            for dev in platform_devices:
                device_class = DeviceClass(int(dev.type) & DeviceClass.ALL) or DeviceClass.CUSTOM
                devices.append(AcceleratorDevice(
                    index=len(devices),
                    name=dev.name.strip(),
                    vendor=dev.vendor.strip(),
                    device_class=device_class,
                    max_work_group_size=int(dev.max_work_group_size),
                    max_work_item_size=int(max(dev.max_work_item_sizes)),
                    global_memory=int(dev.global_mem_size),
                    compute_units=int(dev.max_compute_units),
                    handle=dev,
                ))
        return devices

    def _is_integrated(self, device: AcceleratorDevice) -> bool:
        return any(device.vendor_matches(v) for v in self.integrated_vendors)

    def discover(self, device_filter=DeviceClass.ALL) -> List[AcceleratorDevice]:
        """Return the devices matching ``device_filter``, in enumeration order."""
        device_filter = _validate_filter(device_filter)
        selected = [d for d in self._enumerate_devices() if d.device_class & device_filter]

        # Drop integrated graphics when a discrete GPU is present
        if device_filter == DeviceClass.GPU and not all(self._is_integrated(d) for d in selected):
            excluded = [d for d in selected if self._is_integrated(d)]
            for d in excluded:
                logger.info(f"Excluding integrated device {d.name} ({d.vendor})")
            selected = [d for d in selected if not self._is_integrated(d)]

        if not selected:
            logger.warning(f"No OpenCL devices match filter {device_filter!r}")

        self.devices = selected
        return list(selected)

    @property
    def has_nvidia(self) -> bool:
        return any(d.vendor_matches("nvidia") for d in self.devices)

    @property
    def has_amd(self) -> bool:
        return any(d.vendor_matches("amd") for d in self.devices)

    @property
    def warp_size(self) -> int:
        return warp_size(self.devices)

    @property
    def max_local_size(self) -> int:
        return max_local_size(self.devices)


def warp_size(devices: Sequence[AcceleratorDevice]) -> int:
    """Wavefront width if every device is AMD, warp width otherwise."""
    if devices and all(d.vendor_matches("amd") for d in devices):
        return 64
    return 32


def max_local_size(devices: Optional[Sequence[AcceleratorDevice]]) -> int:
    """Largest work-group size every device supports."""
    if not devices:
        raise ConfigurationError("No devices selected")
    return min(d.max_work_group_size for d in devices)
