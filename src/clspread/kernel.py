# src/clspread/kernel.py
"""
Kernel source templating.

Kernel sources ship with bare-word placeholders (``DATA``, ``IV0``...)
which are replaced textually before the source reaches any device.
"""

import re
from typing import Iterable

from .errors import ConfigurationError


class KernelTemplate:
    """Kernel source with named placeholders."""

    def __init__(self, source: str):
        self._source = source

    def _substitute(self, name: str, text: str) -> "KernelTemplate":
        pattern = re.compile(r"\b" + re.escape(name) + r"\b")
        source, count = pattern.subn(lambda _: text, self._source)
        if count == 0:
            raise ConfigurationError(f"Placeholder '{name}' not found in kernel source")
        self._source = source
        return self

    def replace(self, name: str, value) -> "KernelTemplate":
        """Substitute a scalar value."""
        text = ("1" if value else "0") if isinstance(value, bool) else str(value)
        return self._substitute(name, text)

    def replace_array(self, name: str, data: Iterable[int]) -> "KernelTemplate":
        """Substitute a byte array as an OpenCL initializer list."""
        items = ", ".join(f"0x{b & 0xFF:02x}" for b in bytes(data))
        return self._substitute(name, "{ " + items + " }")

    def render(self) -> str:
        return self._source

    def __str__(self):
        return self._source
