"""Kubernetes resource quantities.

Only the integer subset of the Kubernetes quantity grammar is modelled:
binary memory suffixes (``Ki``, ``Mi``, ``Gi``, ``Ti``) and whole CPU cores.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sparkpod.config import ConfigError

_QUANTITY_RE = re.compile(r"^(\d+)(Ki|Mi|Gi|Ti)?$")

MEMORY_UNITS = {"": 1, "Ki": 1024, "Mi": 1024**2, "Gi": 1024**3, "Ti": 1024**4}


def _require_positive(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{what} must be a whole number, got {value!r}")
    if value <= 0:
        raise ConfigError(f"{what} must be positive, got {value}")


@dataclass(frozen=True)
class Quantity:
    """An integer Kubernetes quantity such as ``456Mi`` or ``2``."""

    amount: int
    unit: str = ""

    def __post_init__(self) -> None:
        if self.unit not in MEMORY_UNITS:
            raise ConfigError(f"Unsupported quantity unit: {self.unit!r}")
        _require_positive(self.amount, "Quantity amount")

    def __str__(self) -> str:
        return f"{self.amount}{self.unit}"

    @classmethod
    def parse(cls, text: str) -> Quantity:
        """Parse a quantity string.

        Raises:
            ConfigError: If the string is not an integer quantity with a
                supported suffix.
        """
        match = _QUANTITY_RE.match(text.strip())
        if not match:
            raise ConfigError(f"Invalid quantity: {text!r}")
        return cls(int(match.group(1)), match.group(2) or "")

    def to_bytes(self) -> int:
        return self.amount * MEMORY_UNITS[self.unit]

    def to_mib(self) -> int:
        """Whole MiB, truncating sub-MiB remainders."""
        return self.to_bytes() // MEMORY_UNITS["Mi"]


def format_memory_mib(mib: int) -> str:
    """Render a memory amount in MiB, e.g. ``456`` -> ``"456Mi"``."""
    _require_positive(mib, "Memory")
    return str(Quantity(mib, "Mi"))


def format_cpu(cores: int) -> str:
    """Render a whole CPU core count, e.g. ``2`` -> ``"2"``."""
    _require_positive(cores, "CPU cores")
    return str(Quantity(cores))
