"""Driver memory overhead policy.

The driver container needs headroom beyond the JVM heap (thread stacks,
direct buffers, and for Python/R drivers the interpreter process). The
overhead is a fraction of the requested memory, with a fixed floor.

    factor   = override or 0.1 (JVM) or 0.4 (Python/R)
    overhead = max(requested * factor, 384 MiB)
    total    = requested + overhead        # request == limit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sparkpod._constants import (
    JVM_MEMORY_OVERHEAD_FACTOR,
    MEMORY_OVERHEAD_MIN_MIB,
    NON_JVM_MEMORY_OVERHEAD_FACTOR,
)
from sparkpod.config import ConfigError, MainAppResource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemoryOverhead:
    """Outcome of the overhead policy, all amounts in MiB."""

    requested_mib: int
    factor: float
    overhead_mib: int

    @property
    def total_mib(self) -> int:
        return self.requested_mib + self.overhead_mib

    @property
    def factor_property(self) -> str:
        """Factor as written back into the Spark configuration (e.g. ``"0.1"``)."""
        return str(self.factor)


def default_overhead_factor(
    resource: MainAppResource,
    jvm_factor: float = JVM_MEMORY_OVERHEAD_FACTOR,
    non_jvm_factor: float = NON_JVM_MEMORY_OVERHEAD_FACTOR,
) -> float:
    """Return the overhead factor for a main application resource kind."""
    return jvm_factor if resource.is_jvm else non_jvm_factor


def _scaled_mib(requested_mib: int, factor: float) -> int:
    # Decimal keeps 4096 * 0.1 at exactly 409.6 before rounding to whole MiB
    scaled = Decimal(requested_mib) * Decimal(str(factor))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_memory_overhead(
    requested_mib: int,
    resource: MainAppResource,
    factor_override: float | None = None,
    explicit_overhead_mib: int | None = None,
    min_overhead_mib: int = MEMORY_OVERHEAD_MIN_MIB,
    jvm_factor: float = JVM_MEMORY_OVERHEAD_FACTOR,
    non_jvm_factor: float = NON_JVM_MEMORY_OVERHEAD_FACTOR,
) -> MemoryOverhead:
    """Compute the driver memory overhead.

    Args:
        requested_mib: Requested driver memory in MiB (> 0)
        resource: Main application resource; selects the default factor
        factor_override: User factor in (0, 1); wins over the default
        explicit_overhead_mib: Fixed overhead in MiB; bypasses factor and floor
        min_overhead_mib: Floor applied to factor-derived overhead
        jvm_factor: Default factor for JVM resources
        non_jvm_factor: Default factor for Python and R resources

    Returns:
        MemoryOverhead with the chosen factor and overhead

    Raises:
        ConfigError: If an amount is not positive or the override is out of range
    """
    if requested_mib <= 0:
        raise ConfigError(f"Driver memory must be positive, got {requested_mib} MiB")

    if factor_override is not None:
        if not 0 < factor_override < 1:
            raise ConfigError(
                f"Memory overhead factor must be between 0 and 1 (exclusive), got {factor_override}"
            )
        factor = factor_override
        logger.info(
            "Using memory overhead factor override: %s (default: %s)",
            factor,
            default_overhead_factor(resource, jvm_factor, non_jvm_factor),
        )
    else:
        factor = default_overhead_factor(resource, jvm_factor, non_jvm_factor)

    if explicit_overhead_mib is not None:
        if explicit_overhead_mib <= 0:
            raise ConfigError(
                f"Driver memory overhead must be positive, got {explicit_overhead_mib} MiB"
            )
        logger.info("Using explicit driver memory overhead: %d MiB", explicit_overhead_mib)
        overhead = explicit_overhead_mib
    else:
        overhead = max(_scaled_mib(requested_mib, factor), min_overhead_mib)

    result = MemoryOverhead(requested_mib=requested_mib, factor=factor, overhead_mib=overhead)
    logger.debug(
        "Driver memory: %d MiB + %d MiB overhead (factor %s) = %d MiB",
        requested_mib,
        overhead,
        factor,
        result.total_mib,
    )
    return result
