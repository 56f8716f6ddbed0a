"""
Pod capacity lookup for EC2 instance types.

Values follow the Amazon VPC CNI ``eni-max-pods.txt`` table, restricted to the
c5, c6g, m5, m6g, r5, r6g, t3 and t4g families.
"""
import logging
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

logger = logging.getLogger("platformctl.capacity")

DEFAULT_MAX_PODS = 17

ENI_MAX_PODS: Mapping[str, int] = MappingProxyType({
    # C5 family (Compute Optimized - x86)
    'c5.large': 29,
    'c5.xlarge': 58,
    'c5.2xlarge': 58,
    'c5.4xlarge': 234,
    'c5.9xlarge': 234,
    'c5.12xlarge': 234,
    'c5.18xlarge': 737,
    'c5.24xlarge': 737,
    'c5.metal': 737,

    # C6G family (Compute Optimized - ARM Graviton2)
    'c6g.medium': 8,
    'c6g.large': 29,
    'c6g.xlarge': 58,
    'c6g.2xlarge': 58,
    'c6g.4xlarge': 234,
    'c6g.8xlarge': 234,
    'c6g.12xlarge': 234,
    'c6g.16xlarge': 737,
    'c6g.metal': 737,

    # M5 family (General Purpose - x86)
    'm5.large': 29,
    'm5.xlarge': 58,
    'm5.2xlarge': 58,
    'm5.4xlarge': 234,
    'm5.8xlarge': 234,
    'm5.12xlarge': 234,
    'm5.16xlarge': 737,
    'm5.24xlarge': 737,
    'm5.metal': 737,

    # M6G family (General Purpose - ARM Graviton2)
    'm6g.medium': 8,
    'm6g.large': 29,
    'm6g.xlarge': 58,
    'm6g.2xlarge': 58,
    'm6g.4xlarge': 234,
    'm6g.8xlarge': 234,
    'm6g.12xlarge': 234,
    'm6g.16xlarge': 737,
    'm6g.metal': 737,

    # R5 family (Memory Optimized - x86)
    'r5.large': 29,
    'r5.xlarge': 58,
    'r5.2xlarge': 58,
    'r5.4xlarge': 234,
    'r5.8xlarge': 234,
    'r5.12xlarge': 234,
    'r5.16xlarge': 737,
    'r5.24xlarge': 737,
    'r5.metal': 737,

    # R6G family (Memory Optimized - ARM Graviton2)
    'r6g.medium': 8,
    'r6g.large': 29,
    'r6g.xlarge': 58,
    'r6g.2xlarge': 58,
    'r6g.4xlarge': 234,
    'r6g.8xlarge': 234,
    'r6g.12xlarge': 234,
    'r6g.16xlarge': 737,
    'r6g.metal': 737,

    # T3 family (Burstable - x86)
    't3.nano': 4,
    't3.micro': 4,
    't3.small': 11,
    't3.medium': 17,
    't3.large': 35,
    't3.xlarge': 58,
    't3.2xlarge': 58,

    # T4G family (Burstable - ARM Graviton2)
    't4g.nano': 4,
    't4g.micro': 4,
    't4g.small': 11,
    't4g.medium': 17,
    't4g.large': 35,
    't4g.xlarge': 58,
    't4g.2xlarge': 58,
})


class CapacityTable:
    """Read-only instance type to max pods lookup."""

    def __init__(self, table: Optional[Mapping[str, int]] = None):
        self._table = MappingProxyType(dict(ENI_MAX_PODS if table is None else table))

    def __contains__(self, instance_type: str) -> bool:
        return instance_type in self._table

    def __len__(self) -> int:
        return len(self._table)

    def max_pods(self, instance_type: str, default: int = DEFAULT_MAX_PODS) -> int:
        """Return the pod ceiling for an instance type, or ``default`` if unknown.

        Lookups are exact and case-sensitive.
        """
        value = self._table.get(instance_type)
        if value is None:
            logger.debug(f"Instance type {instance_type!r} not in ENI table, using {default}")
            return default
        return value

    def effective_max_pods(self, instance_types: Iterable[str], default: int = DEFAULT_MAX_PODS) -> int:
        """Return the smallest pod ceiling across a node group's instance types."""
        values = [self.max_pods(t, default) for t in instance_types]
        if not values:
            raise ValueError("At least one instance type is required")
        return min(values)


_default_table = CapacityTable()


def max_pods(instance_type: str, default: int = DEFAULT_MAX_PODS) -> int:
    return _default_table.max_pods(instance_type, default)


def effective_max_pods(instance_types: Iterable[str], default: int = DEFAULT_MAX_PODS) -> int:
    return _default_table.effective_max_pods(instance_types, default)
