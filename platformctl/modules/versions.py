"""Kubernetes version to kubectl shim selection."""
import logging
from types import MappingProxyType
from typing import Mapping, Optional

from ..models import OSFamily, ShimResolution

logger = logging.getLogger("platformctl.versions")

DEFAULT_KUBERNETES_VERSION = "1.33"

KUBECTL_SHIMS: Mapping[str, str] = MappingProxyType({
    "1.33": "kubectl-v33",
    "1.34": "kubectl-v34",
})

EKS_OPTIMIZED_AL2023_AMI_PATTERN = "amazon-eks-node-al2023-x86_64-standard-{version}*"
EKS_OPTIMIZED_WINDOWS_AMI_PATTERN = "Windows_Server-2022-English-Core-EKS_Optimized-{version}*"


class ShimTable:
    """Exact-match lookup of the kubectl shim for a minor version.

    No semantic version comparison is done: ``"1.33.1"`` does not match
    ``"1.33"``.
    """

    def __init__(self, table: Optional[Mapping[str, str]] = None):
        self._table = MappingProxyType(dict(KUBECTL_SHIMS if table is None else table))

    @property
    def supported_versions(self):
        return tuple(self._table)

    def select(self, version: str) -> ShimResolution:
        shim_id = self._table.get(version)
        if shim_id is None:
            supported = ", ".join(self._table) or "none"
            return ShimResolution(
                version=version,
                reason=f"No kubectl shim for Kubernetes {version} (supported: {supported})",
            )
        return ShimResolution(version=version, shim_id=shim_id)


_default_table = ShimTable()


def select_shim(version: str) -> Optional[str]:
    """Return the shim id for ``version`` or ``None`` when unsupported."""
    return _default_table.select(version).shim_id


def default_image_pattern(os_family: OSFamily, version: str = DEFAULT_KUBERNETES_VERSION) -> str:
    """AMI name pattern of the EKS optimized image for an OS family."""
    if os_family == OSFamily.WINDOWS:
        return EKS_OPTIMIZED_WINDOWS_AMI_PATTERN.format(version=version)
    return EKS_OPTIMIZED_AL2023_AMI_PATTERN.format(version=version)
