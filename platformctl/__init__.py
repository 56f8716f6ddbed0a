"""
platformctl - EKS platform composition engine.

Resolves a declarative platform definition (node groups, add-ons, optional
directory integration) into a fully resolved descriptor: bootstrap payloads
per node group, a two-tier add-on install graph and domain join requests.
"""

from .errors import (
    PlatformError,
    InvalidPlatformSpecError,
    MalformedLabelError,
    UnsupportedVersionError,
    BootstrapError,
    SpecLoadError,
)
from .models import (
    OSFamily,
    MachineImage,
    TaintSpec,
    TaintEffect,
    NodeGroupSpec,
    AddonSpec,
    DirectoryConfig,
    NetworkRef,
    PlatformSpec,
    ConnectionParams,
    PlatformDescriptor,
)
from .modules.composer import PlatformComposer, compose_platform

__all__ = [
    'PlatformError',
    'InvalidPlatformSpecError',
    'MalformedLabelError',
    'UnsupportedVersionError',
    'BootstrapError',
    'SpecLoadError',
    'OSFamily',
    'MachineImage',
    'TaintSpec',
    'TaintEffect',
    'NodeGroupSpec',
    'AddonSpec',
    'DirectoryConfig',
    'NetworkRef',
    'PlatformSpec',
    'ConnectionParams',
    'PlatformDescriptor',
    'PlatformComposer',
    'compose_platform',
]

__version__ = "0.1.0"
