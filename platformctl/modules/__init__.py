"""Platform composition engine."""
from .capacity import CapacityTable, ENI_MAX_PODS, DEFAULT_MAX_PODS, max_pods, effective_max_pods
from .versions import ShimTable, KUBECTL_SHIMS, DEFAULT_KUBERNETES_VERSION, select_shim, default_image_pattern
from .bootstrap import (
    BootstrapDocument,
    build_node_labels,
    bootstrap_for_node_group,
    generate_bootstrap,
    render_linux,
    render_windows,
    validate_labels,
    validate_machine_labels,
)
from .coredns import generate_coredns_config
from .addons import build_graph, install_tiers, baseline_addons
from .domain_join import domain_join_request, windows_role_mapping
from .composer import PlatformComposer, compose_platform, validate_spec

__all__ = [
    'CapacityTable',
    'ENI_MAX_PODS',
    'DEFAULT_MAX_PODS',
    'max_pods',
    'effective_max_pods',
    'ShimTable',
    'KUBECTL_SHIMS',
    'DEFAULT_KUBERNETES_VERSION',
    'select_shim',
    'default_image_pattern',
    'BootstrapDocument',
    'build_node_labels',
    'bootstrap_for_node_group',
    'generate_bootstrap',
    'render_linux',
    'render_windows',
    'validate_labels',
    'validate_machine_labels',
    'generate_coredns_config',
    'build_graph',
    'install_tiers',
    'baseline_addons',
    'domain_join_request',
    'windows_role_mapping',
    'PlatformComposer',
    'compose_platform',
    'validate_spec',
]
