"""
Add-on install graph construction.

The graph has two tiers. ``before_compute`` add-ons have no predecessors and
may be installed as soon as the control plane exists. Every other add-on
depends on all node groups of the platform, never a subset.
"""
import dataclasses
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..models import AddonGraphNode, AddonSpec, HelmChartSpec

logger = logging.getLogger("platformctl.addons")

VPC_CNI = "vpc-cni"
KUBE_PROXY = "kube-proxy"
POD_IDENTITY_AGENT = "eks-pod-identity-agent"
COREDNS = "coredns"

CLUSTER_AUTOSCALER = "cluster-autoscaler"
CLUSTER_AUTOSCALER_REPOSITORY = "https://kubernetes.github.io/autoscaler"
LOAD_BALANCER_CONTROLLER = "aws-load-balancer-controller"
LOAD_BALANCER_CONTROLLER_REPOSITORY = "https://aws.github.io/eks-charts"


def baseline_addons(
    has_windows_node_group: bool,
    coredns_config: Optional[Dict[str, Any]] = None,
) -> List[AddonSpec]:
    """Managed add-ons every platform gets."""
    cni_config = {"enableWindowsIpam": "true"} if has_windows_node_group else {}
    return [
        AddonSpec(name=VPC_CNI, configuration_values=cni_config, before_compute=True),
        AddonSpec(name=KUBE_PROXY),
        AddonSpec(name=POD_IDENTITY_AGENT, before_compute=True),
        AddonSpec(name=COREDNS, configuration_values=dict(coredns_config or {})),
    ]


def cluster_autoscaler_addon(cluster_name: str, version: str, region: Optional[str] = None) -> AddonGraphNode:
    """Cluster Autoscaler Helm release using tag based auto-discovery."""
    values: Dict[str, Any] = {
        'autoDiscovery': {'clusterName': cluster_name},
        'rbac': {
            'serviceAccount': {
                'create': False,
                'name': CLUSTER_AUTOSCALER,
            },
        },
        'extraArgs': {'skip-nodes-with-system-pods': False},
        'nodeSelector': {'kubernetes.io/os': 'linux'},
    }
    if region:
        values['awsRegion'] = region
    chart = HelmChartSpec(
        chart=CLUSTER_AUTOSCALER,
        repository=CLUSTER_AUTOSCALER_REPOSITORY,
        version=version,
        values=values,
    )
    return AddonGraphNode(addon=AddonSpec(name=CLUSTER_AUTOSCALER, version=version), helm_chart=chart)


def autoscaler_discovery_tags(cluster_name: str) -> Dict[str, str]:
    """Tags that enrol a node group for autoscaler auto-discovery."""
    return {
        'k8s.io/cluster-autoscaler/enabled': 'true',
        f'k8s.io/cluster-autoscaler/{cluster_name}': 'owned',
    }


def load_balancer_controller_addon(
    cluster_name: str,
    version: str,
    region: Optional[str] = None,
    vpc_id: Optional[str] = None,
) -> AddonGraphNode:
    """AWS Load Balancer Controller Helm release."""
    values: Dict[str, Any] = {'clusterName': cluster_name}
    if region:
        values['region'] = region
    if vpc_id:
        values['vpcId'] = vpc_id
    chart = HelmChartSpec(
        chart=LOAD_BALANCER_CONTROLLER,
        repository=LOAD_BALANCER_CONTROLLER_REPOSITORY,
        version=version,
        values=values,
    )
    return AddonGraphNode(addon=AddonSpec(name=LOAD_BALANCER_CONTROLLER, version=version), helm_chart=chart)


def _with_derived_values(addon: AddonSpec, derived: Optional[Mapping[str, Any]]) -> AddonSpec:
    """Lay the caller's configuration values over the derived ones."""
    if not derived:
        return addon
    merged = dict(derived)
    merged.update(addon.configuration_values)
    return dataclasses.replace(addon, configuration_values=merged)


def build_graph(
    addons: Sequence[AddonSpec],
    node_group_names: Sequence[str],
    has_windows_node_group: bool,
    coredns_config: Optional[Dict[str, Any]] = None,
    helm_addons: Sequence[AddonGraphNode] = (),
) -> List[AddonGraphNode]:
    """Build the add-on install graph.

    Baseline add-ons come first, then ``addons``, then ``helm_addons``. A
    later declaration with an existing name replaces the earlier one in
    place. When a caller redeclares a baseline add-on, the derived
    configuration values (Windows IPAM on the VPC CNI, the CoreDNS corefile)
    are kept underneath the caller's own values. Construction is purely
    structural; node groups need not exist.

    Args:
        addons: caller declared managed add-ons
        node_group_names: every node group of the platform, in order
        has_windows_node_group: enables Windows IPAM on the VPC CNI
        coredns_config: configuration values for the CoreDNS add-on
        helm_addons: Helm backed add-ons; their predecessors are recomputed

    Returns:
        Graph nodes in install-declaration order
    """
    baseline = baseline_addons(has_windows_node_group, coredns_config)
    derived = {a.name: a.configuration_values for a in baseline}

    entries: Dict[str, AddonGraphNode] = {}
    declared = [AddonGraphNode(addon=a) for a in baseline]
    declared += [AddonGraphNode(addon=_with_derived_values(a, derived.get(a.name))) for a in addons]
    declared += list(helm_addons)

    predecessors = tuple(node_group_names)
    for node in declared:
        if node.name in entries:
            logger.debug(f"Add-on {node.name} redeclared, replacing earlier declaration")
        deps = () if node.addon.before_compute else predecessors
        entries[node.name] = AddonGraphNode(addon=node.addon, predecessors=deps, helm_chart=node.helm_chart)

    return list(entries.values())


def install_tiers(graph: Sequence[AddonGraphNode]) -> List[List[AddonGraphNode]]:
    """Split a graph into ``[before_compute, after_compute]`` install tiers."""
    tiers: List[List[AddonGraphNode]] = [[], []]
    for node in graph:
        tiers[node.tier].append(node)
    return tiers
