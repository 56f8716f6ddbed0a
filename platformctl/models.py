"""
Data models for platform composition.

Inputs (``PlatformSpec`` and friends) and outputs (``PlatformDescriptor``)
are frozen dataclasses. Map fields are copied into read-only views on
construction, so later changes to the caller's dicts do not leak in, and
they take no part in hashing. Label maps keep insertion order because the
order ends up in the kubelet ``--node-labels`` flag.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import UnsupportedVersionError


def _freeze(obj, *names):
    for name in names:
        object.__setattr__(obj, name, MappingProxyType(dict(getattr(obj, name))))


class OSFamily(str, Enum):
    """Operating system family of a machine image."""
    LINUX = 'linux'
    WINDOWS = 'windows'


class TaintEffect(str, Enum):
    """Kubernetes taint effects as named by the EKS node group API."""
    NO_SCHEDULE = 'NO_SCHEDULE'
    PREFER_NO_SCHEDULE = 'PREFER_NO_SCHEDULE'
    NO_EXECUTE = 'NO_EXECUTE'


@dataclass(frozen=True)
class MachineImage:
    """Reference to a machine image and the OS family it boots."""
    image_id: str
    os_family: OSFamily = OSFamily.LINUX

    @classmethod
    def linux(cls, image_id: str) -> 'MachineImage':
        return cls(image_id=image_id, os_family=OSFamily.LINUX)

    @classmethod
    def windows(cls, image_id: str) -> 'MachineImage':
        return cls(image_id=image_id, os_family=OSFamily.WINDOWS)


@dataclass(frozen=True)
class TaintSpec:
    key: str
    effect: TaintEffect = TaintEffect.NO_SCHEDULE
    value: Optional[str] = None


@dataclass(frozen=True)
class NodeGroupSpec:
    """Declarative description of a managed node group."""
    name: str
    machine_image: MachineImage
    instance_types: Tuple[str, ...] = ('t3.medium',)
    min_size: int = 1
    max_size: int = 3
    desired_size: int = 2
    labels: Mapping[str, str] = field(default_factory=dict, hash=False)
    taints: Tuple[TaintSpec, ...] = ()
    enable_domain_join: bool = False

    def __post_init__(self):
        _freeze(self, 'labels')

    @property
    def os_family(self) -> OSFamily:
        return self.machine_image.os_family


@dataclass(frozen=True)
class AddonSpec:
    """An EKS managed add-on declaration.

    ``before_compute`` add-ons are installed without waiting for node groups.
    """
    name: str
    version: Optional[str] = None
    configuration_values: Mapping[str, Any] = field(default_factory=dict, hash=False)
    before_compute: bool = False

    def __post_init__(self):
        _freeze(self, 'configuration_values')


@dataclass(frozen=True)
class HelmChartSpec:
    """A Helm release installed by the add-on collaborator."""
    chart: str
    repository: str
    version: str
    namespace: str = 'kube-system'
    release: Optional[str] = None
    values: Mapping[str, Any] = field(default_factory=dict, hash=False)
    wait: bool = True
    timeout_minutes: int = 15

    def __post_init__(self):
        _freeze(self, 'values')

    @property
    def release_name(self) -> str:
        return self.release or self.chart


@dataclass(frozen=True)
class DirectoryConfig:
    """Active Directory settings used for domain join and DNS forwarding."""
    domain_name: str
    dns_ip_addresses: Tuple[str, ...]
    organizational_unit: Optional[str] = None


@dataclass(frozen=True)
class NetworkRef:
    """Opaque network handles owned by the provisioning collaborator."""
    vpc_id: str
    subnet_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlatformSpec:
    """Complete declarative input for one platform composition."""
    name: str
    network: NetworkRef
    version: Optional[str] = None
    node_groups: Tuple[NodeGroupSpec, ...] = ()
    addons: Tuple[AddonSpec, ...] = ()
    directory: Optional[DirectoryConfig] = None
    region: Optional[str] = None
    cluster_autoscaler: Optional[str] = None
    load_balancer_controller: Optional[str] = None
    tags: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        _freeze(self, 'tags')


@dataclass(frozen=True)
class ConnectionParams:
    """Values a node needs to join the control plane."""
    cluster_name: str
    api_server_endpoint: str
    certificate_authority: str
    service_cidr: str
    dns_cluster_ip: str

    @classmethod
    def deferred(cls, cluster_name: str, service_cidr: str, dns_cluster_ip: str) -> 'ConnectionParams':
        """Placeholders for values only known once the cluster exists.

        The provisioning engine substitutes ``${<cluster>.endpoint}`` and
        ``${<cluster>.certificateAuthorityData}`` when it writes user data.
        """
        return cls(
            cluster_name=cluster_name,
            api_server_endpoint=f'${{{cluster_name}.endpoint}}',
            certificate_authority=f'${{{cluster_name}.certificateAuthorityData}}',
            service_cidr=service_cidr,
            dns_cluster_ip=dns_cluster_ip,
        )


@dataclass(frozen=True)
class ShimResolution:
    """Outcome of a kubectl shim lookup: a shim id or a named absence."""
    version: str
    shim_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.shim_id is not None

    def require(self) -> str:
        """Return the shim id, raising if the version is unsupported."""
        if self.shim_id is None:
            raise UnsupportedVersionError(self.version, self.reason)
        return self.shim_id


@dataclass(frozen=True)
class ResolvedNodeGroup:
    """A node group with its bootstrap payload and derived provisioning names."""
    spec: NodeGroupSpec
    os_family: OSFamily
    max_pods: int
    node_labels: str
    bootstrap: bytes
    node_role_name: str
    launch_template_name: str
    security_group_name: str
    managed_policies: Tuple[str, ...] = ()
    tags: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        _freeze(self, 'tags')

    @property
    def name(self) -> str:
        return self.spec.name


@dataclass(frozen=True)
class AddonGraphNode:
    """An add-on and the node groups it must wait for."""
    addon: AddonSpec
    predecessors: Tuple[str, ...] = ()
    helm_chart: Optional[HelmChartSpec] = None

    @property
    def name(self) -> str:
        return self.addon.name

    @property
    def tier(self) -> int:
        return 0 if self.addon.before_compute else 1


@dataclass(frozen=True)
class DomainJoinRequest:
    """SSM association request joining a node group's instances to a domain."""
    node_group: str
    document_name: str
    targets: Tuple[Dict[str, Any], ...] = field(hash=False)
    parameters: Mapping[str, List[str]] = field(hash=False)
    max_concurrency: str = '10'
    max_errors: str = '5'
    compliance_severity: str = 'MEDIUM'

    def __post_init__(self):
        _freeze(self, 'parameters')


@dataclass(frozen=True)
class RoleMapping:
    """aws-auth ConfigMap entry for a node role."""
    node_group: str
    role_name: str
    username: str
    groups: Tuple[str, ...]


@dataclass(frozen=True)
class ClusterParameters:
    """Control plane settings handed to the provisioning collaborator."""
    name: str
    version: str
    shim: ShimResolution
    network: NetworkRef
    service_cidr: str
    dns_cluster_ip: str
    endpoint_access: str = 'PRIVATE'
    authentication_mode: str = 'API_AND_CONFIG_MAP'
    logging_types: Tuple[str, ...] = ('api', 'audit', 'authenticator', 'controllerManager', 'scheduler')
    secrets_key_alias: str = ''
    secrets_key_rotation_days: int = 90
    tags: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        _freeze(self, 'tags')


@dataclass(frozen=True)
class PlatformDescriptor:
    """Fully resolved desired state for one platform."""
    cluster: ClusterParameters
    node_groups: Tuple[ResolvedNodeGroup, ...] = ()
    addons: Tuple[AddonGraphNode, ...] = ()
    domain_joins: Tuple[DomainJoinRequest, ...] = ()
    role_mappings: Tuple[RoleMapping, ...] = ()

    @property
    def has_windows_node_group(self) -> bool:
        return any(ng.os_family == OSFamily.WINDOWS for ng in self.node_groups)

    def node_group(self, name: str) -> ResolvedNodeGroup:
        for ng in self.node_groups:
            if ng.name == name:
                return ng
        raise KeyError(name)

    def addon(self, name: str) -> AddonGraphNode:
        for node in self.addons:
            if node.name == name:
                return node
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping suitable for YAML or JSON output."""
        cluster = self.cluster
        return {
            'cluster': {
                'name': cluster.name,
                'version': cluster.version,
                'kubectlShim': cluster.shim.shim_id,
                'kubectlShimReason': cluster.shim.reason,
                'vpcId': cluster.network.vpc_id,
                'subnetIds': list(cluster.network.subnet_ids),
                'serviceIpv4Cidr': cluster.service_cidr,
                'dnsClusterIp': cluster.dns_cluster_ip,
                'endpointAccess': cluster.endpoint_access,
                'authenticationMode': cluster.authentication_mode,
                'clusterLogging': list(cluster.logging_types),
                'secretsEncryptionKey': {
                    'alias': cluster.secrets_key_alias,
                    'rotationDays': cluster.secrets_key_rotation_days,
                },
                'tags': dict(cluster.tags),
            },
            'nodeGroups': [_node_group_dict(ng) for ng in self.node_groups],
            'addons': [_addon_dict(node) for node in self.addons],
            'domainJoins': [
                {
                    'nodeGroup': req.node_group,
                    'documentName': req.document_name,
                    'targets': [dict(t) for t in req.targets],
                    'parameters': {k: list(v) for k, v in req.parameters.items()},
                    'maxConcurrency': req.max_concurrency,
                    'maxErrors': req.max_errors,
                    'complianceSeverity': req.compliance_severity,
                }
                for req in self.domain_joins
            ],
            'roleMappings': [
                {
                    'nodeGroup': m.node_group,
                    'roleName': m.role_name,
                    'username': m.username,
                    'groups': list(m.groups),
                }
                for m in self.role_mappings
            ],
        }


def _node_group_dict(ng: ResolvedNodeGroup) -> Dict[str, Any]:
    spec = ng.spec
    return {
        'name': spec.name,
        'osFamily': ng.os_family.value,
        'imageId': spec.machine_image.image_id,
        'instanceTypes': list(spec.instance_types),
        'minSize': spec.min_size,
        'maxSize': spec.max_size,
        'desiredSize': spec.desired_size,
        'labels': dict(spec.labels),
        'taints': [
            {'key': t.key, 'value': t.value, 'effect': t.effect.value}
            for t in spec.taints
        ],
        'maxPods': ng.max_pods,
        'nodeLabels': ng.node_labels,
        'nodeRoleName': ng.node_role_name,
        'managedPolicies': list(ng.managed_policies),
        'launchTemplateName': ng.launch_template_name,
        'securityGroupName': ng.security_group_name,
        'tags': dict(ng.tags),
        'userData': ng.bootstrap.decode('utf-8'),
    }


def _addon_dict(node: AddonGraphNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        'name': node.addon.name,
        'version': node.addon.version,
        'configurationValues': dict(node.addon.configuration_values),
        'beforeCompute': node.addon.before_compute,
        'dependsOn': list(node.predecessors),
    }
    if node.helm_chart is not None:
        chart = node.helm_chart
        data['helm'] = {
            'chart': chart.chart,
            'repository': chart.repository,
            'version': chart.version,
            'namespace': chart.namespace,
            'release': chart.release_name,
            'values': dict(chart.values),
            'wait': chart.wait,
            'timeoutMinutes': chart.timeout_minutes,
        }
    return data
