"""
Platform composition.

``PlatformComposer.compose`` turns a ``PlatformSpec`` into a
``PlatformDescriptor``. It is a pure function of its inputs: no I/O, no
retries, and no partial output. Every validation problem is raised before
anything is built.
"""
import logging
from typing import List, Optional

from ..config import ComposerConfig, get_config
from ..errors import InvalidPlatformSpecError, MalformedLabelError
from ..models import (
    ClusterParameters,
    ConnectionParams,
    NodeGroupSpec,
    OSFamily,
    PlatformDescriptor,
    PlatformSpec,
    ResolvedNodeGroup,
)
from . import addons as addon_graph
from .bootstrap import bootstrap_for_node_group, generate_bootstrap, validate_labels, validate_machine_labels
from .capacity import CapacityTable
from .coredns import generate_coredns_config
from .domain_join import domain_join_request, windows_role_mapping
from .versions import ShimTable

logger = logging.getLogger("platformctl.composer")

NODE_MANAGED_POLICIES = (
    'AmazonEKSWorkerNodePolicy',
    'AmazonEC2ContainerRegistryReadOnly',
    'AmazonEKS_CNI_Policy',
    'AmazonSSMManagedInstanceCore',
)


def validate_spec(spec: PlatformSpec, check_labels: bool = True) -> None:
    """Check a platform spec, raising one error that lists every problem.

    Raises:
        InvalidPlatformSpecError: on structural problems
        MalformedLabelError: when only label content is at fault
    """
    errors: List[str] = []
    label_errors: List[str] = []

    if not spec.name:
        errors.append("cluster name must not be empty")

    seen = set()
    for ng in spec.node_groups:
        if not ng.name:
            errors.append("node group name must not be empty")
        elif ng.name in seen:
            errors.append(f"duplicate node group name: {ng.name}")
        seen.add(ng.name)

        if ng.min_size < 0:
            errors.append(f"node group {ng.name}: min_size must be >= 0 (got {ng.min_size})")
        if not ng.min_size <= ng.desired_size <= ng.max_size:
            errors.append(
                f"node group {ng.name}: expected min <= desired <= max, "
                f"got {ng.min_size}/{ng.desired_size}/{ng.max_size}"
            )
        if not ng.instance_types:
            errors.append(f"node group {ng.name}: at least one instance type is required")
        if not ng.machine_image.image_id:
            errors.append(f"node group {ng.name}: machine image id must not be empty")

        try:
            validate_machine_labels(ng)
        except MalformedLabelError as e:
            label_errors.extend(e.errors)
        if check_labels:
            try:
                validate_labels(ng.labels, ng.name)
            except MalformedLabelError as e:
                label_errors.extend(e.errors)

    if spec.directory is not None:
        if not spec.directory.domain_name:
            errors.append("directory domain name must not be empty")
        if not spec.directory.dns_ip_addresses:
            errors.append("directory DNS IP address list must not be empty")

    if errors:
        raise InvalidPlatformSpecError(errors + label_errors)
    if label_errors:
        raise MalformedLabelError(label_errors)


class PlatformComposer:
    """Resolves platform specs into descriptors.

    Lookup tables are injected so tests can substitute fixtures.
    """

    def __init__(
        self,
        config: Optional[ComposerConfig] = None,
        capacity: Optional[CapacityTable] = None,
        shims: Optional[ShimTable] = None,
    ):
        self.config = config or get_config()
        self.capacity = capacity or CapacityTable()
        self.shims = shims or ShimTable()

    def compose(self, spec: PlatformSpec, connection: Optional[ConnectionParams] = None) -> PlatformDescriptor:
        """Compose ``spec`` into a fully resolved descriptor.

        Args:
            spec: declarative platform input
            connection: control plane connection values; deferred
                placeholders are used when omitted

        Raises:
            InvalidPlatformSpecError: the spec is inconsistent
            MalformedLabelError: a label would corrupt a bootstrap payload
            UnsupportedVersionError: no shim and ``policy.strict_version_shim``
        """
        policy = self.config.policy
        defaults = self.config.cluster
        validate_spec(spec, check_labels=policy.validate_labels)

        version = spec.version or defaults.version
        shim = self.shims.select(version)
        if not shim.resolved:
            if policy.strict_version_shim:
                shim.require()
            logger.warning(f"⚠️ {shim.reason}; continuing without a kubectl shim")

        if connection is None:
            connection = ConnectionParams.deferred(spec.name, defaults.service_cidr, defaults.dns_cluster_ip)

        cluster = ClusterParameters(
            name=spec.name,
            version=version,
            shim=shim,
            network=spec.network,
            service_cidr=connection.service_cidr,
            dns_cluster_ip=connection.dns_cluster_ip,
            secrets_key_alias=f"{spec.name}-eks-kms-key",
            tags=dict(spec.tags),
        )

        node_groups = tuple(self._resolve_node_group(spec, ng, connection) for ng in spec.node_groups)
        has_windows = any(ng.os_family == OSFamily.WINDOWS for ng in node_groups)

        directory = spec.directory
        coredns_config = generate_coredns_config(
            directory.domain_name if directory else None,
            directory.dns_ip_addresses if directory else None,
        )
        graph = addon_graph.build_graph(
            spec.addons,
            [ng.name for ng in node_groups],
            has_windows,
            coredns_config=coredns_config,
            helm_addons=self._helm_addons(spec),
        )

        domain_joins = []
        for ng in spec.node_groups:
            if not ng.enable_domain_join:
                continue
            if directory is None:
                logger.debug(f"Node group {ng.name} requests domain join but no directory is configured")
                continue
            domain_joins.append(domain_join_request(ng.name, directory))

        role_mappings = tuple(
            windows_role_mapping(ng.name, ng.node_role_name)
            for ng in node_groups
            if ng.os_family == OSFamily.WINDOWS
        )

        logger.info(
            f"✅ Composed platform {spec.name}: {len(node_groups)} node group(s), "
            f"{len(graph)} add-on(s), {len(domain_joins)} domain join(s)"
        )
        return PlatformDescriptor(
            cluster=cluster,
            node_groups=node_groups,
            addons=tuple(graph),
            domain_joins=tuple(domain_joins),
            role_mappings=role_mappings,
        )

    def _resolve_node_group(
        self,
        spec: PlatformSpec,
        ng: NodeGroupSpec,
        connection: ConnectionParams,
    ) -> ResolvedNodeGroup:
        doc = bootstrap_for_node_group(
            ng,
            connection,
            capacity=self.capacity,
            default_max_pods=self.config.capacity.default_max_pods,
            check_labels=False,
        )
        payload = generate_bootstrap(connection, doc.max_pods, doc.node_labels, ng.os_family)

        tags = {f"kubernetes.io/cluster/{spec.name}": "owned"}
        if spec.cluster_autoscaler:
            tags.update(addon_graph.autoscaler_discovery_tags(spec.name))

        return ResolvedNodeGroup(
            spec=ng,
            os_family=ng.os_family,
            max_pods=doc.max_pods,
            node_labels=doc.node_labels,
            bootstrap=payload,
            node_role_name=f"{spec.name}-{ng.name}-NodeRole",
            launch_template_name=f"{spec.name}-{ng.name}",
            security_group_name=f"{spec.name}-{ng.name}-sg",
            managed_policies=NODE_MANAGED_POLICIES,
            tags=tags,
        )

    def _helm_addons(self, spec: PlatformSpec):
        helm = []
        if spec.cluster_autoscaler:
            helm.append(addon_graph.cluster_autoscaler_addon(spec.name, spec.cluster_autoscaler, spec.region))
        if spec.load_balancer_controller:
            helm.append(addon_graph.load_balancer_controller_addon(
                spec.name, spec.load_balancer_controller, spec.region, spec.network.vpc_id
            ))
        return helm


def compose_platform(
    spec: PlatformSpec,
    connection: Optional[ConnectionParams] = None,
    config: Optional[ComposerConfig] = None,
) -> PlatformDescriptor:
    """Compose ``spec`` with the default lookup tables."""
    return PlatformComposer(config=config).compose(spec, connection)
