"""Directory domain join requests and Windows node auth mappings."""
from ..models import DirectoryConfig, DomainJoinRequest, RoleMapping

JOIN_DOCUMENT = "AWS-JoinDirectoryServiceDomain"
NODE_GROUP_TAG = "tag:eks:nodegroup-name"

WINDOWS_NODE_USERNAME = "system:node:{{EC2PrivateDNSName}}"
WINDOWS_NODE_GROUPS = ("system:nodes", "system:bootstrappers", "eks:kube-proxy-windows")


def domain_join_request(node_group: str, directory: DirectoryConfig) -> DomainJoinRequest:
    """SSM association joining every instance of ``node_group`` to the directory."""
    ou = [directory.organizational_unit] if directory.organizational_unit else []
    return DomainJoinRequest(
        node_group=node_group,
        document_name=JOIN_DOCUMENT,
        targets=({'key': NODE_GROUP_TAG, 'values': [node_group]},),
        parameters={
            'directoryId': [directory.domain_name],
            'directoryName': [directory.domain_name],
            'directoryOU': ou,
        },
    )


def windows_role_mapping(node_group: str, role_name: str) -> RoleMapping:
    # Windows nodes also need the kube-proxy-windows group in aws-auth
    return RoleMapping(
        node_group=node_group,
        role_name=role_name,
        username=WINDOWS_NODE_USERNAME,
        groups=WINDOWS_NODE_GROUPS,
    )
