import os

import pytest
import yaml

from platformctl.config import ComposerConfig, set_config
from platformctl.models import (
    AddonSpec,
    ConnectionParams,
    DirectoryConfig,
    MachineImage,
    NetworkRef,
    NodeGroupSpec,
    PlatformSpec,
    TaintEffect,
    TaintSpec,
)
from platformctl.modules.composer import PlatformComposer

PLATFORM_YAML = """
name: demo
version: "1.33"
region: us-east-1
network:
  vpcId: vpc-0123
  subnetIds: [subnet-a, subnet-b]
nodeGroups:
  - name: al2023
    image: {id: ami-linux, os: linux}
    instanceTypes: [c5.large, m5.xlarge]
    labels:
      team: infra
  - name: windows
    image: {id: ami-win, os: windows}
    instanceTypes: [m5.xlarge]
    min: 0
    desired: 1
    max: 2
    taints:
      - {key: os, value: windows, effect: NO_SCHEDULE}
    domainJoin: true
addons:
  - name: aws-ebs-csi-driver
    version: v1.30.0-eksbuild.1
  - name: snapshot-controller
    beforeCompute: true
directory:
  domainName: corp.example
  dnsIpAddresses: [10.0.0.2, 10.0.0.3]
"""


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PLATFORMCTL_"):
            monkeypatch.delenv(key, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def config():
    return ComposerConfig()


@pytest.fixture
def composer(config):
    return PlatformComposer(config=config)


@pytest.fixture
def connection():
    return ConnectionParams(
        cluster_name="demo",
        api_server_endpoint="https://ABC.gr7.us-east-1.eks.amazonaws.com",
        certificate_authority="Q0FEQVRB",
        service_cidr="172.20.0.0/16",
        dns_cluster_ip="172.20.0.10",
    )


@pytest.fixture
def linux_group():
    return NodeGroupSpec(
        name="al2023",
        machine_image=MachineImage.linux("ami-linux"),
        instance_types=("c5.large", "m5.xlarge"),
        labels={"team": "infra"},
    )


@pytest.fixture
def windows_group():
    return NodeGroupSpec(
        name="windows",
        machine_image=MachineImage.windows("ami-win"),
        instance_types=("m5.xlarge",),
        min_size=0,
        desired_size=1,
        max_size=2,
        taints=(TaintSpec(key="os", value="windows", effect=TaintEffect.NO_SCHEDULE),),
        enable_domain_join=True,
    )


@pytest.fixture
def directory():
    return DirectoryConfig(domain_name="corp.example", dns_ip_addresses=("10.0.0.2", "10.0.0.3"))


@pytest.fixture
def platform_spec(linux_group, windows_group, directory):
    return PlatformSpec(
        name="demo",
        version="1.33",
        network=NetworkRef(vpc_id="vpc-0123", subnet_ids=("subnet-a", "subnet-b")),
        node_groups=(linux_group, windows_group),
        addons=(
            AddonSpec(name="aws-ebs-csi-driver", version="v1.30.0-eksbuild.1"),
            AddonSpec(name="snapshot-controller", before_compute=True),
        ),
        directory=directory,
        region="us-east-1",
    )


@pytest.fixture
def platform_file(tmp_path):
    path = tmp_path / "platform.yaml"
    path.write_text(PLATFORM_YAML)
    return path


@pytest.fixture
def platform_data():
    return yaml.safe_load(PLATFORM_YAML)
