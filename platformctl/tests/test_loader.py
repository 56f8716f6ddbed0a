import json

import pytest
import yaml

from platformctl.errors import SpecLoadError
from platformctl.loader import dump_descriptor, load_platform_spec, parse_platform_spec
from platformctl.models import OSFamily, TaintEffect


def test_load_platform_file(platform_file):
    spec = load_platform_spec(platform_file)
    assert spec.name == "demo"
    assert spec.version == "1.33"
    assert spec.network.subnet_ids == ("subnet-a", "subnet-b")
    assert [ng.name for ng in spec.node_groups] == ["al2023", "windows"]

    linux, windows = spec.node_groups
    assert linux.instance_types == ("c5.large", "m5.xlarge")
    assert linux.labels == {"team": "infra"}
    assert (linux.min_size, linux.desired_size, linux.max_size) == (1, 2, 3)
    assert windows.os_family == OSFamily.WINDOWS
    assert windows.taints[0].effect == TaintEffect.NO_SCHEDULE
    assert windows.enable_domain_join

    assert spec.addons[1].before_compute
    assert spec.directory.dns_ip_addresses == ("10.0.0.2", "10.0.0.3")


def test_default_instance_type_applied():
    spec = parse_platform_spec({
        "name": "demo",
        "network": {"vpcId": "vpc-1"},
        "nodeGroups": [{"name": "ng", "image": {"id": "ami-1"}}],
    }, default_instance_type="m5.large")
    assert spec.node_groups[0].instance_types == ("m5.large",)
    assert spec.node_groups[0].os_family == OSFamily.LINUX


def test_missing_network_rejected():
    with pytest.raises(SpecLoadError) as exc:
        parse_platform_spec({"name": "demo"})
    assert "network" in str(exc.value)


def test_unquoted_version_rejected():
    with pytest.raises(SpecLoadError) as exc:
        parse_platform_spec({"name": "demo", "network": {"vpcId": "vpc-1"}, "version": 1.33})
    assert "version" in str(exc.value)


def test_unknown_os_rejected():
    with pytest.raises(SpecLoadError):
        parse_platform_spec({
            "name": "demo",
            "network": {"vpcId": "vpc-1"},
            "nodeGroups": [{"name": "ng", "image": {"id": "ami-1", "os": "plan9"}}],
        })


def test_empty_directory_servers_rejected():
    with pytest.raises(SpecLoadError):
        parse_platform_spec({
            "name": "demo",
            "network": {"vpcId": "vpc-1"},
            "directory": {"domainName": "corp.example", "dnsIpAddresses": []},
        })


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(SpecLoadError):
        load_platform_spec(path)


def test_missing_file(tmp_path):
    with pytest.raises(SpecLoadError):
        load_platform_spec(tmp_path / "nope.yaml")


def test_dump_yaml(composer, platform_file):
    descriptor = composer.compose(load_platform_spec(platform_file))
    data = yaml.safe_load(dump_descriptor(descriptor))
    assert data["cluster"]["name"] == "demo"
    assert [ng["name"] for ng in data["nodeGroups"]] == ["al2023", "windows"]
    assert data["nodeGroups"][0]["userData"].startswith("MIME-Version: 1.0")
    assert data["nodeGroups"][0]["userData"] == descriptor.node_group("al2023").bootstrap.decode()


def test_dump_json(composer, platform_file):
    descriptor = composer.compose(load_platform_spec(platform_file))
    data = json.loads(dump_descriptor(descriptor, "json"))
    addons = {a["name"]: a for a in data["addons"]}
    assert addons["coredns"]["dependsOn"] == ["al2023", "windows"]
    assert addons["snapshot-controller"]["dependsOn"] == []


def test_dump_unknown_format(composer, platform_spec):
    with pytest.raises(ValueError):
        dump_descriptor(composer.compose(platform_spec), "toml")
