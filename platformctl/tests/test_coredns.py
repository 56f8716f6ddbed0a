import pytest

from platformctl.modules.coredns import DEFAULT_SERVER_BLOCK, generate_coredns_config


@pytest.mark.parametrize("domain,addrs", [
    (None, None),
    ("corp.example", None),
    ("corp.example", []),
    (None, ["10.0.0.2"]),
    ("", ["10.0.0.2"]),
])
def test_no_override_without_domain_and_servers(domain, addrs):
    assert generate_coredns_config(domain, addrs) == {}


def test_forward_block_for_domain():
    config = generate_coredns_config("corp.example", ["10.0.0.2"])
    assert list(config) == ["corefile"]
    corefile = config["corefile"]
    assert corefile.startswith(DEFAULT_SERVER_BLOCK)
    assert "corp.example:53 {" in corefile
    assert "forward . 10.0.0.2" in corefile


def test_default_block_contents():
    corefile = generate_coredns_config("corp.example", ["10.0.0.2"])["corefile"]
    for directive in ("kubernetes cluster.local in-addr.arpa ip6.arpa", "cache 30", "loadbalance",
                      "forward . /etc/resolv.conf", "prometheus :9153", "lameduck 5s"):
        assert directive in corefile


def test_multiple_servers_are_space_joined():
    corefile = generate_coredns_config("corp.example", ("10.0.0.2", "10.0.0.3"))["corefile"]
    assert "forward . 10.0.0.2 10.0.0.3\n" in corefile
    assert corefile.count(":53 {") == 2
    assert corefile.endswith("}")
