"""CoreDNS configuration with conditional forwarding to a directory service."""
from typing import Dict, Optional, Sequence

DEFAULT_SERVER_BLOCK = """.:53 {
    errors
    health {
        lameduck 5s
    }
    ready
    kubernetes cluster.local in-addr.arpa ip6.arpa {
      pods insecure
      fallthrough in-addr.arpa ip6.arpa
    }
    prometheus :9153
    forward . /etc/resolv.conf
    cache 30
    loop
    reload
    loadbalance
}"""

FORWARD_BLOCK = """{domain}:53 {{
    errors
    cache 30
    forward . {servers}
    reload
}}"""


def generate_coredns_config(
    domain: Optional[str] = None,
    dns_addrs: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    """Return CoreDNS add-on configuration values.

    Without a domain and at least one DNS address the result is empty and
    CoreDNS keeps its default Corefile. Otherwise the default server block is
    followed by one block forwarding ``domain`` to ``dns_addrs``.
    """
    if not domain or not dns_addrs:
        return {}

    forward = FORWARD_BLOCK.format(domain=domain, servers=" ".join(dns_addrs))
    return {"corefile": f"{DEFAULT_SERVER_BLOCK}\n{forward}"}
