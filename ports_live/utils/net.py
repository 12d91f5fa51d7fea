from __future__ import annotations
import socket
import psutil

def local_network_addresses() -> list[str]:
    """IPv4 addresses of interfaces that are up, skipping loopback and link-local."""
    stats = psutil.net_if_stats()
    addresses: set[str] = set()
    for iface, addrs in psutil.net_if_addrs().items():
        st = stats.get(iface)
        if not st or not st.isup:
            continue
        for a in addrs:
            if a.family != socket.AF_INET:
                continue
            if a.address.startswith("127.") or a.address.startswith("169.254."):
                continue
            addresses.add(a.address)
    return sorted(addresses)

def bind_host(expose_to_lan: bool) -> str:
    return "0.0.0.0" if expose_to_lan else "127.0.0.1"
