import socket
from types import SimpleNamespace

from ports_live.utils import net


def test_local_network_addresses_filters_interfaces(monkeypatch):
    addrs = {
        "lo": [SimpleNamespace(family=socket.AF_INET, address="127.0.0.1")],
        "en0": [SimpleNamespace(family=socket.AF_INET, address="192.168.1.20"),
                SimpleNamespace(family=socket.AF_INET6, address="fe80::1")],
        "en1": [SimpleNamespace(family=socket.AF_INET, address="169.254.3.4")],
        "en2": [SimpleNamespace(family=socket.AF_INET, address="10.0.0.5")],
        "down0": [SimpleNamespace(family=socket.AF_INET, address="10.9.9.9")],
    }
    stats = {name: SimpleNamespace(isup=name != "down0") for name in addrs}
    monkeypatch.setattr(net.psutil, "net_if_addrs", lambda: addrs)
    monkeypatch.setattr(net.psutil, "net_if_stats", lambda: stats)
    assert net.local_network_addresses() == ["10.0.0.5", "192.168.1.20"]


def test_bind_host():
    assert net.bind_host(True) == "0.0.0.0"
    assert net.bind_host(False) == "127.0.0.1"
