"""Shared fixtures for Zabbix → NetBox sync tests."""

from __future__ import annotations

from typing import Any

import pytest

from zabbix_netbox_sync.contracts.enums import ObjType
from zabbix_netbox_sync.contracts.host import HostFacts, InterfaceFacts
from zabbix_netbox_sync.contracts.metric import Metric
from zabbix_netbox_sync.shared.config_loader import SyncConfig

# ── Helper: create Metric / HostFacts with sensible defaults ────────────


def make_metric(key: str, value: str = "", *, item_id: str = "1000", name: str = "", error: str = "") -> Metric:
    return Metric(item_id=item_id, key=key, name=name or key, value=value, error=error)


def base_metrics(
    *,
    manufacturer: str = "QEMU",
    cpus: str = "2",
    memory: str = "2147483648",
    metadata: str | None = "label: Build server",
) -> list[Metric]:
    """The metrics a healthy agent host reports."""
    metrics = [
        make_metric("agent.hostname", "vm01.example.com", item_id="1"),
        make_metric("sys.hw.manufacturer", manufacturer, item_id="2"),
        make_metric("system.cpu.num", cpus, item_id="3"),
        make_metric("vm.memory.size[total]", memory, item_id="4"),
    ]
    if metadata is not None:
        metrics.append(make_metric("sys.hw.metadata", metadata, item_id="5"))
    return metrics


def make_host(
    *,
    host_id: str = "10101",
    host_name: str = "vm01.example.com",
    obj_type: ObjType | None = ObjType.VIRTUAL,
    cpus: float = 2.0,
    memory: int = 2048,
    interfaces: dict[str, InterfaceFacts] | None = None,
    error: bool = False,
) -> HostFacts:
    """A HostFacts as the scanner would have left it."""
    return HostFacts(
        host_id=host_id,
        host_name=host_name,
        obj_type=obj_type,
        cpus=cpus,
        memory=memory,
        interfaces=interfaces if interfaces is not None else {},
        label=host_name,
        error=error,
    )


def make_iface(
    name: str = "eth0",
    *,
    addresses: list[str] | None = None,
    mtu: int | None = 1500,
    mac: str | None = "52:54:00:12:34:56",
) -> InterfaceFacts:
    return InterfaceFacts(
        name=name,
        addresses=addresses if addresses is not None else ["10.0.0.5"],
        type=1,
        mtu=mtu,
        mac_address=mac,
    )


# ── In-memory backends ──────────────────────────────────────────────────

MUTATING_CALLS = frozenset(
    {
        "create_virtual_machine",
        "patch_virtual_machine",
        "create_vm_interface",
        "patch_vm_interface",
        "create_mac_address",
        "assign_mac_address",
    }
)


class FakeNetBox:
    """Records every call and applies mutations to in-memory tables."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.vms: list[dict[str, Any]] = []
        self.interfaces: list[dict[str, Any]] = []
        self.devices: list[dict[str, Any]] = []
        self.macs: list[dict[str, Any]] = []
        self.vlans: list[dict[str, Any]] = []
        self._next_id = 100

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    @property
    def mutating_calls(self) -> list[tuple[str, tuple[Any, ...]]]:
        return [c for c in self.calls if c[0] in MUTATING_CALLS]

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    # ── reads ──

    def list_virtual_machines(self, name, limit):
        self.calls.append(("list_virtual_machines", (name, limit)))
        return [dict(vm) for vm in self.vms if vm["name"] == name][:limit]

    def list_vm_interfaces(self, vm_id):
        self.calls.append(("list_vm_interfaces", (vm_id,)))
        return [dict(i) for i in self.interfaces if i["virtual_machine"] == vm_id]

    def list_devices(self, name, limit):
        self.calls.append(("list_devices", (name, limit)))
        return [dict(d) for d in self.devices if d["name"] == name][:limit]

    def list_mac_addresses(self, address):
        self.calls.append(("list_mac_addresses", (address,)))
        return [dict(m) for m in self.macs if m["mac_address"] == address]

    def list_vlans(self, vid):
        self.calls.append(("list_vlans", (vid,)))
        return [dict(v) for v in self.vlans if v["vid"] == vid]

    # ── writes ──

    def create_virtual_machine(self, payload):
        self.calls.append(("create_virtual_machine", (payload,)))
        vm = {"id": self._id(), **payload}
        self.vms.append(vm)
        return dict(vm)

    def patch_virtual_machine(self, vm_id, payload):
        self.calls.append(("patch_virtual_machine", (vm_id, payload)))
        vm = next(v for v in self.vms if v["id"] == vm_id)
        vm.update(payload)
        return dict(vm)

    def create_vm_interface(self, payload):
        self.calls.append(("create_vm_interface", (payload,)))
        iface = {"id": self._id(), "mode": None, "tagged_vlans": [], **payload}
        if payload.get("mode"):
            iface["mode"] = {"value": payload["mode"], "label": payload["mode"].title()}
            iface["tagged_vlans"] = [{"id": v} for v in payload.get("tagged_vlans", [])]
        self.interfaces.append(iface)
        return dict(iface)

    def patch_vm_interface(self, iface_id, payload):
        self.calls.append(("patch_vm_interface", (iface_id, payload)))
        iface = next(i for i in self.interfaces if i["id"] == iface_id)
        iface.update(payload)
        return dict(iface)

    def create_mac_address(self, address):
        self.calls.append(("create_mac_address", (address,)))
        mac = {"id": self._id(), "mac_address": address, "assigned_object_type": None, "assigned_object_id": None}
        self.macs.append(mac)
        return dict(mac)

    def assign_mac_address(self, mac_id, address, owner_type, owner_id):
        self.calls.append(("assign_mac_address", (mac_id, address, owner_type, owner_id)))
        mac = next(m for m in self.macs if m["id"] == mac_id)
        mac.update(assigned_object_type=owner_type, assigned_object_id=owner_id)
        return dict(mac)


class FakeZabbix:
    """Serves canned Zabbix API results and records the requests."""

    def __init__(
        self,
        groups: list[dict[str, Any]] | None = None,
        hosts: list[dict[str, Any]] | None = None,
        interfaces: list[dict[str, Any]] | None = None,
        items: list[dict[str, Any]] | None = None,
    ) -> None:
        self.groups = groups or []
        self.hosts = hosts or []
        self.interfaces = interfaces or []
        self.items = items or []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def list_host_groups(self):
        self.calls.append(("list_host_groups", ()))
        return self.groups

    def list_hosts(self, group_ids):
        self.calls.append(("list_hosts", (group_ids,)))
        return self.hosts

    def list_host_interfaces(self, host_ids):
        self.calls.append(("list_host_interfaces", (host_ids,)))
        return [i for i in self.interfaces if i["hostid"] in host_ids]

    def list_items(self, host_ids, key_search):
        self.calls.append(("list_items", (host_ids, key_search)))
        return [i for i in self.items if i["hostid"] in host_ids]


def zabbix_item(hostid: str, key: str, value: str, *, itemid: str = "1", error: str = "") -> dict[str, Any]:
    return {
        "itemid": itemid,
        "hostid": hostid,
        "key_": key,
        "name": key,
        "lastvalue": value,
        "error": error,
    }


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig()


@pytest.fixture
def netbox() -> FakeNetBox:
    return FakeNetBox()


@pytest.fixture
def zabbix() -> FakeZabbix:
    """One whitelisted group with a healthy QEMU VM and a DNS-less host."""
    return FakeZabbix(
        groups=[
            {"groupid": "7", "name": "Owners/Engineering/Infrastructure"},
            {"groupid": "8", "name": "Owners/Marketing"},
        ],
        hosts=[{"hostid": "10101", "host": "vm01"}, {"hostid": "10102", "host": "bare"}],
        interfaces=[
            {"interfaceid": "1", "hostid": "10101", "type": "1", "dns": "vm01.example.com", "ip": "10.0.0.5"},
            {"interfaceid": "2", "hostid": "10101", "type": "2", "dns": "vm01.example.com", "ip": "10.0.0.5"},
            {"interfaceid": "3", "hostid": "10102", "type": "1", "dns": "", "ip": "10.0.0.9"},
        ],
        items=[
            zabbix_item("10101", "agent.hostname", "vm01.example.com", itemid="1"),
            zabbix_item("10101", "sys.hw.manufacturer", "QEMU", itemid="2"),
            zabbix_item("10101", "system.cpu.num", "4", itemid="3"),
            zabbix_item("10101", "vm.memory.size[total]", "4294967296", itemid="4"),
            zabbix_item("10101", "sys.hw.metadata", "label: Build server\nowner: infra", itemid="5"),
            zabbix_item("10101", 'net.if.ip4["eth0"]', "10.0.0.5", itemid="6"),
            zabbix_item("10101", 'net.if.ip6["eth0"]', "2001:db8::5\nfe80::5054:ff:fe12:3456", itemid="7"),
            zabbix_item("10101", 'vfs.file.contents["/sys/class/net/eth0/mtu"]', "1500", itemid="8"),
            zabbix_item("10101", 'vfs.file.contents["/sys/class/net/eth0/address"]', "52:54:00:12:34:56", itemid="9"),
            zabbix_item("10101", 'net.if.ip4["lo"]', "127.0.0.1", itemid="10"),
            zabbix_item("10102", "agent.hostname", "bare", itemid="11"),
            zabbix_item("10102", "sys.hw.manufacturer", "QEMU", itemid="12"),
        ],
    )
