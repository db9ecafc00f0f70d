"""Field-level diffs and request payloads.

Diff functions return only the fields that differ, so a PATCH never
touches anything the telemetry does not own. An empty dict means
"nothing to do".
"""

from __future__ import annotations

from typing import Any

from zabbix_netbox_sync.contracts.enums import InterfaceMode
from zabbix_netbox_sync.contracts.host import HostFacts, InterfaceFacts
from zabbix_netbox_sync.contracts.remote import RemoteInterface
from zabbix_netbox_sync.shared.config_loader import SyncConfig


def vm_create_payload(host: HostFacts, config: SyncConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": host.host_name,
        "site": {"name": config.site_name, "slug": config.site_slug},
        "cluster": {"name": config.cluster},
        "status": config.status,
        "memory": host.memory,
    }
    if host.cpus:
        payload["vcpus"] = host.cpus
    return payload


def vm_changes(existing: dict[str, Any], host: HostFacts) -> dict[str, Any]:
    """Compare memory / vcpus of a NetBox VM with *host*.

    NetBox returns ``null`` for unset values; those compare as zero.
    An unknown local CPU count (0) never overwrites ``vcpus``.
    """
    changes: dict[str, Any] = {}
    if int(existing.get("memory") or 0) != host.memory:
        changes["memory"] = host.memory
    if host.cpus and float(existing.get("vcpus") or 0) != host.cpus:
        changes["vcpus"] = host.cpus
    return changes


def interface_changes(remote: RemoteInterface, iface: InterfaceFacts) -> dict[str, Any]:
    """Only MTU is compared; an unknown local MTU never overwrites NetBox."""
    # TODO: diff tagged VLANs of existing interfaces as well
    changes: dict[str, Any] = {}
    if iface.mtu is not None and remote.mtu != iface.mtu:
        changes["mtu"] = iface.mtu
    return changes


def interface_create_payload(
    vm_id: int,
    iface: InterfaceFacts,
    vlan_object_id: int = 0,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "virtual_machine": vm_id,
        "name": iface.name,
        "enabled": True,
    }
    if iface.mtu is not None:
        payload["mtu"] = iface.mtu
    if vlan_object_id:
        payload["mode"] = InterfaceMode.TAGGED.value
        payload["tagged_vlans"] = [vlan_object_id]
    return payload
