"""Capabilities the pipeline needs from Zabbix and NetBox.

The concrete clients live in ``zabbix.client`` and ``netbox.client``;
tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Protocol


class MonitoringBackend(Protocol):
    def list_host_groups(self) -> list[dict[str, Any]]: ...

    def list_hosts(self, group_ids: list[str]) -> list[dict[str, Any]]: ...

    def list_host_interfaces(self, host_ids: list[str]) -> list[dict[str, Any]]: ...

    def list_items(self, host_ids: list[str], key_search: list[str]) -> list[dict[str, Any]]: ...


class CmdbBackend(Protocol):
    def list_virtual_machines(self, name: str, limit: int) -> list[dict[str, Any]]: ...

    def create_virtual_machine(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def patch_virtual_machine(self, vm_id: int, payload: dict[str, Any]) -> dict[str, Any]: ...

    def list_vm_interfaces(self, vm_id: int) -> list[dict[str, Any]]: ...

    def create_vm_interface(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def patch_vm_interface(self, iface_id: int, payload: dict[str, Any]) -> dict[str, Any]: ...

    def list_devices(self, name: str, limit: int) -> list[dict[str, Any]]: ...

    def list_mac_addresses(self, address: str) -> list[dict[str, Any]]: ...

    def create_mac_address(self, address: str) -> dict[str, Any]: ...

    def assign_mac_address(
        self,
        mac_id: int,
        address: str,
        owner_type: str,
        owner_id: int,
    ) -> dict[str, Any]: ...

    def list_vlans(self, vid: int) -> list[dict[str, Any]]: ...
