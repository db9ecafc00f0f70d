"""Reconciler — converge NetBox towards the scanned HostFacts.

Per host, dispatched on obj_type
────────────────────────────────
  Virtual   — look up the VM by exact name (at most 2 results):
                0  → create
                1  → diff memory/vcpus, patch changed fields only
                ≥2 → ambiguous, host skipped
              then reconcile its interfaces and MAC addresses.
  Physical  — look up the device by exact name; query only.

Dry mode logs what would be done and records it in SyncStats; it never
calls a create / patch / assign operation. Hosts are processed one at a
time; a host-level problem is logged and the loop moves on. Backend
failures propagate as BackendError and end the run.
"""

from __future__ import annotations

import logging

from zabbix_netbox_sync.contracts.backends import CmdbBackend
from zabbix_netbox_sync.contracts.enums import ObjType
from zabbix_netbox_sync.contracts.host import HostFacts, HostTable, InterfaceFacts
from zabbix_netbox_sync.contracts.remote import RemoteInterface
from zabbix_netbox_sync.netbox.client import VM_INTERFACE_OBJECT_TYPE
from zabbix_netbox_sync.reconciler.diff import (
    interface_changes,
    interface_create_payload,
    vm_changes,
    vm_create_payload,
)
from zabbix_netbox_sync.reconciler.stats import SyncStats
from zabbix_netbox_sync.shared.config_loader import SyncConfig

log = logging.getLogger(__name__)

# Enough to tell "one" from "many" without paging.
LOOKUP_LIMIT = 2


class Reconciler:
    """Create-or-patch NetBox objects for every usable host."""

    def __init__(
        self,
        cmdb: CmdbBackend,
        config: SyncConfig,
        dry_run: bool,
        stats: SyncStats | None = None,
    ) -> None:
        self.cmdb = cmdb
        self.config = config
        self.dry_run = dry_run
        self.stats = stats or SyncStats(dry_run=dry_run)

    # ── Public API ───────────────────────────────────────────────────────

    def reconcile(self, table: HostTable, only_host: str | None = None) -> SyncStats:
        """Process every host of *table*, or just the one named *only_host*."""
        for host in table.values():
            if only_host is not None and host.host_name != only_host:
                continue

            self.stats.hosts_total += 1

            if host.error:
                log.warning("Skipping processing of host %s.", host.host_name)
                self.stats.hosts_skipped += 1
                continue

            log.info("Processing host %s", host.host_name)
            self.process_host(host)
            self.stats.hosts_processed += 1

        if only_host is not None and self.stats.hosts_total == 0:
            log.warning("Host %s is not among the ingested hosts", only_host)

        log.info(
            "Done (%s): %d hosts processed, %d skipped, %d change(s) %s, %d ambiguous",
            "dry" if self.dry_run else "wet",
            self.stats.hosts_processed,
            self.stats.hosts_skipped,
            len(self.stats.changes),
            "planned" if self.dry_run else "applied",
            self.stats.ambiguous,
        )
        return self.stats

    def process_host(self, host: HostFacts) -> None:
        if host.obj_type is ObjType.VIRTUAL:
            vm_id = self.process_virtual_machine(host)
            if vm_id:
                self.reconcile_interfaces(host, vm_id)
        elif host.obj_type is ObjType.PHYSICAL:
            self.process_device(host)
        else:
            log.error("Host %s has no object type, skipping", host.host_name)

    # ── Virtual machines ─────────────────────────────────────────────────

    def process_virtual_machine(self, host: HostFacts) -> int:
        """Create or patch the VM of *host*.

        Returns the NetBox VM id interface reconciliation should continue
        with, or 0 when it must not (dry-run create/patch, ambiguity).
        """
        name = host.host_name
        found = self.cmdb.list_virtual_machines(name, LOOKUP_LIMIT)
        log.debug("Found virtual machines: %s", [vm.get("id") for vm in found])

        if len(found) == 0:
            payload = vm_create_payload(host, self.config)
            if self.dry_run:
                log.info("Would create virtual machine object %s: %s", name, payload)
                self.stats.record(name, "virtual_machine", "create", payload, applied=False)
                return 0

            log.info("Creating virtual machine object %s", name)
            log.debug("Payload: %s", payload)
            created = self.cmdb.create_virtual_machine(payload)
            vm_id = int(created["id"])
            self.stats.record(name, "virtual_machine", "create", payload, applied=True, object_id=vm_id)
            return vm_id

        if len(found) > 1:
            log.error("Host %s matches multiple (%d) objects in NetBox.", name, len(found))
            self.stats.ambiguous += 1
            return 0

        existing = found[0]
        vm_id = int(existing.get("id") or 0)
        changes = vm_changes(existing, host)

        if not changes:
            log.info("Virtual machine %s is up to date, nothing to do", name)
            self.stats.unchanged += 1
            return vm_id

        if self.dry_run:
            log.info("Would update virtual machine %s (id %d): %s", name, vm_id, changes)
            self.stats.record(name, "virtual_machine", "patch", changes, applied=False, object_id=vm_id)
            return 0

        log.info("Updating virtual machine %s (id %d): %s", name, vm_id, changes)
        patched = self.cmdb.patch_virtual_machine(vm_id, changes)
        vm_id = int(patched.get("id") or vm_id)
        self.stats.record(name, "virtual_machine", "patch", changes, applied=True, object_id=vm_id)
        return vm_id

    # ── Interfaces ───────────────────────────────────────────────────────

    def reconcile_interfaces(self, host: HostFacts, vm_id: int) -> None:
        existing = {
            remote.name: remote
            for remote in map(RemoteInterface.from_api, self.cmdb.list_vm_interfaces(vm_id))
        }
        log.debug("VM %d has interfaces %s", vm_id, sorted(existing))

        for name, iface in host.interfaces.items():
            if name in self.config.skip_interfaces:
                continue
            self._reconcile_interface(host, vm_id, iface, existing.get(name))

    def _reconcile_interface(
        self,
        host: HostFacts,
        vm_id: int,
        iface: InterfaceFacts,
        remote: RemoteInterface | None,
    ) -> None:
        mac_id, mac_assigned = 0, False
        if iface.mac_address:
            mac_id, mac_assigned = self.resolve_mac_address(iface.mac_address, host.host_name)

        if remote is not None:
            iface_id = remote.id
            changes = interface_changes(remote, iface)
            if not changes:
                log.debug("Interface %s of %s is up to date", iface.name, host.host_name)
                self.stats.unchanged += 1
            elif self.dry_run:
                log.info("Would update interface %s of %s: %s", iface.name, host.host_name, changes)
                self.stats.record(host.host_name, "vm_interface", "patch", changes, applied=False, object_id=iface_id)
            else:
                log.info("Updating interface %s of %s: %s", iface.name, host.host_name, changes)
                self.cmdb.patch_vm_interface(iface_id, changes)
                self.stats.record(host.host_name, "vm_interface", "patch", changes, applied=True, object_id=iface_id)
        else:
            vlan_object_id = self.resolve_vlan(iface.vlan_id) if iface.vlan_id is not None else 0
            payload = interface_create_payload(vm_id, iface, vlan_object_id)
            if self.dry_run:
                log.info("Would create interface %s of %s: %s", iface.name, host.host_name, payload)
                self.stats.record(host.host_name, "vm_interface", "create", payload, applied=False)
                return
            log.info("Creating interface %s of %s", iface.name, host.host_name)
            created = self.cmdb.create_vm_interface(payload)
            iface_id = int(created["id"])
            self.stats.record(host.host_name, "vm_interface", "create", payload, applied=True, object_id=iface_id)

        if mac_id and not mac_assigned and iface_id:
            payload = {
                "mac_address": iface.mac_address,
                "assigned_object_type": VM_INTERFACE_OBJECT_TYPE,
                "assigned_object_id": iface_id,
            }
            if self.dry_run:
                log.info("Would assign MAC address %s to interface %s", iface.mac_address, iface.name)
                self.stats.record(host.host_name, "mac_address", "assign", payload, applied=False, object_id=mac_id)
                return
            log.info("Assigning MAC address %s to interface %s (id %d)", iface.mac_address, iface.name, iface_id)
            self.cmdb.assign_mac_address(mac_id, iface.mac_address, VM_INTERFACE_OBJECT_TYPE, iface_id)
            self.stats.record(host.host_name, "mac_address", "assign", payload, applied=True, object_id=mac_id)

    def resolve_mac_address(self, address: str, host_name: str = "") -> tuple[int, bool]:
        """Find or create the MAC address object for *address*.

        Returns:
            (id, assigned) — id is 0 when nothing usable exists (dry-run
            create, duplicates); assigned tells whether the object is
            already bound to some NetBox object.
        """
        found = self.cmdb.list_mac_addresses(address)

        if len(found) == 0:
            if self.dry_run:
                log.info("Would create MAC address object %s", address)
                self.stats.record(host_name, "mac_address", "create", {"mac_address": address}, applied=False)
                return 0, False
            log.info("Creating MAC address object %s", address)
            created = self.cmdb.create_mac_address(address)
            mac_id = int(created["id"])
            self.stats.record(host_name, "mac_address", "create", {"mac_address": address}, applied=True, object_id=mac_id)
            return mac_id, False

        if len(found) > 1:
            log.warning("MAC address %s exists %d times in NetBox, not touching it", address, len(found))
            return 0, False

        mac = found[0]
        assigned = bool(mac.get("assigned_object_type")) and bool(mac.get("assigned_object_id"))
        return int(mac["id"]), assigned

    def resolve_vlan(self, vid: int) -> int:
        """NetBox object id of the VLAN with *vid*, or 0 if not unique."""
        found = self.cmdb.list_vlans(vid)
        if len(found) != 1:
            log.warning("VLAN %d matches %d objects in NetBox, interface stays untagged", vid, len(found))
            return 0
        return int(found[0]["id"])

    # ── Devices ──────────────────────────────────────────────────────────

    def process_device(self, host: HostFacts) -> None:
        """Look up the device of a physical host. No create / patch path."""
        name = host.host_name
        found = self.cmdb.list_devices(name, LOOKUP_LIMIT)
        log.info("Found devices: %s", [d.get("id") for d in found])
        if len(found) > 1:
            log.error("Host %s matches multiple (%d) objects in NetBox.", name, len(found))
            self.stats.ambiguous += 1
        elif not found:
            log.info("Device %s is not in NetBox; physical devices are not created", name)
