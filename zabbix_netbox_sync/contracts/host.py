"""HostFacts — typed state derived from one monitored host's metrics.

Lifecycle
─────────
  seeded   — ingestion creates the entry from the host's agent interface
  scanned  — the scanner fills obj_type, cpus, memory, interfaces, meta, label
  read     — the reconciler only reads it

``error`` is sticky: once a host is marked, nothing clears the flag and
every later phase skips the host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from zabbix_netbox_sync.contracts.enums import ObjType
from zabbix_netbox_sync.contracts.metric import Metric

log = logging.getLogger(__name__)

_VLAN_MIN = 1
_VLAN_MAX = 4094


@dataclass(slots=True)
class InterfaceFacts:
    """One Linux network interface as seen by the agent."""

    name: str
    addresses: list[str] = field(default_factory=list)
    type: int = 0  # ARPHRD_* code from /sys/class/net/<if>/type
    mtu: int | None = None
    mac_address: str | None = None

    @property
    def vlan_id(self) -> int | None:
        """VID of a ``<parent>.<vid>`` VLAN sub-interface, else None."""
        parent, sep, suffix = self.name.rpartition(".")
        if not sep or not parent or not suffix.isdigit():
            return None
        vid = int(suffix)
        if _VLAN_MIN <= vid <= _VLAN_MAX:
            return vid
        return None


@dataclass(slots=True)
class HostFacts:
    """Derived, typed record for one Zabbix host."""

    host_id: str
    host_name: str
    obj_type: ObjType | None = None
    cpus: float = 0.0
    memory: int = 0  # MiB
    interfaces: dict[str, InterfaceFacts] = field(default_factory=dict)
    meta: dict[str, str] = field(default_factory=dict)
    label: str = ""
    metrics: list[Metric] = field(default_factory=list)
    error: bool = False

    def mark_error(self, reason: str) -> None:
        """Flag the host as unusable. Never reverted."""
        if not self.error:
            log.debug("Host %s (%s) marked as error: %s", self.host_id, self.host_name, reason)
        self.error = True

    def get_interface(self, name: str) -> InterfaceFacts:
        """Return the interface *name*, creating it on first access."""
        iface = self.interfaces.get(name)
        if iface is None:
            iface = InterfaceFacts(name=name)
            self.interfaces[name] = iface
        return iface


# host_id → HostFacts, owned by the pipeline run
HostTable = dict[str, HostFacts]
