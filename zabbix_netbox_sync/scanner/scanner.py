"""Scanner — raw Metric list → validated HostFacts fields.

Every metric is handed to the first classifier in CLASSIFIERS whose
predicate accepts its key. The order is part of the behaviour:

  1. interface_address — net.if.<family>[<ifname>]
  2. file_contents     — vfs.file.contents[<path>] (sysfs net attributes)
  3. exact_key         — agent.hostname, sys.hw.manufacturer, ...

Keys no classifier accepts are ignored. Within a host, a later metric
overwrites what an earlier one derived for the same field.

Required items: agent.hostname and sys.hw.manufacturer. A host missing
either is marked as error after the scan. sys.hw.metadata is optional.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from zabbix_netbox_sync.contracts.enums import ObjType
from zabbix_netbox_sync.contracts.host import HostFacts, HostTable
from zabbix_netbox_sync.contracts.metric import Metric
from zabbix_netbox_sync.scanner.parser import (
    MetadataError,
    bytes_to_mib,
    is_file_contents_metric,
    is_interface_metric,
    is_sysfs_net_path,
    parse_file_contents_metric,
    parse_host_metadata,
    parse_int,
    parse_interface_metric,
    parse_mac_address,
    parse_sysfs_net_path,
)

log = logging.getLogger(__name__)

VIRTUAL_MANUFACTURER = "QEMU"


@dataclass(slots=True)
class ScanState:
    """Which required / optional items were seen for the host."""

    have_hostname: bool = False
    have_manufacturer: bool = False
    have_metadata: bool = False


# ═══════════════════════════════════════════════════════════════════════════
#  Handlers
# ═══════════════════════════════════════════════════════════════════════════


def _scan_interface_address(host: HostFacts, metric: Metric, state: ScanState) -> None:
    name, family, addresses = parse_interface_metric(metric.key, metric.value)
    if not name:
        log.debug("Host %s: ignoring %s without interface name", host.host_name, metric.key)
        return
    if not addresses:
        log.debug("Host %s: ignoring %s address of %s, value is empty", host.host_name, family, name)
        return
    host.get_interface(name).addresses.extend(addresses)


def _scan_file_contents(host: HostFacts, metric: Metric, state: ScanState) -> None:
    path = parse_file_contents_metric(metric.key)
    if not is_sysfs_net_path(path):
        log.debug("Host %s: no handler for file %s", host.host_name, path)
        return

    name, attr = parse_sysfs_net_path(path)

    if attr == "address":
        mac = parse_mac_address(metric.value)
        if mac is None:
            log.debug("Host %s: interface %s has no usable MAC %r", host.host_name, name, metric.value)
            return
        host.get_interface(name).mac_address = mac
        return

    try:
        number = parse_int(metric.value)
    except ValueError:
        log.error(
            "Host %s (%s) serves invalid value for interface %s %s: %r",
            host.host_id,
            host.host_name,
            name,
            attr,
            metric.value,
        )
        return

    iface = host.get_interface(name)
    if attr == "type":
        iface.type = number
    else:
        iface.mtu = number


def _scan_agent_hostname(host: HostFacts, metric: Metric, state: ScanState) -> None:
    state.have_hostname = True


def _scan_manufacturer(host: HostFacts, metric: Metric, state: ScanState) -> None:
    state.have_manufacturer = True
    # Any non-QEMU manufacturer counts as physical hardware.
    obj_type = ObjType.VIRTUAL if metric.value == VIRTUAL_MANUFACTURER else ObjType.PHYSICAL
    if host.obj_type is not None and host.obj_type != obj_type:
        log.warning(
            "Host %s (%s) reports conflicting manufacturers, keeping %s",
            host.host_id,
            host.host_name,
            host.obj_type.value,
        )
        return
    host.obj_type = obj_type


def _scan_metadata(host: HostFacts, metric: Metric, state: ScanState) -> None:
    state.have_metadata = True
    try:
        metadata, ok = parse_host_metadata(metric.value)
    except MetadataError as exc:
        log.error("Host %s (%s) serves invalid metadata: %s", host.host_id, host.host_name, exc)
        host.mark_error("invalid metadata")
        return

    host.meta = metadata
    if not ok:
        log.warning("Host %s (%s) serves empty metadata", host.host_id, host.host_name)
    host.label = metadata.get("label") or host.host_name


def _scan_cpu_count(host: HostFacts, metric: Metric, state: ScanState) -> None:
    try:
        host.cpus = float(metric.value)
    except ValueError as exc:
        log.error(
            "Host %s (%s) serves invalid value for \"system.cpu.num\": %r - %s",
            host.host_id,
            host.host_name,
            metric.value,
            exc,
        )


def _scan_memory_size(host: HostFacts, metric: Metric, state: ScanState) -> None:
    try:
        host.memory = bytes_to_mib(metric.value)
    except ValueError as exc:
        log.error(
            "Host %s (%s) serves invalid value for \"vm.memory.size\": %r - %s",
            host.host_id,
            host.host_name,
            metric.value,
            exc,
        )
        return
    log.debug("Converted memory %s to %d MiB", metric.value, host.memory)


EXACT_KEY_HANDLERS: dict[str, Callable[[HostFacts, Metric, ScanState], None]] = {
    "agent.hostname": _scan_agent_hostname,
    "sys.hw.manufacturer": _scan_manufacturer,
    "sys.hw.metadata": _scan_metadata,
    "system.cpu.num": _scan_cpu_count,
    "vm.memory.size[total]": _scan_memory_size,
}


def _scan_exact_key(host: HostFacts, metric: Metric, state: ScanState) -> None:
    EXACT_KEY_HANDLERS[metric.key](host, metric, state)


# ═══════════════════════════════════════════════════════════════════════════
#  Classifier table
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Classifier:
    name: str
    matches: Callable[[str], bool]
    handle: Callable[[HostFacts, Metric, ScanState], None]


CLASSIFIERS: tuple[Classifier, ...] = (
    Classifier("interface_address", is_interface_metric, _scan_interface_address),
    Classifier("file_contents", is_file_contents_metric, _scan_file_contents),
    Classifier("exact_key", EXACT_KEY_HANDLERS.__contains__, _scan_exact_key),
)


def classify(key: str) -> Classifier | None:
    """Return the first classifier accepting *key*."""
    for c in CLASSIFIERS:
        if c.matches(key):
            return c
    return None


# ═══════════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════════


def scan_host(host: HostFacts) -> bool:
    """Derive facts from ``host.metrics``. Returns False for an error host."""
    if host.error:
        return False

    state = ScanState()

    for metric in host.metrics:
        log.debug("scan_host() processing %s => %r", metric.key, metric.value)
        classifier = classify(metric.key)
        if classifier is None:
            continue
        classifier.handle(host, metric, state)
        if host.error:
            return False

    if not state.have_hostname:
        log.error("Host %s (%s) is missing the 'agent.hostname' item.", host.host_id, host.host_name)
    if not state.have_manufacturer:
        log.error("Host %s (%s) is missing the 'sys.hw.manufacturer' item.", host.host_id, host.host_name)
    if not state.have_metadata:
        log.warning("Host %s (%s) is missing the 'sys.hw.metadata' item.", host.host_id, host.host_name)

    if not state.have_hostname or not state.have_manufacturer:
        host.mark_error("required item missing")
        return False

    if not host.label:
        host.label = host.host_name
    return True


def scan_hosts(table: HostTable) -> int:
    """Scan every host in *table*; returns the number of usable hosts."""
    usable = 0
    for host in table.values():
        if host.error:
            log.debug("Skipping preprocessing of host %s.", host.host_name)
            continue
        log.debug("Preprocessing host %s", host.host_name)
        if scan_host(host):
            usable += 1
        else:
            log.debug("Scan of host %s (%s) returned errors.", host.host_id, host.host_name)
    log.info("Scanned %d hosts, %d usable", len(table), usable)
    return usable
