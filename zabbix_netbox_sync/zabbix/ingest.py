"""Telemetry ingestion: host groups → hosts → agent interfaces → items.

Produces the HostTable the scanner works on. Any backend failure
propagates as BackendError and aborts the run; this phase has no
per-host failure handling.
"""

from __future__ import annotations

import logging
from typing import Any

from zabbix_netbox_sync.contracts.backends import MonitoringBackend
from zabbix_netbox_sync.contracts.host import HostFacts, HostTable
from zabbix_netbox_sync.contracts.metric import Metric
from zabbix_netbox_sync.shared.config_loader import AGENT_INTERFACE_TYPE, SyncConfig

log = logging.getLogger(__name__)


def filter_host_group_ids(groups: list[dict[str, Any]], allow_list: list[str]) -> list[str]:
    """Return ids of the groups whose name is in *allow_list*."""
    ids = [g["groupid"] for g in groups if g.get("name") in allow_list]
    log.debug("Filtered host group IDs: %s", ids)
    return ids


def filter_host_ids(hosts: list[dict[str, Any]]) -> list[str]:
    ids = [h["hostid"] for h in hosts]
    log.debug("Filtered host IDs: %s", ids)
    return ids


def filter_host_interfaces(
    table: HostTable,
    interfaces: list[dict[str, Any]],
    interface_type: int = AGENT_INTERFACE_TYPE,
) -> list[dict[str, Any]]:
    """Seed *table* with one HostFacts per host that has an agent interface.

    The host name is the interface's DNS name. When DNS is empty the IP is
    used instead and the host is flagged, since such hosts are unmanaged or
    misconfigured. The first agent interface of a host wins.

    Returns the kept interfaces.
    """
    kept: list[dict[str, Any]] = []
    for iface in interfaces:
        if int(iface.get("type", 0)) != interface_type:
            continue
        kept.append(iface)

        host_id = iface["hostid"]
        if host_id in table:
            log.debug("Host %s has more than one agent interface, keeping the first", host_id)
            continue

        dns = iface.get("dns", "")
        host = HostFacts(host_id=host_id, host_name=dns or iface.get("ip", ""))
        if not dns:
            log.error(
                "Empty DNS field in interface %s on host %s (%s)",
                iface.get("interfaceid"),
                host_id,
                iface.get("ip"),
            )
            host.mark_error("empty DNS name")
        table[host_id] = host

    log.debug("Filtered host interfaces: %d of %d", len(kept), len(interfaces))
    return kept


def filter_items(table: HostTable, items: list[dict[str, Any]]) -> None:
    """Attach every item to its host's metric list.

    Items of hosts not in *table* are dropped. An item carrying an error
    flags its host.
    """
    for item in items:
        host = table.get(item.get("hostid", ""))
        if host is None:
            continue

        metric = Metric.from_item(item)
        host.metrics.append(metric)

        if metric.error:
            log.error(
                "Item %s (%s) in host %s contains error: '%s'",
                metric.item_id,
                metric.name,
                host.host_id,
                metric.error,
            )
            host.mark_error(f"item {metric.key} errored")


def prepare(client: MonitoringBackend, config: SyncConfig) -> HostTable:
    """Build the HostTable for all hosts in the whitelisted groups."""
    table: HostTable = {}

    group_ids = filter_host_group_ids(client.list_host_groups(), config.host_groups)
    if not group_ids:
        log.warning("None of the host groups %s exist in Zabbix", config.host_groups)
        return table

    host_ids = filter_host_ids(client.list_hosts(group_ids))
    if not host_ids:
        log.warning("Whitelisted host groups contain no hosts")
        return table

    filter_host_interfaces(table, client.list_host_interfaces(host_ids), config.agent_interface_type)
    if not table:
        log.warning("No host has an agent interface")
        return table

    filter_items(table, client.list_items(list(table), config.item_search))

    log.info(
        "Ingested %d hosts (%d flagged) with %d metrics",
        len(table),
        sum(1 for h in table.values() if h.error),
        sum(len(h.metrics) for h in table.values()),
    )
    return table
