"""Конвеєр синхронізації: Zabbix -> сканування -> NetBox."""

from __future__ import annotations

import logging

from zabbix_netbox_sync.contracts.backends import CmdbBackend, MonitoringBackend
from zabbix_netbox_sync.contracts.host import HostTable
from zabbix_netbox_sync.reconciler.reconciler import Reconciler
from zabbix_netbox_sync.reconciler.stats import SyncStats
from zabbix_netbox_sync.scanner.scanner import scan_hosts
from zabbix_netbox_sync.shared.config_loader import SyncConfig
from zabbix_netbox_sync.zabbix.ingest import prepare

log = logging.getLogger(__name__)


def collect_hosts(zabbix: MonitoringBackend, config: SyncConfig) -> HostTable:
    """Ingest and scan; the returned table is read-only from here on."""
    table = prepare(zabbix, config)
    scan_hosts(table)
    return table


def run_sync(
    zabbix: MonitoringBackend,
    netbox: CmdbBackend,
    config: SyncConfig,
    dry_run: bool,
    only_host: str | None = None,
    stats_path: str | None = None,
) -> SyncStats:
    """Execute one full sync run and return its statistics."""
    table = collect_hosts(zabbix, config)

    reconciler = Reconciler(netbox, config, dry_run=dry_run)
    stats = reconciler.reconcile(table, only_host=only_host)

    if stats_path:
        stats.write(stats_path)
    return stats
