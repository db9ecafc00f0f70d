"""Reconciliation: HostFacts → NetBox create / patch operations."""

from zabbix_netbox_sync.reconciler.reconciler import Reconciler
from zabbix_netbox_sync.reconciler.stats import PlannedChange, SyncStats

__all__ = ["PlannedChange", "Reconciler", "SyncStats"]
