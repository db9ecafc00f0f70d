"""Metric scanning: Zabbix item values → HostFacts."""

from zabbix_netbox_sync.scanner.scanner import CLASSIFIERS, classify, scan_host, scan_hosts

__all__ = ["CLASSIFIERS", "classify", "scan_host", "scan_hosts"]
