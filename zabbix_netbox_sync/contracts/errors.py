"""Exceptions that abort a sync run.

Host-level problems (missing items, ambiguous matches) are never raised;
they are logged and the host is skipped.
"""

from __future__ import annotations


class ZabbixNetBoxSyncError(Exception):
    """Base class for all fatal sync errors."""


class ConfigError(ZabbixNetBoxSyncError):
    """Invalid or incomplete configuration / command line."""


class BackendError(ZabbixNetBoxSyncError):
    """A Zabbix or NetBox call failed or returned an undecodable body."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail


class UnknownInterfaceModeError(ZabbixNetBoxSyncError):
    """NetBox returned an interface mode outside the known set."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown interface mode '{value}'")
        self.value = value
