"""Host facts contract — data structures shared by all modules."""

from zabbix_netbox_sync.contracts.enums import InterfaceMode, ObjType
from zabbix_netbox_sync.contracts.errors import (
    BackendError,
    ConfigError,
    UnknownInterfaceModeError,
    ZabbixNetBoxSyncError,
)
from zabbix_netbox_sync.contracts.host import HostFacts, HostTable, InterfaceFacts
from zabbix_netbox_sync.contracts.metric import Metric
from zabbix_netbox_sync.contracts.remote import RemoteInterface

__all__ = [
    "BackendError",
    "ConfigError",
    "HostFacts",
    "HostTable",
    "InterfaceFacts",
    "InterfaceMode",
    "Metric",
    "ObjType",
    "RemoteInterface",
    "UnknownInterfaceModeError",
    "ZabbixNetBoxSyncError",
]
