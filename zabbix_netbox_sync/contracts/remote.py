"""NetBox objects validated at the API boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from zabbix_netbox_sync.contracts.enums import InterfaceMode
from zabbix_netbox_sync.contracts.errors import UnknownInterfaceModeError


def parse_interface_mode(raw: Any) -> InterfaceMode | None:
    """Convert a NetBox ``mode`` field into an InterfaceMode.

    NetBox serialises choice fields as ``{"value": ..., "label": ...}``;
    a bare string is accepted as well. ``None`` / empty means no 802.1Q mode.

    Raises:
        UnknownInterfaceModeError: value outside the known set.
    """
    if isinstance(raw, dict):
        raw = raw.get("value")
    if raw is None or raw == "":
        return None
    try:
        return InterfaceMode(raw)
    except ValueError:
        raise UnknownInterfaceModeError(str(raw)) from None


@dataclass(slots=True)
class RemoteInterface:
    """An existing VM interface in NetBox."""

    id: int
    name: str
    mtu: int | None = None
    mode: InterfaceMode | None = None
    enabled: bool = True
    tagged_vlans: list[int] = field(default_factory=list)

    @classmethod
    def from_api(cls, obj: dict[str, Any]) -> RemoteInterface:
        return cls(
            id=int(obj["id"]),
            name=obj.get("name", ""),
            mtu=obj.get("mtu"),
            mode=parse_interface_mode(obj.get("mode")),
            enabled=bool(obj.get("enabled", True)),
            tagged_vlans=[int(v["id"]) for v in obj.get("tagged_vlans") or []],
        )
