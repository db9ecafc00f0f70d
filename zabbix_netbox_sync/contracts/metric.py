"""Metric data-class — one Zabbix item value attached to a host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Metric:
    """Latest value of one Zabbix item, as fetched."""

    item_id: str
    key: str    # e.g. net.if.ip4["eth0"]
    name: str
    value: str  # lastvalue, always a string
    error: str = ""  # non-empty → the value is unreliable

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> Metric:
        """Build a Metric from an ``item.get`` result object."""
        return cls(
            item_id=str(item.get("itemid", "")),
            key=item.get("key_", ""),
            name=item.get("name", ""),
            value=str(item.get("lastvalue", "")),
            error=item.get("error", "") or "",
        )
