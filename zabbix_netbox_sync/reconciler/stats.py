"""Run statistics and the change log written to --stats."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


@dataclass(slots=True)
class PlannedChange:
    """One create / patch / assign — applied (wet) or only intended (dry)."""

    host: str
    obj: str      # virtual_machine | vm_interface | mac_address
    action: str   # create | patch | assign
    payload: dict[str, Any]
    applied: bool
    object_id: int = 0


@dataclass(slots=True)
class SyncStats:
    dry_run: bool = True
    hosts_total: int = 0
    hosts_skipped: int = 0
    hosts_processed: int = 0
    unchanged: int = 0
    ambiguous: int = 0
    changes: list[PlannedChange] = field(default_factory=list)

    def record(
        self,
        host: str,
        obj: str,
        action: str,
        payload: dict[str, Any],
        applied: bool,
        object_id: int = 0,
    ) -> None:
        self.changes.append(PlannedChange(host, obj, action, dict(payload), applied, object_id))

    def count(self, action: str, obj: str | None = None) -> int:
        return sum(1 for c in self.changes if c.action == action and (obj is None or c.obj == obj))

    @property
    def applied(self) -> int:
        return sum(1 for c in self.changes if c.applied)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "hosts_total": self.hosts_total,
            "hosts_skipped": self.hosts_skipped,
            "hosts_processed": self.hosts_processed,
            "created": self.count("create"),
            "patched": self.count("patch"),
            "assigned": self.count("assign"),
            "unchanged": self.unchanged,
            "ambiguous": self.ambiguous,
            "changes": [asdict(c) for c in self.changes],
        }

    def write(self, path: str | Path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", encoding="utf-8") as fh:
            json.dump(self.to_dict(), fh, indent=2, ensure_ascii=False)
        log.info("Wrote stats -> %s", p)
