"""Завантаження YAML конфігурації та облікових даних синхронізації."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from zabbix_netbox_sync.contracts.errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_HOST_GROUPS: list[str] = ["Owners/Engineering/Infrastructure"]

# Searched with "any-of" + wildcards; keep verbatim.
DEFAULT_ITEM_KEYS: list[str] = [
    "agent.hostname",
    "net.if.ip4[*]",
    "net.if.ip6[*]",
    "sys.hw.manufacturer",
    "sys.hw.metadata",
    "sys.mount.nfs",
    "sys.net.listen",
    "sys.os.release",
    "system.cpu.num",
    "system.sw.arch",
    "vm.memory.size[total]",
]

AGENT_INTERFACE_TYPE = 1


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Зчитує YAML файл та повертає його вміст як dict.

    Args:
        path: Шлях до файлу.

    Returns:
        Вміст файлу як словник.

    Raises:
        FileNotFoundError: Якщо файл не знайдено.
        ConfigError: Якщо вміст не є YAML-словником.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Top level of {p} must be a mapping")
    log.debug("Loaded config %s (%d top-level keys)", p.name, len(data or {}))
    return data or {}


@dataclass(slots=True)
class Credentials:
    netbox_token: str = ""
    zabbix_user: str = "guest"
    zabbix_passphrase: str = ""
    zabbix_token: str = ""
    verify_ssl: bool = True
    zabbix_legacy_auth: bool = False

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> Credentials:
        """Read NETBOX_TOKEN / ZABBIX_USER / ZABBIX_PASSPHRASE / ZABBIX_TOKEN."""
        env = os.environ if env is None else env
        return cls(
            netbox_token=env.get("NETBOX_TOKEN", ""),
            zabbix_user=env.get("ZABBIX_USER", "") or "guest",
            zabbix_passphrase=env.get("ZABBIX_PASSPHRASE", ""),
            zabbix_token=env.get("ZABBIX_TOKEN", ""),
            verify_ssl=env.get("VERIFY_SSL", "true").lower() != "false",
            zabbix_legacy_auth=env.get("ZABBIX_LEGACY_AUTH", "false").lower() == "true",
        )


@dataclass(slots=True)
class SyncConfig:
    """Settings from config/sync.yaml, with built-in defaults."""

    host_groups: list[str] = field(default_factory=lambda: list(DEFAULT_HOST_GROUPS))
    agent_interface_type: int = AGENT_INTERFACE_TYPE
    item_keys: list[str] = field(default_factory=lambda: list(DEFAULT_ITEM_KEYS))
    extra_item_keys: list[str] = field(default_factory=list)
    site_name: str = "Prague - PRG2"
    site_slug: str = "prg2"
    cluster: str = "Unmapped"
    status: str = "active"
    skip_interfaces: list[str] = field(default_factory=lambda: ["lo"])

    @property
    def item_search(self) -> list[str]:
        return self.item_keys + [k for k in self.extra_item_keys if k not in self.item_keys]

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> SyncConfig:
        zcfg = cfg.get("zabbix") or {}
        ncfg = cfg.get("netbox") or {}
        rcfg = cfg.get("reconcile") or {}
        site = ncfg.get("site") or {}
        defaults = cls()

        host_groups = zcfg.get("host_groups", defaults.host_groups)
        if isinstance(host_groups, str):
            host_groups = [host_groups]
        if not isinstance(host_groups, list):
            raise ConfigError("zabbix.host_groups must be a list of group names")

        return cls(
            host_groups=[str(g) for g in host_groups],
            agent_interface_type=int(zcfg.get("agent_interface_type", defaults.agent_interface_type)),
            item_keys=list(zcfg.get("item_keys") or defaults.item_keys),
            extra_item_keys=list(zcfg.get("extra_item_keys") or []),
            site_name=site.get("name", defaults.site_name),
            site_slug=site.get("slug", defaults.site_slug),
            cluster=ncfg.get("cluster", defaults.cluster),
            status=ncfg.get("status", defaults.status),
            skip_interfaces=list(rcfg.get("skip_interfaces") or defaults.skip_interfaces),
        )


def load_sync_config(path: str | Path | None) -> SyncConfig:
    """Load *path* into a SyncConfig; ``None`` returns the defaults."""
    if path is None:
        return SyncConfig()
    cfg = SyncConfig.from_dict(load_yaml(path))
    log.info(
        "Loaded sync config %s: %d host group(s), %d item key(s)",
        path,
        len(cfg.host_groups),
        len(cfg.item_search),
    )
    return cfg
