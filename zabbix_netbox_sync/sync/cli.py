"""CLI entry-point for the Zabbix → NetBox sync.

Usage examples
--------------
# Show what would change:
python -m zabbix_netbox_sync --zabbix https://zabbix.example.com \\
    --netbox https://netbox.example.com --dry

# Apply changes for a single host:
python -m zabbix_netbox_sync --zabbix ... --netbox ... --wet --host vm01.example.com

Credentials are read from NETBOX_TOKEN, ZABBIX_USER (default: guest),
ZABBIX_PASSPHRASE and, optionally, ZABBIX_TOKEN.
"""

from __future__ import annotations

import argparse
import logging
import sys

from zabbix_netbox_sync.contracts.errors import ConfigError, ZabbixNetBoxSyncError
from zabbix_netbox_sync.netbox.client import NetBoxClient
from zabbix_netbox_sync.shared.config_loader import Credentials, load_sync_config
from zabbix_netbox_sync.shared.logger import setup_logging
from zabbix_netbox_sync.sync.pipeline import run_sync
from zabbix_netbox_sync.zabbix.client import ZabbixClient

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="zabbix-netbox-sync",
        description="Zabbix -> NetBox synchronization: converge NetBox VMs to Zabbix telemetry",
    )
    p.add_argument("--zabbix", default="", help="URL to a Zabbix instance")
    p.add_argument("--netbox", default="", help="URL to a NetBox instance")
    p.add_argument(
        "--dry",
        action="store_true",
        default=False,
        help="Run without performing any changes",
    )
    p.add_argument(
        "--wet",
        action="store_true",
        default=False,
        help="Run and perform changes",
    )
    p.add_argument(
        "--host",
        default=None,
        help="Only reconcile the host with this name (for targeted testing)",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Path to sync config YAML (default: built-in settings)",
    )
    p.add_argument(
        "--stats",
        default=None,
        help="Write run statistics and the change log as JSON to this path",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    p.add_argument(
        "--log-format",
        default="text",
        choices=["text", "json"],
        help="Log output format (default: text)",
    )
    return p


def validate_args(args: argparse.Namespace) -> list[str]:
    """Return every command line problem (empty = valid)."""
    problems: list[str] = []
    if not args.zabbix or not args.netbox:
        problems.append("Specify --netbox <URL> and --zabbix <URL>.")
    if args.dry and args.wet:
        problems.append("Specify --dry OR --wet, not both.")
    if not args.dry and not args.wet:
        problems.append("Specify --dry OR --wet.")
    return problems


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    problems = validate_args(args)
    for problem in problems:
        log.error(problem)
    if problems:
        return 1

    try:
        config = load_sync_config(args.config)
        creds = Credentials.from_env()
        if not creds.netbox_token:
            raise ConfigError("NETBOX_TOKEN is not set")

        zabbix = ZabbixClient(
            args.zabbix,
            user=creds.zabbix_user,
            password=creds.zabbix_passphrase,
            token=creds.zabbix_token,
            verify=creds.verify_ssl,
            legacy_auth=creds.zabbix_legacy_auth,
        )
        netbox = NetBoxClient(args.netbox, creds.netbox_token, verify=creds.verify_ssl)

        run_sync(
            zabbix,
            netbox,
            config,
            dry_run=args.dry,
            only_host=args.host,
            stats_path=args.stats,
        )
    except (ZabbixNetBoxSyncError, FileNotFoundError) as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
