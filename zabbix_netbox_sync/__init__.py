"""Zabbix → NetBox inventory sync.

Modules
───────
  contracts   — Metric, HostFacts, InterfaceFacts, enums, backend protocols
  zabbix      — JSON-RPC client and telemetry ingestion/filtering
  scanner     — raw item values → typed HostFacts
  netbox      — REST client for the CMDB capabilities
  reconciler  — diff HostFacts against NetBox, create/patch objects
  sync        — pipeline orchestration and argparse entry-point
"""

__version__ = "0.3.0"
