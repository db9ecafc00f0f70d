"""Zabbix side: JSON-RPC client and telemetry ingestion."""
