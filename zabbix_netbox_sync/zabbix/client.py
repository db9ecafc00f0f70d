"""Zabbix JSON-RPC client (requests).

Only the four read calls the ingestion phase needs are exposed. Every
failure — transport, HTTP status, JSON-RPC ``error`` object, undecodable
body — is raised as BackendError; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from zabbix_netbox_sync.contracts.errors import BackendError

log = logging.getLogger(__name__)

API_PATH = "/api_jsonrpc.php"


class ZabbixClient:
    """Authenticated session against ``<base_url>/api_jsonrpc.php``."""

    def __init__(
        self,
        base_url: str,
        user: str = "guest",
        password: str = "",
        token: str = "",
        verify: bool = True,
        session: requests.Session | None = None,
        legacy_auth: bool = False,
    ) -> None:
        self.url = base_url.rstrip("/")
        if not self.url.endswith(API_PATH):
            self.url += API_PATH
        self.session = session or requests.Session()
        self.session.verify = verify
        self.session.headers.update({"Content-Type": "application/json-rpc"})
        self._request_id = 0
        # servers before 6.4 only read the token from the request body
        self.legacy_auth = legacy_auth
        self._auth = ""

        log.debug("Connecting to Zabbix at %s", self.url)
        if not token:
            token = self.call("user.login", {"username": user, "password": password})
            log.info("Logged in to Zabbix as %s", user)
        if legacy_auth:
            self._auth = token
        else:
            self.session.headers["Authorization"] = f"Bearer {token}"

    # ── Transport ────────────────────────────────────────────────────────

    def call(self, method: str, params: dict[str, Any]) -> Any:
        """Send one JSON-RPC request and return its ``result``."""
        self._request_id += 1
        body = {"jsonrpc": "2.0", "method": method, "params": params, "id": self._request_id}
        if self._auth:
            body["auth"] = self._auth
        try:
            resp = self.session.post(self.url, json=body)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise BackendError(f"Zabbix {method}", str(exc)) from exc
        except ValueError as exc:
            raise BackendError(f"Zabbix {method}", f"undecodable response body: {exc}") from exc

        if not isinstance(data, dict):
            raise BackendError(f"Zabbix {method}", f"unexpected response {data!r}")
        if "error" in data:
            err = data["error"]
            raise BackendError(f"Zabbix {method}", f"{err.get('message', '')} {err.get('data', '')}".strip())
        return data.get("result", [])

    # ── Capabilities ─────────────────────────────────────────────────────

    def list_host_groups(self) -> list[dict[str, Any]]:
        return self.call("hostgroup.get", {"output": ["groupid", "name"]})

    def list_hosts(self, group_ids: list[str]) -> list[dict[str, Any]]:
        return self.call("host.get", {"groupids": group_ids, "output": ["hostid", "host"]})

    def list_host_interfaces(self, host_ids: list[str]) -> list[dict[str, Any]]:
        return self.call(
            "hostinterface.get",
            {
                "hostids": host_ids,
                "output": ["interfaceid", "hostid", "type", "dns", "ip"],
            },
        )

    def list_items(self, host_ids: list[str], key_search: list[str]) -> list[dict[str, Any]]:
        return self.call(
            "item.get",
            {
                "hostids": host_ids,
                "output": ["itemid", "hostid", "key_", "name", "lastvalue", "error"],
                "search": {"key_": key_search},
                "searchByAny": True,
                "searchWildcardsEnabled": True,
            },
        )
