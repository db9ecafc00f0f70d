"""NetBox REST client (requests).

Thin wrapper over the endpoints the reconciler uses. Responses are
returned as plain dicts; validation into typed objects happens in the
reconciler. HTTP errors and undecodable bodies raise BackendError.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from zabbix_netbox_sync.contracts.errors import BackendError

log = logging.getLogger(__name__)

VM_ENDPOINT = "/api/virtualization/virtual-machines/"
VM_INTERFACE_ENDPOINT = "/api/virtualization/interfaces/"
DEVICE_ENDPOINT = "/api/dcim/devices/"
MAC_ENDPOINT = "/api/dcim/mac-addresses/"
VLAN_ENDPOINT = "/api/ipam/vlans/"

VM_INTERFACE_OBJECT_TYPE = "virtualization.vminterface"


class NetBoxClient:
    """Token-authenticated session against one NetBox instance."""

    def __init__(
        self,
        base_url: str,
        token: str,
        verify: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.verify = verify
        self.session.headers.update(
            {
                "Authorization": f"Token {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        log.debug("Connecting to NetBox at %s", self.base_url)

    # ── Transport ────────────────────────────────────────────────────────

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        if not url.startswith("http"):
            url = self.base_url + url
        operation = f"NetBox {method} {url}"
        try:
            resp = self.session.request(method, url, params=params, json=payload)
        except requests.RequestException as exc:
            raise BackendError(operation, str(exc)) from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise BackendError(operation, f"HTTP {resp.status_code}, undecodable body: {exc}") from exc

        if not resp.ok:
            log.error("NetBox returned HTTP %s: %s", resp.status_code, body)
            raise BackendError(operation, f"HTTP {resp.status_code}: {body}")
        log.debug("%s returned %s", operation, body)
        return body

    def _list(self, path: str, params: dict[str, Any], limit: int | None = None) -> list[dict[str, Any]]:
        """GET a list endpoint. With *limit* only one page is read."""
        if limit is not None:
            return self._request("GET", path, params={**params, "limit": limit}).get("results", [])

        results: list[dict[str, Any]] = []
        page = self._request("GET", path, params=params)
        results.extend(page.get("results", []))
        while page.get("next"):
            page = self._request("GET", page["next"])
            results.extend(page.get("results", []))
        return results

    # ── Virtual machines ─────────────────────────────────────────────────

    def list_virtual_machines(self, name: str, limit: int) -> list[dict[str, Any]]:
        return self._list(VM_ENDPOINT, {"name": name}, limit=limit)

    def create_virtual_machine(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", VM_ENDPOINT, payload=payload)

    def patch_virtual_machine(self, vm_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("PATCH", f"{VM_ENDPOINT}{vm_id}/", payload=payload)

    # ── VM interfaces ────────────────────────────────────────────────────

    def list_vm_interfaces(self, vm_id: int) -> list[dict[str, Any]]:
        return self._list(VM_INTERFACE_ENDPOINT, {"virtual_machine_id": vm_id})

    def create_vm_interface(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", VM_INTERFACE_ENDPOINT, payload=payload)

    def patch_vm_interface(self, iface_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("PATCH", f"{VM_INTERFACE_ENDPOINT}{iface_id}/", payload=payload)

    # ── Devices ──────────────────────────────────────────────────────────

    def list_devices(self, name: str, limit: int) -> list[dict[str, Any]]:
        return self._list(DEVICE_ENDPOINT, {"name": name}, limit=limit)

    # ── MAC addresses / VLANs ────────────────────────────────────────────

    def list_mac_addresses(self, address: str) -> list[dict[str, Any]]:
        return self._list(MAC_ENDPOINT, {"mac_address": address})

    def create_mac_address(self, address: str) -> dict[str, Any]:
        return self._request("POST", MAC_ENDPOINT, payload={"mac_address": address})

    def assign_mac_address(
        self,
        mac_id: int,
        address: str,
        owner_type: str,
        owner_id: int,
    ) -> dict[str, Any]:
        return self._request(
            "PATCH",
            f"{MAC_ENDPOINT}{mac_id}/",
            payload={
                "mac_address": address,
                "assigned_object_type": owner_type,
                "assigned_object_id": owner_id,
            },
        )

    def list_vlans(self, vid: int) -> list[dict[str, Any]]:
        return self._list(VLAN_ENDPOINT, {"vid": vid})
