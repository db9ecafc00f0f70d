"""End-to-end tests: Zabbix fake → scan → reconcile → NetBox fake, plus the CLI."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from zabbix_netbox_sync.contracts.enums import ObjType
from zabbix_netbox_sync.contracts.errors import BackendError
from zabbix_netbox_sync.shared.config_loader import SyncConfig
from zabbix_netbox_sync.sync import cli
from zabbix_netbox_sync.sync.pipeline import collect_hosts, run_sync


class TestCollectHosts:
    def test_facts_from_zabbix(self, zabbix, config):
        table = collect_hosts(zabbix, config)

        vm = table["10101"]
        assert vm.error is False
        assert vm.obj_type is ObjType.VIRTUAL
        assert vm.cpus == 4.0
        assert vm.memory == 4096
        assert vm.label == "Build server"
        assert vm.interfaces["eth0"].addresses == ["10.0.0.5", "2001:db8::5", "fe80::5054:ff:fe12:3456"]
        assert vm.interfaces["eth0"].mtu == 1500
        assert vm.interfaces["eth0"].mac_address == "52:54:00:12:34:56"

        assert table["10102"].error is True
        assert table["10102"].obj_type is None


class TestRunSync:
    def test_wet_run(self, zabbix, netbox, config, tmp_path):
        stats_path = tmp_path / "out" / "stats.json"
        stats = run_sync(zabbix, netbox, config, dry_run=False, stats_path=str(stats_path))

        assert [vm["name"] for vm in netbox.vms] == ["vm01.example.com"]
        assert [i["name"] for i in netbox.interfaces] == ["eth0"]
        assert netbox.macs[0]["assigned_object_id"] == netbox.interfaces[0]["id"]
        # the DNS-less host never reaches NetBox
        assert all(args[0] != "10.0.0.9" for _, args in netbox.calls)
        assert stats.hosts_skipped == 1

        data = json.loads(stats_path.read_text(encoding="utf-8"))
        assert data["dry_run"] is False
        assert data["created"] == 3  # vm, mac, interface
        assert data["assigned"] == 1

    def test_dry_run_makes_no_changes(self, zabbix, netbox, config):
        stats = run_sync(zabbix, netbox, config, dry_run=True)
        assert netbox.mutating_calls == []
        assert stats.count("create", "virtual_machine") == 1

    def test_rerun_is_idempotent(self, zabbix, netbox, config):
        run_sync(zabbix, netbox, config, dry_run=False)
        netbox.calls.clear()
        run_sync(zabbix, netbox, config, dry_run=False)
        assert netbox.mutating_calls == []

    def test_backend_failure_propagates(self, zabbix, config):
        class FailingNetBox:
            def list_virtual_machines(self, name, limit):
                raise BackendError("NetBox GET", "HTTP 503")

        with pytest.raises(BackendError):
            run_sync(zabbix, FailingNetBox(), config, dry_run=False)


class TestCli:
    @pytest.mark.parametrize(
        ("argv", "problem"),
        [
            (["--dry"], "Specify --netbox <URL> and --zabbix <URL>."),
            (["--zabbix", "z", "--netbox", "n", "--dry", "--wet"], "Specify --dry OR --wet, not both."),
            (["--zabbix", "z", "--netbox", "n"], "Specify --dry OR --wet."),
        ],
    )
    def test_validate_args(self, argv, problem):
        args = cli.build_parser().parse_args(argv)
        assert problem in cli.validate_args(args)

    def test_invalid_usage_exits_1(self):
        assert cli.main(["--dry", "--wet"]) == 1

    def test_missing_token_exits_1(self, monkeypatch):
        monkeypatch.delenv("NETBOX_TOKEN", raising=False)
        assert cli.main(["--zabbix", "https://z", "--netbox", "https://n", "--dry"]) == 1

    def test_runs_pipeline(self, monkeypatch, zabbix, netbox):
        monkeypatch.setenv("NETBOX_TOKEN", "nb")
        monkeypatch.setenv("ZABBIX_TOKEN", "zt")
        with (
            patch.object(cli, "ZabbixClient", return_value=zabbix) as zc,
            patch.object(cli, "NetBoxClient", return_value=netbox) as nc,
        ):
            rc = cli.main(["--zabbix", "https://z", "--netbox", "https://n", "--wet", "--host", "vm01.example.com"])

        assert rc == 0
        assert zc.call_args.kwargs["token"] == "zt"
        nc.assert_called_once_with("https://n", "nb", verify=True)
        assert [vm["name"] for vm in netbox.vms] == ["vm01.example.com"]

    def test_backend_error_exits_1(self, monkeypatch):
        monkeypatch.setenv("NETBOX_TOKEN", "nb")
        with patch.object(cli, "ZabbixClient", side_effect=BackendError("Zabbix user.login", "refused")):
            assert cli.main(["--zabbix", "https://z", "--netbox", "https://n", "--dry"]) == 1

    def test_config_defaults(self):
        assert isinstance(cli.load_sync_config(None), SyncConfig)
