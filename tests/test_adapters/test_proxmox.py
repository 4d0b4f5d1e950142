"""Tests for the Proxmox host adapter."""

import subprocess

import pytest

from netspawn.adapters.proxmox import ProxmoxHost


@pytest.fixture
def host(proxmox_runner, tmp_path):
    return ProxmoxHost(runner=proxmox_runner, lxc_config_dir=tmp_path)


class TestHostFacts:
    """Test version and identifier queries."""

    def test_version(self, host):
        assert host.version() == "8.2.4"

    def test_version_missing_tool(self, runner):
        runner.on("pveversion", returncode=127)
        assert ProxmoxHost(runner=runner).version() is None

    def test_next_vmid(self, host):
        assert host.next_vmid() == 100

    def test_next_vmid_quoted(self, runner):
        runner.on("pvesh get /cluster/nextid", '"105"\n')
        assert ProxmoxHost(runner=runner).next_vmid() == 105

    def test_vmid_available(self, host, proxmox_runner):
        assert host.vmid_available(200)
        assert proxmox_runner.calls[-1] == ["pvesh", "get", "/cluster/nextid", "--vmid", "200"]

    def test_vmid_in_use(self, host, proxmox_runner):
        proxmox_runner.on("pvesh get /cluster/nextid --vmid 100", returncode=2, stderr="VM 100 already exists")
        assert not host.vmid_available(100)


class TestStorage:
    """Test storage and template commands."""

    def test_storage_by_content(self, host):
        assert host.storage_names(content="rootdir") == ["local-lvm"]
        assert host.storage_names() == ["local", "local-lvm"]

    def test_storage_query_failure_is_empty(self, runner):
        runner.on("pvesm status", returncode=255, stderr="ipcc_send_rec failed")
        assert ProxmoxHost(runner=runner).storage_names(content="rootdir") == []

    def test_available_templates(self, host, proxmox_runner):
        assert host.available_templates("system", "debian-12") == ["debian-12-standard_12.7-1_amd64.tar.zst"]
        assert proxmox_runner.calls[-1] == ["pveam", "available", "--section", "system"]

    def test_template_present(self, host, proxmox_runner):
        template = "debian-13-standard_13.1-2_amd64.tar.zst"
        assert not host.template_present("local", template)

        proxmox_runner.on("pveam list", f"local:vztmpl/{template}   129.54MB\n")
        assert host.template_present("local", template)

    def test_download_failure_raises(self, runner):
        runner.on("pveam download", returncode=1, stderr="404 Not Found")
        with pytest.raises(subprocess.CalledProcessError):
            ProxmoxHost(runner=runner).download_template("local", "debian-13-standard_13.1-2_amd64.tar.zst")


class TestContainers:
    """Test pct commands."""

    def test_create_passes_options_in_order(self, host, proxmox_runner):
        host.create_container(
            101,
            "local:vztmpl/debian-13-standard_13.1-2_amd64.tar.zst",
            {"hostname": "netbird", "password": "secret1", "start": "0"},
        )

        assert proxmox_runner.calls[-1] == [
            "pct", "create", "101", "local:vztmpl/debian-13-standard_13.1-2_amd64.tar.zst",
            "--hostname", "netbird", "--password", "secret1", "--start", "0",
        ]
        assert proxmox_runner.kwargs[-1]["redact"] == ["secret1"]

    def test_is_running(self, host, proxmox_runner):
        assert host.is_running(101)
        proxmox_runner.on("pct status", "status: stopped\n")
        assert not host.is_running(101)

    def test_exec_wraps_in_bash(self, host, proxmox_runner):
        host.exec(101, "apt-get update")

        assert proxmox_runner.calls[-1] == ["pct", "exec", "101", "--", "bash", "-c", "apt-get update"]
        assert proxmox_runner.kwargs[-1]["timeout"] == 600

    def test_streamed_exec_has_no_timeout(self, host, proxmox_runner):
        host.exec(101, "netbird login", capture_output=False)

        assert proxmox_runner.kwargs[-1]["capture_output"] is False
        assert proxmox_runner.kwargs[-1]["timeout"] is None

    def test_interface_address(self, host):
        assert host.interface_address(101) == "192.168.1.50"

    def test_interface_address_no_lease(self, host, proxmox_runner):
        proxmox_runner.on("ip -4 addr show eth0", "")
        assert host.interface_address(101) is None


class TestConfigFile:
    """Test the persisted container configuration."""

    def test_read_missing_config(self, host):
        assert host.read_config(101) == ""

    def test_append_config(self, host, tmp_path):
        (tmp_path / "101.conf").write_text("arch: amd64\n")

        host.append_config(101, "lxc.cgroup2.devices.allow: c 10:200 rwm\n")

        assert host.config_path(101) == tmp_path / "101.conf"
        assert host.read_config(101) == "arch: amd64\nlxc.cgroup2.devices.allow: c 10:200 rwm\n"
