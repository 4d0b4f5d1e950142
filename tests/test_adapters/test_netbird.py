"""Tests for NetBird client commands."""

from unittest.mock import MagicMock

from netspawn.adapters.netbird import NetbirdClient
from netspawn.utils.command import CommandResult


def make_client(management_url=None):
    host = MagicMock()
    host.exec.return_value = CommandResult(returncode=0)
    return NetbirdClient(host, management_url=management_url), host


def test_install_steps_order():
    client, _ = make_client()

    steps = client.install_steps()
    commands = [command for _, command in steps]

    assert commands[0].startswith("apt-get update && apt-get -y upgrade")
    assert "curl ca-certificates gnupg" in commands[0]
    assert commands[1] == "curl -fsSL https://pkgs.netbird.io/install.sh | sh"
    assert commands[2] == "systemctl enable netbird"
    assert "autoclean" in commands[3]


def test_setup_key_is_redacted():
    client, host = make_client()

    client.up_with_setup_key(101, "ABCD-1234")

    args, kwargs = host.exec.call_args
    assert args == (101, "netbird up --setup-key ABCD-1234")
    assert kwargs["redact"] == ["netbird up --setup-key ABCD-1234"]


def test_login_streams_to_terminal():
    client, host = make_client()

    client.login_interactive(101)

    host.exec.assert_called_once_with(101, "netbird login", capture_output=False)


def test_management_url_appended():
    client, host = make_client(management_url="https://nb.example.com")

    client.up(101)

    host.exec.assert_called_once_with(101, "netbird up --management-url https://nb.example.com")


def test_status_is_unchecked():
    client, host = make_client()

    client.status(101)

    host.exec.assert_called_once_with(101, "netbird status", check=False)


def test_is_installed():
    client, host = make_client()
    host.exec.return_value = CommandResult(returncode=1)

    assert not client.is_installed(101)
    assert host.exec.call_args[0][1] == "test -f /etc/netbird/config.json"
