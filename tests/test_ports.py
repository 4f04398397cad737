"""Tests for port probing and range checks.

Covers:
- Free and occupied single ports (real sockets)
- Unexpected bind errors are not reported as "occupied"
- Range checks report every occupied port
- Process lookup and report formatting
"""

from __future__ import annotations

import errno
import socket
from unittest.mock import MagicMock, patch

import pytest

from create_nextws import ports
from create_nextws.errors import PortProbeError, PortRangeUnavailableError
from create_nextws.ports import (
    PortStatus,
    check_port_range,
    ensure_port_range_free,
    format_port_report,
    is_port_free,
)


@pytest.fixture
def listener():
    """A socket listening on an ephemeral port on all interfaces."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("0.0.0.0", 0))
    sock.listen(1)
    yield sock
    sock.close()


@pytest.fixture
def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("0.0.0.0", 0))
        return s.getsockname()[1]


# ---------------------------------------------------------------------------
# Single port
# ---------------------------------------------------------------------------


class TestIsPortFree:
    def test_free_port(self, free_port):
        assert is_port_free(free_port) is True

    def test_occupied_port(self, listener):
        assert is_port_free(listener.getsockname()[1]) is False

    def test_unexpected_error_propagates(self):
        fake = MagicMock()
        fake.__enter__.return_value = fake
        fake.bind.side_effect = PermissionError(errno.EACCES, "Permission denied")
        with patch.object(ports.socket, "socket", return_value=fake):
            with pytest.raises(PortProbeError) as excinfo:
                is_port_free(80)
        assert excinfo.value.port == 80
        assert isinstance(excinfo.value.cause, PermissionError)

    def test_in_use_error_is_occupied(self):
        fake = MagicMock()
        fake.__enter__.return_value = fake
        fake.bind.side_effect = OSError(errno.EADDRINUSE, "Address already in use")
        with patch.object(ports.socket, "socket", return_value=fake):
            assert is_port_free(3100) is False


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


class TestPortRange:
    def test_checks_every_port(self, monkeypatch):
        busy = {3102, 3105}
        monkeypatch.setattr(ports, "is_port_free", lambda port: port not in busy)

        statuses = check_port_range(3100, 8)
        assert [s.port for s in statuses] == list(range(3100, 3108))
        assert [s.port for s in statuses if not s.is_open] == [3102, 3105]

    def test_all_free(self, monkeypatch):
        monkeypatch.setattr(ports, "is_port_free", lambda port: True)
        statuses = ensure_port_range_free(4000, 3)
        assert statuses == [PortStatus(4000, True), PortStatus(4001, True), PortStatus(4002, True)]

    def test_occupied_ports_are_reported(self, monkeypatch):
        monkeypatch.setattr(ports, "is_port_free", lambda port: port not in (4000, 4009))
        monkeypatch.setattr(ports, "get_process_using_port", lambda port: (1234, "node") if port == 4000 else None)

        with pytest.raises(PortRangeUnavailableError) as excinfo:
            ensure_port_range_free(4000, 10)
        assert excinfo.value.occupied == [4000, 4009]
        assert excinfo.value.owners == {4000: (1234, "node")}

    def test_real_listener_fails_range(self, listener):
        port = listener.getsockname()[1]
        with pytest.raises(PortRangeUnavailableError) as excinfo:
            ensure_port_range_free(port, 1)
        assert excinfo.value.occupied == [port]

    @pytest.mark.parametrize("start, count", [(3100, 0), (0, 5), (65530, 10)])
    def test_invalid_range(self, start, count):
        with pytest.raises(ValueError):
            check_port_range(start, count)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


class TestReport:
    def test_format_port_report(self):
        error = PortRangeUnavailableError(3100, 10, [3100, 3104], {3100: (42, "node"), 3104: (None, "unknown")})
        report = format_port_report(error)
        assert "3100-3109" in report
        assert "3104" in report
        assert "node (PID: 42)" in report
        assert "Process: unknown" in report

    def test_get_process_using_port_handles_access_denied(self, monkeypatch):
        def deny(kind):
            raise ports.psutil.AccessDenied()

        monkeypatch.setattr(ports.psutil, "net_connections", deny)
        assert ports.get_process_using_port(3100) is None

    def test_get_process_using_port_names_listener(self, monkeypatch):
        listening = MagicMock(status=ports.psutil.CONN_LISTEN, laddr=MagicMock(port=3100), pid=42)
        outgoing = MagicMock(status="ESTABLISHED", laddr=MagicMock(port=3100), pid=7)
        monkeypatch.setattr(ports.psutil, "net_connections", lambda kind: [outgoing, listening])
        monkeypatch.setattr(ports.psutil, "Process", lambda pid: MagicMock(**{"name.return_value": "node"}))
        assert ports.get_process_using_port(3100) == (42, "node")
        assert ports.get_process_using_port(3101) is None

    def test_get_process_using_port_without_pid(self, monkeypatch):
        listening = MagicMock(status=ports.psutil.CONN_LISTEN, laddr=MagicMock(port=3100), pid=None)
        monkeypatch.setattr(ports.psutil, "net_connections", lambda kind: [listening])
        assert ports.get_process_using_port(3100) == (None, "unknown")
