"""
Check that the block of host ports the stack will publish is free.
"""

import errno
import socket
from typing import Dict, List, NamedTuple, Optional, Tuple

import psutil

from .errors import PortProbeError, PortRangeUnavailableError

DEFAULT_PORT_START = 3100
DEFAULT_PORT_COUNT = 10

_IN_USE_ERRNOS = {errno.EADDRINUSE}
if hasattr(errno, "WSAEADDRINUSE"):
    _IN_USE_ERRNOS.add(errno.WSAEADDRINUSE)


class PortStatus(NamedTuple):
    port: int
    is_open: bool


def is_port_free(port: int) -> bool:
    """Check if a port is free by trying to bind to it.

    Only "address in use" counts as occupied. Anything else (permissions,
    firewall, bad port) raises PortProbeError.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            s.bind(("0.0.0.0", port))
            return True
    except OSError as e:
        if e.errno in _IN_USE_ERRNOS or getattr(e, "winerror", None) == 10048:
            return False
        raise PortProbeError(port, e) from e


def check_port_range(start: int, count: int) -> List[PortStatus]:
    """Probe every port in [start, start + count) and report each one."""
    if count < 1:
        raise ValueError(f"Port count must be positive, got {count}")
    if start < 1 or start + count - 1 > 65535:
        raise ValueError(f"Port range {start}-{start + count - 1} is outside 1-65535")

    return [PortStatus(port, is_port_free(port)) for port in range(start, start + count)]


def get_process_using_port(port: int) -> Optional[Tuple[Optional[int], str]]:
    """Find the listener on a port as (pid, name); None when there is none or the OS refuses."""
    try:
        listeners = [
            conn for conn in psutil.net_connections(kind='inet')
            if conn.status == psutil.CONN_LISTEN and conn.laddr and conn.laddr.port == port
        ]
    except psutil.AccessDenied:
        return None
    if not listeners:
        return None

    pid = listeners[0].pid
    if not pid:
        return None, "unknown"
    try:
        return pid, psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return pid, "unknown"


def ensure_port_range_free(start: int, count: int) -> List[PortStatus]:
    """Raise PortRangeUnavailableError unless every port in the range is free."""
    statuses = check_port_range(start, count)
    occupied = [status.port for status in statuses if not status.is_open]
    if occupied:
        owners: Dict[int, Tuple[Optional[int], str]] = {}
        for port in occupied:
            owner = get_process_using_port(port)
            if owner is not None:
                owners[port] = owner
        raise PortRangeUnavailableError(start, count, occupied, owners)
    return statuses


def format_port_report(error: PortRangeUnavailableError) -> str:
    """Describe the occupied ports of a failed range check."""
    lines = [f"❌ {len(error.occupied)} port(s) in range {error.start}-{error.start + error.count - 1} in use"]
    for port in error.occupied:
        lines.append(f"   └─ {port}")
        owner = error.owners.get(port)
        if owner:
            pid, name = owner
            if pid is not None:
                lines.append(f"      └─ Process: {name} (PID: {pid})")
            else:
                lines.append(f"      └─ Process: {name}")
    return "\n".join(lines)
