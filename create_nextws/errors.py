"""
Exceptions raised while scaffolding a project.
"""

from typing import List, Optional


class CreateNextwsError(Exception):
    """Base class for every error raised by create-nextws."""


class PreconditionError(CreateNextwsError):
    """The environment is not in a state the wizard can continue from."""


class TargetExistsError(PreconditionError):
    """The project directory already exists."""

    def __init__(self, target: str):
        super().__init__(f'Directory "{target}" already exists.')
        self.target = target


class PortRangeUnavailableError(PreconditionError):
    """At least one port of the requested range is occupied."""

    def __init__(self, start: int, count: int, occupied: List[int], owners: Optional[dict] = None):
        ports = ", ".join(str(port) for port in occupied)
        super().__init__(f"Ports {start}-{start + count - 1} are not available (in use: {ports})")
        self.start = start
        self.count = count
        self.occupied = occupied
        self.owners = owners or {}


class PortProbeError(CreateNextwsError):
    """Binding a probe socket failed for a reason other than the port being in use."""

    def __init__(self, port: int, cause: OSError):
        super().__init__(f"Could not probe port {port}: {cause}")
        self.port = port
        self.cause = cause


class ExternalToolError(CreateNextwsError):
    """An external command (git, yarn/npm, docker) exited with a non-zero status."""

    def __init__(self, command: List[str], returncode: int):
        super().__init__(f"'{' '.join(command)}' exited with status {returncode}")
        self.command = command
        self.returncode = returncode


class TemplateWriteError(CreateNextwsError):
    """Reading or writing a generated project file failed."""


class ComposeError(CreateNextwsError):
    """The rewritten docker-compose file is not valid YAML."""
