"""
Wrappers around the external tools the wizard drives: git, yarn/npm and docker.
"""

import os
import re
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import ExternalToolError, PreconditionError, TemplateWriteError

TEMPLATE_REPO = "https://github.com/yeonv/meeting"
TEMPLATE_NAME = "meeting"
DEFAULT_DOCKER_NETWORK = "webproxy"


def run(command: Sequence[str], cwd: Optional[Path] = None, quiet: bool = False) -> subprocess.CompletedProcess:
    """Run a command, raising ExternalToolError on a non-zero exit."""
    try:
        result = subprocess.run(
            list(command),
            cwd=cwd,
            capture_output=quiet,
            text=True,
        )
    except FileNotFoundError as e:
        # Mirror the shell's "command not found" status
        raise ExternalToolError(list(command), 127) from e
    if result.returncode != 0:
        raise ExternalToolError(list(command), result.returncode)
    return result


def git_clone(repo: str, target: Path, branch: Optional[str] = None) -> None:
    """Shallow-clone a repository and drop its history."""
    branch_args = ["-b", branch] if branch else []
    run(["git", "clone", *branch_args, repo, str(target), "--depth", "1"], quiet=True)
    shutil.rmtree(Path(target) / ".git", ignore_errors=True)


def detect_package_manager(candidates: Sequence[str] = ("yarn", "npm")) -> str:
    """Return the path of the first package manager that answers to '-v'.

    Candidates are resolved with shutil.which so Windows ``.cmd`` shims
    are found without going through a shell.
    """
    for manager in candidates:
        executable = shutil.which(manager)
        if executable is None:
            continue
        try:
            run([executable, "-v"], quiet=True)
            return executable
        except ExternalToolError:
            continue
    raise PreconditionError(
        f"No available package manager! ({' or '.join(f'`{m}`' for m in candidates)} is required)"
    )


def install_dependencies(project_dir: Path, manager: str) -> None:
    run([manager, "install"], cwd=Path(project_dir) / "frontend")


def _replace_in_file(path: Path, pattern: str, replacement: str) -> bool:
    if not path.exists():
        return False
    text = path.read_text(encoding="utf-8")
    updated = re.sub(pattern, lambda match: replacement, text)
    if updated != text:
        path.write_text(updated, encoding="utf-8")
    return True


def replace_strings(project_dir: Path, project_name: str, primary: str = "") -> List[Path]:
    """Rename the template project in its package manifests.

    A non-empty ``primary`` also replaces the default primary color in the
    root package.json. Returns the files that were found (and rewritten
    where they matched).
    """
    project_dir = Path(project_dir)
    root_manifest = project_dir / "package.json"
    replacements = [
        (project_dir / "frontend" / "package.json", TEMPLATE_NAME, project_name.lower()),
        (project_dir / "frontend" / "package-lock.json", TEMPLATE_NAME, project_name.lower()),
        (root_manifest, r'"version": "\d+\.\d+\.\d+"', '"version": "0.0.1"'),
    ]
    if primary:
        replacements.append(
            (root_manifest, r'"NEXTWS_PRIMARY_COLOR": "default"', f'"NEXTWS_PRIMARY_COLOR": "{primary}"')
        )

    touched = []
    for path, pattern, replacement in replacements:
        try:
            found = _replace_in_file(path, pattern, replacement)
        except (OSError, UnicodeError) as e:
            print(f"Error updating '{path}': {e}", file=sys.stderr)
            raise TemplateWriteError(f"Could not update {path}: {e}") from e
        if found and path not in touched:
            touched.append(path)
    return touched


def create_network(name: str) -> bool:
    """Create a docker network; returns False if it already existed."""
    command = ["docker", "network", "create", name]
    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ExternalToolError(command, 127) from e
    if result.returncode == 0:
        return True
    if "already exists" in (result.stderr or ""):
        return False
    raise ExternalToolError(command, result.returncode)


def start_stack(project_dir: Path, network: Optional[str] = None) -> None:
    """Create the network, pull images and start the compose stack detached."""
    network = network or os.environ.get("DOCKER_NETWORK") or DEFAULT_DOCKER_NETWORK
    create_network(network)
    run(["docker", "compose", "pull"], cwd=project_dir)
    run(["docker", "compose", "up", "-d"], cwd=project_dir)
