"""
Rename the template's docker-compose services and resolve platform lines.
"""

import re
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import yaml

from . import platforms
from .envfile import Mode
from .errors import ComposeError, TemplateWriteError
from .status import SilentReporter, StatusReporter

COMPOSE_NAME = "docker-compose.yml"

# Canonical service token -> role suffix used for smart naming
SERVICE_TOKENS: Dict[str, str] = {
    "nextws-frontend": "frontend",
    "nextws-frontend-dev": "frontend-dev",
    "nextws-strapi-db": "strapi-db",
    "nextws-strapi-adminer": "strapi-adminer",
    "nextws-strapi": "strapi",
}


def resolve_service_names(mode: Mode, project_name: str,
                          ask: Optional[Callable[[str, str], str]] = None) -> Dict[str, str]:
    """Decide the final name of every canonical service."""
    names = {}
    for token, suffix in SERVICE_TOKENS.items():
        if mode is Mode.SMART:
            names[token] = f"{project_name}-{suffix}"
        else:
            if ask is None:
                raise ValueError("A prompt is required to name services outside smart mode")
            names[token] = ask(f"Service name for {token}", token) or token

    missing = [token for token in SERVICE_TOKENS if not names.get(token)]
    if missing:
        raise ValueError(f"Unresolved service tokens: {', '.join(missing)}")
    return names


def substitute_tokens(text: str, names: Dict[str, str]) -> str:
    """Replace every canonical token with its resolved name in a single pass.

    Longer tokens are tried first so "nextws-strapi-db" is not read as
    "nextws-strapi" followed by "-db".
    """
    tokens = sorted(names, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(token) for token in tokens))
    return pattern.sub(lambda match: names[match.group(0)], text)


def rewrite_compose_text(text: str, names: Dict[str, str], platform: Optional[str]) -> str:
    # Substitution runs first so conditional lines are renamed too
    return platforms.filter_text(substitute_tokens(text, names), platform)


def list_services(text: str) -> List[str]:
    """Parse compose YAML and return its service names."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ComposeError(f"Rewritten compose file is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        return []
    services = data.get('services') or {}
    return list(services.keys()) if isinstance(services, dict) else []


def configure_docker_compose(project_dir: Path, mode: Mode, project_name: str,
                             ask: Optional[Callable[[str, str], str]] = None,
                             status: Optional[StatusReporter] = None,
                             platform: Optional[str] = platforms.AUTO) -> List[str]:
    """Rewrite <project_dir>/docker-compose.yml in place; returns its services."""
    status = status or SilentReporter()
    platform = platforms.resolve(platform)

    names = resolve_service_names(mode, project_name, ask)
    compose_path = Path(project_dir) / COMPOSE_NAME

    status.start("Configuring docker-compose.yml...")
    try:
        text = compose_path.read_text(encoding="utf-8")
        rewritten = rewrite_compose_text(text, names, platform)
        services = list_services(rewritten)
        compose_path.write_text(rewritten, encoding="utf-8")
    except ComposeError as e:
        status.fail()
        print(f"Error parsing YAML file '{compose_path}': {e}", file=sys.stderr)
        raise
    except OSError as e:
        status.fail()
        print(f"Error writing to '{compose_path}': {e}", file=sys.stderr)
        raise TemplateWriteError(f"Could not rewrite {compose_path}: {e}") from e
    status.succeed()
    return services
