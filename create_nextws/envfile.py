"""
Generate a project's .env file from its .env.example template.

Every template line is parsed into a TemplateEntry, each key is resolved to
its final value according to the run's Mode, and the result is written back
in template order with every value double-quoted.
"""

import math
import os
import secrets
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from . import platforms, prompts
from .errors import TemplateWriteError
from .status import SilentReporter, StatusReporter

TEMPLATE_NAME = ".env.example"
ENV_NAME = ".env"

# Template values starting with this marker are replaced by random hex
SECRET_MARKER = "XXXX"

FRONTEND_URL_KEY = "NEXT_PUBLIC_NEXTJS_URL"
AUTH_URL_KEY = "NEXTAUTH_URL"
BACKEND_URL_KEY = "NEXT_PUBLIC_STRAPI_BACKEND_URL"
BACKEND_PORT_OFFSET = 4


class Mode(Enum):
    SMART = "smart"
    AUTOMATIC = "automatic"
    MANUAL = "manual"

    @classmethod
    def from_autogen(cls, autogen: bool) -> "Mode":
        """Map the old boolean autogen switch onto a mode."""
        return cls.AUTOMATIC if autogen else cls.MANUAL


class LineKind(Enum):
    PLAIN = "plain"
    COMMENT = "comment"
    BLANK = "blank"
    CONDITIONAL = "conditional"


class TemplateEntry(NamedTuple):
    key: str
    raw_default: str
    kind: LineKind
    platform: Optional[str] = None


class Category(NamedTuple):
    name: str
    predicate: Callable[[str], bool]


CATEGORIES: Tuple[Category, ...] = (
    Category("URL & Ports", lambda key: key.endswith("_PORT")
             or key in (FRONTEND_URL_KEY, AUTH_URL_KEY, BACKEND_URL_KEY)),
    Category("Database", lambda key: "DATABASE" in key and not key.endswith("_PORT")),
    Category("Advanced", lambda key: key in ("NODE_ENV", "HOST")),
    Category("Docker", lambda key: "DOCKER" in key),
    Category("Letsencrypt", lambda key: key in ("LETSENCRYPT_EMAIL", "BASE_DOMAIN",
                                                "STRAPI_SUB_DOMAIN", "SUB_DOMAIN")),
)

CATEGORY_NAMES = [category.name for category in CATEGORIES]


def classify_key(key: str) -> List[str]:
    """Return the names of every category whose predicate matches the key."""
    return [category.name for category in CATEGORIES if category.predicate(key)]


def is_selected(key: str, chosen: Sequence[str]) -> bool:
    return any(name in chosen for name in classify_key(key))


def parse_line(line: str, platform: Optional[str]) -> Optional[TemplateEntry]:
    """Parse one template line; returns None for lines that produce no output."""
    unwrapped, marker = platforms.unwrap_line(line, platform)
    if unwrapped is None:
        return None

    stripped = unwrapped.strip()
    if not stripped:
        # An unwrapped "#WIN" with nothing after it is not a blank line of the template
        return None if marker else TemplateEntry("", "", LineKind.BLANK)
    if stripped.startswith("#"):
        return TemplateEntry("", stripped, LineKind.COMMENT)

    if "=" not in stripped or not stripped.split("=", 1)[0].strip():
        print(f"⚠️  Warning: Skipping malformed template line: {line.rstrip()}")
        return None

    key, value = stripped.split("=", 1)
    kind = LineKind.CONDITIONAL if marker else LineKind.PLAIN
    return TemplateEntry(key.strip(), value.strip().replace('"', ""), kind, marker)


def parse_template(text: str, platform: Optional[str] = None) -> List[TemplateEntry]:
    """Parse template text into the ordered entries that make it into the output."""
    entries = []
    for line in text.splitlines():
        entry = parse_line(line, platform)
        if entry is not None and entry.kind is not LineKind.COMMENT:
            entries.append(entry)
    return entries


def read_template(template_path: Path, platform: Optional[str] = None) -> List[TemplateEntry]:
    """Read and parse an env template file."""
    text = Path(template_path).read_text(encoding="utf-8")
    return parse_template(text, platform)


def generate_secret(placeholder: str) -> str:
    """Random hex string as long as the placeholder (rounded up to even)."""
    return secrets.token_hex(math.ceil(len(placeholder) / 2))


@dataclass
class EnvSettings:
    """Everything value resolution needs to know about the current run."""

    mode: Mode
    ports_start: int
    categories: List[str] = field(default_factory=list)
    provider_values: Dict[str, str] = field(default_factory=dict)
    ask: Callable[[str, str], str] = prompts.ask


def _smart_value(key: str, settings: EnvSettings, next_port: int) -> Tuple[Optional[str], int]:
    if key in (FRONTEND_URL_KEY, AUTH_URL_KEY):
        return f"http://localhost:{settings.ports_start}", next_port
    if key == BACKEND_URL_KEY:
        return f"http://localhost:{settings.ports_start + BACKEND_PORT_OFFSET}", next_port
    if key.endswith("_PORT"):
        return str(next_port), next_port + 1
    return None, next_port


def resolve_value(entry: TemplateEntry, settings: EnvSettings, next_port: int) -> Tuple[str, int]:
    """Resolve the final value of one entry.

    Returns the value together with the port counter to use for the next
    entry; only smart-mode ``_PORT`` keys advance it.
    """
    key, default = entry.key, entry.raw_default

    if default.startswith(SECRET_MARKER):
        return generate_secret(default), next_port

    if settings.mode is Mode.MANUAL and is_selected(key, settings.categories):
        answer = settings.ask(key, default)
        return (answer if answer else default), next_port

    if settings.mode is Mode.SMART:
        value, next_port = _smart_value(key, settings, next_port)
        if value is not None:
            return value, next_port

    return settings.provider_values.get(key, default), next_port


def resolve_entries(entries: Sequence[TemplateEntry], settings: EnvSettings) -> List[Tuple[str, str]]:
    """Resolve all entries in template order.

    Blank entries come back as ``("", "")`` so the writer can reproduce them.
    """
    resolved = []
    next_port = settings.ports_start
    for entry in entries:
        if entry.kind is LineKind.BLANK:
            resolved.append(("", ""))
            continue
        value, next_port = resolve_value(entry, settings, next_port)
        resolved.append((entry.key, value))
    return resolved


def render_env(resolved: Sequence[Tuple[str, str]]) -> str:
    lines = []
    for key, value in resolved:
        lines.append(f'{key}="{value}"\n' if key else "\n")
    return "".join(lines)


def generate_env(project_dir: Path, settings: EnvSettings,
                 status: Optional[StatusReporter] = None,
                 platform: Optional[str] = platforms.AUTO) -> Path:
    """Write <project_dir>/.env from <project_dir>/.env.example."""
    status = status or SilentReporter()
    platform = platforms.resolve(platform)

    project_dir = Path(project_dir)
    template_path = project_dir / TEMPLATE_NAME
    env_path = project_dir / ENV_NAME

    status.start("Generating .env...")
    try:
        entries = read_template(template_path, platform)
        content = render_env(resolve_entries(entries, settings))
        env_path.write_text(content, encoding="utf-8")
    except OSError as e:
        status.fail()
        print(f"Error generating '{env_path}' from '{template_path}': {e}", file=sys.stderr)
        raise TemplateWriteError(f"Could not generate {env_path}: {e}") from e
    status.succeed()
    return env_path


def load_env_file(env_file_path: Path) -> Dict[str, str]:
    """Read a generated .env back into a dict, in file order."""
    text = Path(env_file_path).read_text(encoding="utf-8")
    env_vars = {}
    for entry in parse_template(text, platforms.current_platform()):
        if entry.kind is LineKind.BLANK:
            continue
        value = entry.raw_default
        if len(value) >= 2 and value[0] == value[-1] == "'":
            value = value[1:-1]
        env_vars[entry.key] = value
    return env_vars


def apply_env(env_file_path: Path, override: bool = True) -> Dict[str, str]:
    """Load a .env file into os.environ and return what was read."""
    env_vars = load_env_file(env_file_path)
    for key, value in env_vars.items():
        if override or key not in os.environ:
            os.environ[key] = value
    return env_vars
