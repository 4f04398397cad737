#!/usr/bin/env python3
"""
CLI wizard that scaffolds a NextJS + Strapi + Websocket project.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from . import __version__, prompts
from .compose import configure_docker_compose
from .envfile import CATEGORY_NAMES, EnvSettings, Mode, apply_env, generate_env, load_env_file
from .errors import (
    ComposeError,
    ExternalToolError,
    PortProbeError,
    PortRangeUnavailableError,
    PreconditionError,
    TargetExistsError,
    TemplateWriteError,
)
from .ports import DEFAULT_PORT_COUNT, DEFAULT_PORT_START, ensure_port_range_free, format_port_report
from .providers import configure_providers, provider_choices
from .status import StatusReporter
from .tools import (
    DEFAULT_DOCKER_NETWORK,
    TEMPLATE_REPO,
    detect_package_manager,
    git_clone,
    install_dependencies,
    replace_strings,
    start_stack,
)

MODE_CHOICES = [
    (Mode.SMART.value, "Derive ports, URLs and service names from the project name"),
    (Mode.AUTOMATIC.value, "Keep the template defaults, generate secrets"),
    (Mode.MANUAL.value, "Edit selected categories of values by hand"),
]


def format_docs(project_name: Optional[str] = None, env: Optional[Mapping[str, str]] = None,
                services: Optional[List[str]] = None, installed: bool = True) -> str:
    """Format the closing summary with service URLs and next steps."""
    env = os.environ if env is None else env
    name = project_name or "NextWS"
    network = env.get("DOCKER_NETWORK") or DEFAULT_DOCKER_NETWORK

    output_lines = []
    output_lines.append("🚀 Welcome to NextWS")
    output_lines.append("   NextJS + Websocket + Strapi -- Dockerized")
    output_lines.append("=" * 50)
    output_lines.append(f"📦 Name:    {name}")
    output_lines.append(f"🌐 Network: {network}")
    output_lines.append("")

    output_lines.append("🔌 Services:")
    output_lines.append(f"   └─ NextJS - prod: http://localhost:{env.get('NEXT_PORT') or 3100}")
    output_lines.append(f"   └─ NextJS - dev:  http://localhost:{env.get('NEXT_DEV_PORT') or 3101}")
    output_lines.append(f"   └─ Strapi:        http://localhost:{env.get('STRAPI_PORT') or 1337}")
    output_lines.append(f"      └─ Login Email: {env.get('INIT_ADMIN_EMAIL') or 'admin@strapi.com'}")
    output_lines.append(f"      └─ Password:    {env.get('INIT_ADMIN_PASSWORD') or 'admin'}")

    if services:
        output_lines.append("")
        output_lines.append(f"🐳 Compose services: {', '.join(services)}")

    output_lines.append("")
    output_lines.append("To get started run:")
    output_lines.append("")
    output_lines.append(f"   cd {name}")
    if not installed:
        output_lines.append("   yarn")
    output_lines.append("   yarn dev")
    return "\n".join(output_lines)


def collect_choices(mode: Mode) -> Dict[str, List[str]]:
    """Ask the mode-specific multi-select questions."""
    providers: List[str] = []
    categories: List[str] = []
    if mode is Mode.SMART:
        providers = prompts.choose_many("🔑 OAuth providers:", provider_choices())
    elif mode is Mode.MANUAL:
        categories = prompts.choose_many(
            "🔧 Categories to configure:", [(name, "") for name in CATEGORY_NAMES]
        )
    return {"providers": providers, "categories": categories}


def run_wizard(cwd: Path, repo: str = TEMPLATE_REPO, branch: Optional[str] = None) -> None:
    """Ask all questions, then clone and configure the project."""
    print("🏗️  Create Stack NextJS + Strapi + Websocket by Blade")

    project_name = prompts.ask("Name")
    if not project_name:
        return
    target = Path(cwd) / project_name
    if target.is_dir():
        raise TargetExistsError(project_name)
    primary = prompts.ask("Primary color (empty for default)")

    mode = Mode(prompts.choose("⚙️  Mode:", MODE_CHOICES))
    ports_start = prompts.ask_int("Ports starting range", DEFAULT_PORT_START, max_val=65535 - DEFAULT_PORT_COUNT + 1)
    ensure_port_range_free(ports_start, DEFAULT_PORT_COUNT)
    print(f"✅ Ports {ports_start}-{ports_start + DEFAULT_PORT_COUNT - 1} are available")

    choices = collect_choices(mode)
    install = prompts.confirm("Install Node Modules (this will take time)")
    start_docker = prompts.confirm("Start the docker stack")

    provider_values = configure_providers(choices["providers"], ports_start, prompts.ask)

    status = StatusReporter()
    status.start("Downloading and extracting...")
    try:
        git_clone(repo, target, branch)
    except ExternalToolError:
        status.fail()
        raise

    status.start("Configuring App...")
    try:
        replace_strings(target, project_name, primary)
    except TemplateWriteError:
        status.fail()
        raise

    settings = EnvSettings(
        mode=mode,
        ports_start=ports_start,
        categories=choices["categories"],
        provider_values=provider_values,
        ask=prompts.ask,
    )
    env_path = generate_env(target, settings, status)
    services = configure_docker_compose(target, mode, project_name, prompts.ask, status)

    if install:
        manager = detect_package_manager()
        status.start(f"Installing Node Modules with {Path(manager).stem} (grab a coffee)...")
        try:
            install_dependencies(target, manager)
        except ExternalToolError:
            status.fail()
            raise
        status.succeed()

    if start_docker:
        env_vars = apply_env(env_path)
        status.start("Starting docker stack...")
        try:
            start_stack(target, env_vars.get("DOCKER_NETWORK"))
        except ExternalToolError:
            status.fail()
            raise
        status.succeed()
    else:
        env_vars = load_env_file(env_path)

    print("")
    print(format_docs(project_name, env_vars, services, install))


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Create a NextJS + NextWS + Strapi project. Run without options to start the wizard.",
        prog="create-nextws"
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"NextWS v{__version__}",
        help="Display the current version of create-nextws"
    )

    parser.add_argument(
        "-d", "--docs",
        action="store_true",
        help="Show the service overview of a NextWS project"
    )

    args = parser.parse_args(argv)

    if args.docs:
        print(format_docs())
        sys.exit(0)

    try:
        run_wizard(Path.cwd())
    except TargetExistsError as e:
        print(f"🚧 {e}", file=sys.stderr)
        sys.exit(1)
    except PortRangeUnavailableError as e:
        print(format_port_report(e), file=sys.stderr)
        sys.exit(1)
    except (PreconditionError, PortProbeError) as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    except ExternalToolError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(e.returncode)
    except (TemplateWriteError, ComposeError) as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
