"""Shared pytest fixtures for the create-nextws test suite.

Provides reusable fixtures for:
- Env templates and compose files written into a temporary project
- Scripted answers for interactive prompts
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest


ENV_TEMPLATE = textwrap.dedent(
    """\
    # NextJS
    NEXT_PUBLIC_NEXTJS_URL=http://localhost:3100
    NEXTAUTH_URL="http://localhost:3100"
    NEXTAUTH_SECRET=XXXXXXXXXXXX
    NEXT_PORT=3100
    NEXT_DEV_PORT=3101

    # Strapi
    NEXT_PUBLIC_STRAPI_BACKEND_URL=http://localhost:1337
    STRAPI_PORT=1337
    STRAPI_DATABASE_PORT=5432
    DATABASE_NAME=strapi
    #WIN DOCKER_HOST_IP=host.docker.internal
    #MAC DOCKER_HOST_IP=docker.for.mac.localhost
    DOCKER_NETWORK=webproxy
    NODE_ENV=development
    GITHUB_ID=
    GITHUB_SECRET=
    """
)


COMPOSE_TEMPLATE = textwrap.dedent(
    """\
    services:
      nextws-frontend:
        container_name: nextws-frontend
        image: nextws-frontend:latest
        ports:
          - "${NEXT_PORT}:3000"
        depends_on:
          - nextws-strapi
      nextws-frontend-dev:
        container_name: nextws-frontend-dev
        #WIN extra_hosts:
        #WIN   - "nextws-strapi:host-gateway"
      nextws-strapi:
        container_name: nextws-strapi
        depends_on:
          - nextws-strapi-db
      nextws-strapi-db:
        container_name: nextws-strapi-db
        #MAC platform: linux/amd64
      nextws-strapi-adminer:
        container_name: nextws-strapi-adminer
    networks:
      default:
        name: ${DOCKER_NETWORK}
        external: true
    """
)


@pytest.fixture
def env_template() -> str:
    return ENV_TEMPLATE


@pytest.fixture
def compose_template() -> str:
    return COMPOSE_TEMPLATE


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A cloned-looking project with .env.example and docker-compose.yml."""
    project = tmp_path / "myapp"
    project.mkdir()
    (project / ".env.example").write_text(ENV_TEMPLATE, encoding="utf-8")
    (project / "docker-compose.yml").write_text(COMPOSE_TEMPLATE, encoding="utf-8")
    return project


@pytest.fixture
def scripted_ask() -> Callable[..., Callable[[str, str], str]]:
    """Build an ``ask(message, default)`` that replies from a dict.

    Messages without a scripted answer get the default, the same as an
    empty answer at the real prompt. Every call is recorded on ``.calls``.
    """

    def factory(answers: dict | None = None):
        answers = answers or {}

        def ask(message: str, default: str = "") -> str:
            ask.calls.append((message, default))
            for needle, answer in answers.items():
                if needle in message:
                    return answer
            return default

        ask.calls = []
        return ask

    return factory
