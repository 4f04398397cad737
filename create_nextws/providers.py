"""
Collect OAuth client credentials for the identity providers the user picked.
"""

from typing import Callable, Dict, NamedTuple, Sequence


class Provider(NamedTuple):
    name: str
    title: str
    registration_url: str

    @property
    def env_prefix(self) -> str:
        return self.name.upper()


PROVIDERS: Dict[str, Provider] = {
    provider.name: provider for provider in (
        Provider("github", "GitHub", "https://github.com/settings/developers"),
        Provider("google", "Google", "https://console.cloud.google.com/apis/credentials"),
        Provider("twitter", "Twitter", "https://developer.twitter.com/en/portal/dashboard"),
        Provider("discord", "Discord", "https://discord.com/developers/applications"),
        Provider("spotify", "Spotify", "https://developer.spotify.com/dashboard"),
        Provider("battlenet", "Battle.net", "https://develop.battle.net/access/clients"),
    )
}


def homepage_url(ports_start: int) -> str:
    return f"http://localhost:{ports_start}"


def callback_url(provider: str, ports_start: int) -> str:
    return f"{homepage_url(ports_start)}/api/auth/callback/{provider}"


def provider_choices():
    """Options for the provider multi-select."""
    return [(provider.name, provider.title) for provider in PROVIDERS.values()]


def configure_providers(selected: Sequence[str], ports_start: int,
                        ask: Callable[[str, str], str]) -> Dict[str, str]:
    """Ask for the client id and secret of every selected provider.

    Returns a mapping of ``<PROVIDER>_ID`` / ``<PROVIDER>_SECRET`` env keys
    to the values entered.
    """
    values: Dict[str, str] = {}
    for name in selected:
        provider = PROVIDERS[name]
        print(f"\n🔑 {provider.title} OAuth app")
        print(f"   Register app: {provider.registration_url}")
        print(f"   Homepage URL: {homepage_url(ports_start)}")
        print(f"   Callback URL: {callback_url(provider.name, ports_start)}")
        values[f"{provider.env_prefix}_ID"] = ask(f"   {provider.title} Client ID", "")
        values[f"{provider.env_prefix}_SECRET"] = ask(f"   {provider.title} Client Secret", "")
    return values
