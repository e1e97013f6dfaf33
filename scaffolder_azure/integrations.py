"""
integrations.py

Responsibility: Parse the `integrations` config section into a registry keyed
by hostname.

Azure DevOps entries are parsed fully (host, legacy token, credentials list).
Other providers are only registered host -> type so that `by_host` can tell
that a host is known.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from scaffolder_azure.config import Config
from scaffolder_azure.errors import ConfigurationError

AZURE_HOST = "dev.azure.com"

_DEFAULT_HOSTS = {
    "github": "github.com",
    "gitlab": "gitlab.com",
    "bitbucketCloud": "bitbucket.org",
    "gitea": None,
    "gerrit": None,
    "bitbucketServer": None,
}


@dataclass(frozen=True)
class AzureCredentialConfig:
    """
    One `integrations.azure[].credentials[]` entry.

    Exactly one kind is set: a personal access token, or an Azure AD app
    registration (client id + secret + tenant).
    """

    organizations: tuple[str, ...] = ()
    personal_access_token: str | None = field(default=None, repr=False)
    client_id: str | None = None
    client_secret: str | None = field(default=None, repr=False)
    tenant_id: str | None = None


@dataclass(frozen=True)
class AzureIntegrationConfig:
    host: str = AZURE_HOST
    token: str | None = field(default=None, repr=False)
    credentials: tuple[AzureCredentialConfig, ...] = ()


@dataclass(frozen=True)
class ScmIntegration:
    type: str
    host: str
    azure: AzureIntegrationConfig | None = None


def _read_azure_credential(c: Config) -> AzureCredentialConfig:
    organizations = tuple(c.get_optional_string_array("organizations") or ())
    pat = c.get_optional_string("personalAccessToken")
    client_id = c.get_optional_string("clientId")
    client_secret = c.get_optional_string("clientSecret")
    tenant_id = c.get_optional_string("tenantId")

    if pat and (client_id or client_secret or tenant_id):
        raise ConfigurationError(
            "Azure DevOps credential must set either personalAccessToken or clientId/clientSecret/tenantId, not both"
        )
    if not pat:
        if not (client_id and client_secret and tenant_id):
            raise ConfigurationError(
                "Azure DevOps credential requires personalAccessToken, or all of clientId, clientSecret and tenantId"
            )
    return AzureCredentialConfig(
        organizations=organizations,
        personal_access_token=pat,
        client_id=client_id,
        client_secret=client_secret,
        tenant_id=tenant_id,
    )


def read_azure_integration_config(c: Config) -> AzureIntegrationConfig:
    host = (c.get_optional_string("host") or AZURE_HOST).strip()
    if not host or "/" in host:
        raise ConfigurationError(f"Invalid Azure integration config, '{host}' is not a valid host")

    credentials = tuple(_read_azure_credential(item) for item in c.get_optional_config_array("credentials") or [])

    # Organizations only make sense for the hosted service.
    if host != AZURE_HOST and any(cred.organizations for cred in credentials):
        raise ConfigurationError(
            f"Invalid Azure integration config for {host}, credential organizations are only supported for {AZURE_HOST}"
        )

    return AzureIntegrationConfig(host=host, token=c.get_optional_string("token"), credentials=credentials)


class ScmIntegrations:
    """Registry of configured integrations, looked up by hostname."""

    def __init__(self, integrations: list[ScmIntegration]) -> None:
        self._by_host: dict[str, ScmIntegration] = {}
        for integration in integrations:
            # First entry for a host wins.
            self._by_host.setdefault(integration.host.lower(), integration)

    @classmethod
    def from_config(cls, config: Config) -> ScmIntegrations:
        section = config.get_optional_config("integrations") or Config()
        out: list[ScmIntegration] = []

        azure = [read_azure_integration_config(c) for c in section.get_optional_config_array("azure") or []]
        if not any(a.host == AZURE_HOST for a in azure):
            azure.append(AzureIntegrationConfig())
        out.extend(ScmIntegration(type="azure", host=a.host, azure=a) for a in azure)

        for provider, default_host in _DEFAULT_HOSTS.items():
            entries = section.get_optional_config_array(provider) or []
            for entry in entries:
                host = entry.get_optional_string("host") or default_host
                if not host:
                    raise ConfigurationError(f"Missing host in integrations.{provider} config")
                out.append(ScmIntegration(type=provider, host=host))
            if not entries and default_host:
                out.append(ScmIntegration(type=provider, host=default_host))

        return cls(out)

    def by_host(self, host: str) -> ScmIntegration | None:
        return self._by_host.get(host.lower())

    def azure_by_host(self, host: str) -> AzureIntegrationConfig | None:
        integration = self.by_host(host)
        if integration is None or integration.type != "azure":
            return None
        return integration.azure
