"""
credentials.py

Responsibility: Resolve the token used to talk to an Azure DevOps host.

Precedence (highest first):
1) a token passed explicitly in the action input
2) credentials from the integrations config, via the credentials provider

Credentials are resolved fresh on every call; nothing is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol
from urllib.parse import urlparse

import requests

from scaffolder_azure.azure_client import (
    AuthHandler,
    get_bearer_handler,
    get_personal_access_token_handler,
)
from scaffolder_azure.errors import ConfigurationError, CredentialError
from scaffolder_azure.integrations import (
    AZURE_HOST,
    AzureCredentialConfig,
    AzureIntegrationConfig,
    ScmIntegrations,
)

logger = logging.getLogger(__name__)

DEFAULT_ORGANIZATION = "notempty"

AZURE_DEVOPS_SCOPE = "499b84ac-1321-427f-aa17-267ca6975798/.default"
AAD_TOKEN_URL = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"


@dataclass(frozen=True)
class AzureDevOpsCredentials:
    type: Literal["pat", "bearer"]
    token: str = field(repr=False)


class AzureDevOpsCredentialsProvider(Protocol):
    def get_credentials(self, url: str) -> AzureDevOpsCredentials | None: ...


def organization_url(host: str, organization: str) -> str:
    return f"https://{host}/{organization}"


def _fetch_client_secret_token(cred: AzureCredentialConfig, *, timeout: float = 30) -> str:
    """
    Exchange an Azure AD app registration for an access token scoped to
    Azure DevOps (OAuth2 client-credentials grant).
    """
    url = AAD_TOKEN_URL.format(tenant_id=cred.tenant_id)
    r = requests.post(
        url,
        data={
            "grant_type": "client_credentials",
            "client_id": cred.client_id,
            "client_secret": cred.client_secret,
            "scope": AZURE_DEVOPS_SCOPE,
        },
        timeout=timeout,
    )
    if r.status_code >= 400:
        try:
            payload = r.json()
        except ValueError:
            payload = {"error_description": r.text}
        raise CredentialError(
            f"Failed to obtain Azure AD token for client {cred.client_id}: "
            f"{payload.get('error_description') or payload.get('error') or r.status_code}"
        )
    return str(r.json()["access_token"])


class DefaultAzureDevOpsCredentialsProvider:
    """
    Maps an organization URL to credentials from `integrations.azure`.

    For a given host, a credential listing the URL's organization wins over a
    credential without organizations; the integration's legacy `token` is the
    last resort.
    """

    def __init__(self, integrations: ScmIntegrations) -> None:
        self._integrations = integrations

    @classmethod
    def from_integrations(cls, integrations: ScmIntegrations) -> DefaultAzureDevOpsCredentialsProvider:
        return cls(integrations)

    def _select(self, config: AzureIntegrationConfig, organization: str | None) -> AzureCredentialConfig | None:
        if organization:
            for cred in config.credentials:
                if organization in cred.organizations:
                    return cred
        for cred in config.credentials:
            if not cred.organizations:
                return cred
        return None

    def get_credentials(self, url: str) -> AzureDevOpsCredentials | None:
        parsed = urlparse(url)
        host = parsed.hostname or ""
        parts = [p for p in parsed.path.split("/") if p]
        organization = parts[0] if parts else None

        config = self._integrations.azure_by_host(host)
        if config is None:
            return None

        cred = self._select(config, organization)
        if cred is not None:
            if cred.personal_access_token:
                return AzureDevOpsCredentials(type="pat", token=cred.personal_access_token)
            logger.debug("Requesting Azure AD token for client %s", cred.client_id)
            return AzureDevOpsCredentials(type="bearer", token=_fetch_client_secret_token(cred))

        if config.token:
            return AzureDevOpsCredentials(type="pat", token=config.token)
        return None


@dataclass(frozen=True)
class ResolvedCredentials:
    url: str
    host: str
    credentials: AzureDevOpsCredentials
    explicit: bool

    @property
    def token(self) -> str:
        return self.credentials.token


def resolve_credentials(
    integrations: ScmIntegrations,
    *,
    server: str | None = None,
    organization: str | None = None,
    token: str | None = None,
    provider: AzureDevOpsCredentialsProvider | None = None,
) -> ResolvedCredentials:
    """
    Resolve the organization URL and the credentials to use for it.

    An empty `token` counts as not given, so the provider is consulted.

    Raises ConfigurationError when no integration matches the host and
    CredentialError when neither `token` nor the provider yields a token.
    """
    host = server or AZURE_HOST
    if integrations.by_host(host) is None:
        raise ConfigurationError(
            f"No matching integration configuration for host {host}, please check your integrations config"
        )

    url = organization_url(host, organization or DEFAULT_ORGANIZATION)

    if token:
        logger.debug("Using token from action input for %s", url)
        return ResolvedCredentials(url=url, host=host, credentials=AzureDevOpsCredentials("pat", token), explicit=True)

    if provider is None:
        provider = DefaultAzureDevOpsCredentialsProvider.from_integrations(integrations)
    credentials = provider.get_credentials(url)
    if credentials is None:
        raise CredentialError(f"No credentials provided {url}, please check your integrations config")

    logger.debug("Using %s credentials from integrations config for %s", credentials.type, url)
    return ResolvedCredentials(url=url, host=host, credentials=credentials, explicit=False)


def get_auth_handler(resolved: ResolvedCredentials) -> AuthHandler:
    if resolved.explicit or resolved.credentials.type == "pat":
        return get_personal_access_token_handler(resolved.token)
    return get_bearer_handler(resolved.token)
