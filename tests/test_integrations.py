import pytest

from scaffolder_azure.config import Config
from scaffolder_azure.errors import ConfigurationError
from scaffolder_azure.integrations import ScmIntegrations


def test_default_azure_host_is_always_registered() -> None:
    integrations = ScmIntegrations.from_config(Config())
    integration = integrations.by_host("dev.azure.com")
    assert integration is not None
    assert integration.type == "azure"
    assert integration.azure is not None
    assert integration.azure.credentials == ()


def test_unknown_host_is_not_registered(integrations: ScmIntegrations) -> None:
    assert integrations.by_host("example.org") is None


def test_azure_entries_are_parsed(integrations: ScmIntegrations) -> None:
    azure = integrations.azure_by_host("dev.azure.com")
    assert azure is not None
    assert [c.organizations for c in azure.credentials] == [("contoso",), ()]
    assert azure.credentials[0].personal_access_token == "contoso-pat"

    internal = integrations.azure_by_host("ado.internal.example")
    assert internal is not None
    assert internal.token == "legacy-token"


def test_other_providers_register_host_and_type(integrations: ScmIntegrations) -> None:
    github = integrations.by_host("github.com")
    assert github is not None
    assert github.type == "github"
    assert integrations.azure_by_host("github.com") is None


def test_tokens_are_hidden_from_repr(integrations: ScmIntegrations) -> None:
    azure = integrations.azure_by_host("dev.azure.com")
    assert "contoso-pat" not in repr(azure)


def test_incomplete_client_secret_credential_is_rejected() -> None:
    config = Config({"integrations": {"azure": [{"credentials": [{"clientId": "id", "tenantId": "t"}]}]}})
    with pytest.raises(ConfigurationError, match="clientSecret"):
        ScmIntegrations.from_config(config)


def test_organizations_only_allowed_for_hosted_service() -> None:
    config = Config(
        {
            "integrations": {
                "azure": [
                    {
                        "host": "ado.internal.example",
                        "credentials": [{"organizations": ["x"], "personalAccessToken": "p"}],
                    }
                ]
            }
        }
    )
    with pytest.raises(ConfigurationError, match="organizations"):
        ScmIntegrations.from_config(config)
